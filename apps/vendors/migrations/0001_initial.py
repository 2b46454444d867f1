from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("locations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("lat", models.FloatField(blank=True, null=True)),
                ("lng", models.FloatField(blank=True, null=True)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=220, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("SUSPENDED", "Suspended"),
                            ("TERMINATED", "Terminated"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("is_online", models.BooleanField(default=True)),
                ("delivery_radius_km", models.FloatField(blank=True, null=True)),
                (
                    "coverage_method",
                    models.CharField(
                        blank=True,
                        choices=[("PINCODE", "Pincode list"), ("RADIUS", "Radius")],
                        default="",
                        max_length=20,
                    ),
                ),
                ("coverage_radius_km", models.FloatField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "city",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="vendors", to="locations.city"
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["status", "is_online"], name="vendor_status_online_idx")],
            },
        ),
        migrations.CreateModel(
            name="VendorStaff",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("OWNER", "OWNER"), ("MANAGER", "MANAGER"), ("OPERATOR", "OPERATOR")],
                        db_index=True,
                        default="OPERATOR",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vendor_roles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="staff", to="vendors.vendor"
                    ),
                ),
            ],
            options={
                "unique_together": {("vendor", "user")},
            },
        ),
        migrations.CreateModel(
            name="VendorPincode",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("pincode", models.CharField(max_length=6)),
                ("delivery_charge", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="pincodes", to="vendors.vendor"
                    ),
                ),
            ],
            options={
                "unique_together": {("vendor", "pincode")},
                "indexes": [models.Index(fields=["pincode", "is_active"], name="vendor_pincode_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="VendorZone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="vendor_zones", to="vendors.vendor"
                    ),
                ),
                (
                    "zone",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vendor_zones",
                        to="locations.cityzone",
                    ),
                ),
            ],
            options={
                "unique_together": {("vendor", "zone")},
            },
        ),
        migrations.CreateModel(
            name="VendorServiceArea",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("delivery_surcharge", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("ACTIVE", "Active"), ("REJECTED", "Rejected")],
                        db_index=True,
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("is_active", models.BooleanField(default=False)),
                ("requested_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("activated_at", models.DateTimeField(blank=True, null=True)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                (
                    "activated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "service_area",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="vendor_coverages",
                        to="locations.servicearea",
                    ),
                ),
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="service_areas", to="vendors.vendor"
                    ),
                ),
            ],
            options={
                "unique_together": {("vendor", "service_area")},
                "indexes": [models.Index(fields=["vendor", "status"], name="vendor_area_status_idx")],
            },
        ),
    ]
