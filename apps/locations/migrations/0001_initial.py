from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="City",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("lat", models.FloatField(blank=True, null=True)),
                ("lng", models.FloatField(blank=True, null=True)),
                ("name", models.CharField(max_length=120)),
                ("slug", models.SlugField(max_length=140, unique=True)),
                ("state", models.CharField(blank=True, default="", max_length=120)),
                ("is_active", models.BooleanField(default=True)),
                ("is_coming_soon", models.BooleanField(default=False)),
                ("base_delivery_charge", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10)),
                ("free_delivery_above", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10)),
                ("pincode_prefixes", models.JSONField(blank=True, default=list)),
                ("aliases", models.JSONField(blank=True, default=list)),
            ],
            options={
                "verbose_name_plural": "cities",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="ServiceArea",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("lat", models.FloatField(blank=True, null=True)),
                ("lng", models.FloatField(blank=True, null=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("name", models.CharField(max_length=160)),
                ("pincode", models.CharField(db_index=True, max_length=6)),
                ("state", models.CharField(blank=True, default="", max_length=120)),
                ("alternate_names", models.JSONField(blank=True, default=list)),
                (
                    "city",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="service_areas",
                        to="locations.city",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["pincode", "is_active"], name="loc_area_pincode_active_idx"),
                    models.Index(fields=["city", "is_active"], name="loc_area_city_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CityZone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("name", models.CharField(max_length=120)),
                ("pincodes", models.JSONField(blank=True, default=list)),
                (
                    "city",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="zones",
                        to="locations.city",
                    ),
                ),
            ],
            options={
                "ordering": ["city_id", "name"],
            },
        ),
        migrations.CreateModel(
            name="PincodeCityMap",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("lat", models.FloatField(blank=True, null=True)),
                ("lng", models.FloatField(blank=True, null=True)),
                ("pincode", models.CharField(max_length=6, unique=True)),
                ("area_name", models.CharField(blank=True, default="", max_length=160)),
                (
                    "city",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pincode_maps",
                        to="locations.city",
                    ),
                ),
            ],
        ),
    ]
