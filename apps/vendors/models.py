from decimal import Decimal

from django.db import models
from django.utils import timezone

from core.models import GeoPointModel
from core.utils import normalize_pincode


class VendorQuerySet(models.QuerySet):
    def eligible(self):
        """
        Vendors that take part in matching: approved and online.
        """
        return self.filter(status=Vendor.STATUS_APPROVED, is_online=True)


class Vendor(GeoPointModel):
    """
    A shop fulfilling gift orders. Serves a set of pincodes, zones and/or a
    radius around its own coordinates.
    """

    STATUS_PENDING = "PENDING"
    STATUS_APPROVED = "APPROVED"
    STATUS_SUSPENDED = "SUSPENDED"
    STATUS_TERMINATED = "TERMINATED"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_SUSPENDED, "Suspended"),
        (STATUS_TERMINATED, "Terminated"),
    ]

    COVERAGE_PINCODE = "PINCODE"
    COVERAGE_RADIUS = "RADIUS"
    COVERAGE_CHOICES = [
        (COVERAGE_PINCODE, "Pincode list"),
        (COVERAGE_RADIUS, "Radius"),
    ]

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    city = models.ForeignKey("locations.City", on_delete=models.PROTECT, related_name="vendors")

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    is_online = models.BooleanField(default=True)

    # radius tier; both coordinates and a radius are required to match
    delivery_radius_km = models.FloatField(null=True, blank=True)

    coverage_method = models.CharField(max_length=20, choices=COVERAGE_CHOICES, blank=True, default="")
    coverage_radius_km = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    objects = VendorQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["status", "is_online"], name="vendor_status_online_idx"),
        ]

    def __str__(self):
        return self.name


class VendorStaff(models.Model):
    """
    Users acting on behalf of a vendor (vendor dashboard).
    """

    vendor = models.ForeignKey("vendors.Vendor", on_delete=models.CASCADE, related_name="staff")
    user = models.ForeignKey("accounts.User", on_delete=models.CASCADE, related_name="vendor_roles")

    role = models.CharField(
        max_length=20,
        choices=[("OWNER", "OWNER"), ("MANAGER", "MANAGER"), ("OPERATOR", "OPERATOR")],
        default="OPERATOR",
        db_index=True,
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = [("vendor", "user")]

    def __str__(self):
        return f"{self.vendor_id}:{self.user_id}:{self.role}"


class VendorPincode(models.Model):
    """
    Direct vendor -> pincode assignment (pincode tier).
    """

    vendor = models.ForeignKey("vendors.Vendor", on_delete=models.CASCADE, related_name="pincodes")
    pincode = models.CharField(max_length=6)
    delivery_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = [("vendor", "pincode")]
        indexes = [
            models.Index(fields=["pincode", "is_active"], name="vendor_pincode_active_idx"),
        ]

    def __str__(self):
        return f"{self.vendor_id}:{self.pincode}"

    def save(self, *args, **kwargs):
        self.pincode = normalize_pincode(self.pincode)
        super().save(*args, **kwargs)


class VendorZone(models.Model):
    """
    Vendor membership in a CityZone (zone tier).
    """

    vendor = models.ForeignKey("vendors.Vendor", on_delete=models.CASCADE, related_name="vendor_zones")
    zone = models.ForeignKey("locations.CityZone", on_delete=models.CASCADE, related_name="vendor_zones")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = [("vendor", "zone")]

    def __str__(self):
        return f"{self.vendor_id}:{self.zone_id}"


class VendorServiceArea(models.Model):
    """
    A vendor's moderated request to serve a ServiceArea.

    PENDING -> ACTIVE (activate) | REJECTED (reject)
    ACTIVE -> REJECTED (deactivate)
    REJECTED -> PENDING (reconsider)

    ``is_active`` mirrors ``status == ACTIVE``.
    """

    STATUS_PENDING = "PENDING"
    STATUS_ACTIVE = "ACTIVE"
    STATUS_REJECTED = "REJECTED"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_REJECTED, "Rejected"),
    ]

    vendor = models.ForeignKey("vendors.Vendor", on_delete=models.CASCADE, related_name="service_areas")
    service_area = models.ForeignKey(
        "locations.ServiceArea", on_delete=models.PROTECT, related_name="vendor_coverages"
    )

    delivery_surcharge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    is_active = models.BooleanField(default=False)

    requested_at = models.DateTimeField(default=timezone.now)
    activated_at = models.DateTimeField(null=True, blank=True)
    activated_by = models.ForeignKey(
        "accounts.User", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        "accounts.User", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    rejection_reason = models.TextField(blank=True, default="")

    class Meta:
        unique_together = [("vendor", "service_area")]
        indexes = [
            models.Index(fields=["vendor", "status"], name="vendor_area_status_idx"),
        ]

    def __str__(self):
        return f"{self.vendor_id}:{self.service_area_id}:{self.status}"

    def save(self, *args, **kwargs):
        self.is_active = self.status == self.STATUS_ACTIVE
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "status" in update_fields and "is_active" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["is_active"]
        super().save(*args, **kwargs)
