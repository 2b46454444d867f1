from django.db import models
from django.utils import timezone


class Product(models.Model):
    """
    Platform-level gift product. Catalog management lives elsewhere; only
    identity and activity are needed for availability checks.
    """

    name = models.CharField(max_length=180)
    slug = models.SlugField(max_length=200, unique=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class VendorProduct(models.Model):
    """
    A vendor's offer of a product. ``is_available`` is the quick
    in-stock/out-of-stock switch.
    """

    vendor = models.ForeignKey("vendors.Vendor", on_delete=models.CASCADE, related_name="vendor_products")
    product = models.ForeignKey("catalog.Product", on_delete=models.CASCADE, related_name="vendor_products")
    is_available = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = [("vendor", "product")]
        indexes = [
            models.Index(fields=["product", "is_available"], name="catalog_vp_available_idx"),
        ]

    def __str__(self):
        return f"{self.vendor_id}:{self.product_id}"
