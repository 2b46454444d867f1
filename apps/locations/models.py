from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from core.models import ActiveModel, GeoPointModel, TimeStampedModel
from core.utils import normalize_names, normalize_pincode


class City(TimeStampedModel, GeoPointModel):
    """
    Operator-managed city. Read-mostly.
    - ``pincode_prefixes``: 3-digit pincode prefixes owned by the city
    - ``aliases``: alternative spellings, stored lower-cased
    """

    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True)
    state = models.CharField(max_length=120, blank=True, default="")

    is_active = models.BooleanField(default=True)
    is_coming_soon = models.BooleanField(default=False)

    base_delivery_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    free_delivery_above = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    pincode_prefixes = models.JSONField(default=list, blank=True)
    aliases = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "cities"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.aliases = normalize_names(self.aliases)
        self.pincode_prefixes = [p for p in (normalize_pincode(x) for x in self.pincode_prefixes or []) if p]
        super().save(*args, **kwargs)


class ServiceArea(TimeStampedModel, GeoPointModel, ActiveModel):
    """
    Finest-grained location unit: a named locality tied to one pincode and
    one city. Once vendors have coverage rows on an area only ``is_active``
    may change.
    """

    MUTABLE_WHEN_LINKED = ("is_active",)
    TRACKED_FIELDS = ("name", "pincode", "city_id", "state", "lat", "lng", "alternate_names")

    name = models.CharField(max_length=160)
    pincode = models.CharField(max_length=6, db_index=True)
    city = models.ForeignKey("locations.City", on_delete=models.PROTECT, related_name="service_areas")
    state = models.CharField(max_length=120, blank=True, default="")

    alternate_names = models.JSONField(default=list, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["pincode", "is_active"], name="loc_area_pincode_active_idx"),
            models.Index(fields=["city", "is_active"], name="loc_area_city_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.pincode})"

    def _changed_fields(self):
        stored = type(self).objects.filter(pk=self.pk).values(*self.TRACKED_FIELDS).first()
        if stored is None:
            return []
        return [field for field in self.TRACKED_FIELDS if stored[field] != getattr(self, field)]

    def save(self, *args, **kwargs):
        self.pincode = normalize_pincode(self.pincode)
        self.alternate_names = normalize_names(self.alternate_names)
        if self.pk and self.vendor_coverages.exists():
            changed = self._changed_fields()
            if changed:
                raise ValidationError(
                    f"Service area {self.pk} has vendor coverage; only activity can change "
                    f"(attempted: {', '.join(changed)})."
                )
        super().save(*args, **kwargs)


class CityZone(TimeStampedModel, ActiveModel):
    """
    Coarser grouping of pincodes inside a city.
    """

    city = models.ForeignKey("locations.City", on_delete=models.CASCADE, related_name="zones")
    name = models.CharField(max_length=120)
    pincodes = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["city_id", "name"]

    def __str__(self):
        return f"{self.city_id}:{self.name}"

    def save(self, *args, **kwargs):
        self.pincodes = [p for p in (normalize_pincode(x) for x in self.pincodes or []) if p]
        super().save(*args, **kwargs)


class PincodeCityMap(TimeStampedModel, GeoPointModel):
    """
    Stand-alone pincode -> city (+ area name) mapping, independent of
    ServiceArea and CityZone. Last-resort pincode lookup.
    """

    pincode = models.CharField(max_length=6, unique=True)
    city = models.ForeignKey("locations.City", on_delete=models.CASCADE, related_name="pincode_maps")
    area_name = models.CharField(max_length=160, blank=True, default="")

    def __str__(self):
        return f"{self.pincode} -> {self.city_id}"
