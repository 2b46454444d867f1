from decimal import Decimal

from django.db import models

from core.models import TimeStampedModel


class DeliverySlot(TimeStampedModel):
    """
    Named delivery time window with a platform-wide base charge.
    """

    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    base_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "start_time", "id"]

    def __str__(self):
        return f"{self.name} ({self.start_time:%H:%M}-{self.end_time:%H:%M})"


class CityDeliveryConfig(TimeStampedModel):
    """
    Per-city slot configuration: availability and an optional charge override.
    """

    city = models.ForeignKey("locations.City", on_delete=models.CASCADE, related_name="delivery_configs")
    slot = models.ForeignKey("delivery.DeliverySlot", on_delete=models.CASCADE, related_name="city_configs")
    charge_override = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    is_available = models.BooleanField(default=True)

    class Meta:
        unique_together = [("city", "slot")]

    def __str__(self):
        return f"{self.city_id}:{self.slot_id}"

    @property
    def charge(self) -> Decimal:
        return self.charge_override if self.charge_override is not None else self.slot.base_charge
