from django.db import models
from django.utils import timezone


# -------------------------
# Base abstract models
# -------------------------

class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ActiveModel(models.Model):
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        abstract = True


class GeoPointModel(models.Model):
    """
    Nullable coordinate pair. Rows without both values are skipped by any
    distance based lookup instead of failing it.
    """

    lat = models.FloatField(null=True, blank=True)
    lng = models.FloatField(null=True, blank=True)

    class Meta:
        abstract = True

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None
