from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class AuditLog(models.Model):
    """
    Append-only record of an admin mutation.
    Written by the ``admin_action`` signal receiver, never edited.
    """

    actor_user = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    actor_role = models.CharField(max_length=32, blank=True, default="")

    # e.g. coverage.activate, coverage.bulk_add, vendor_pincode.replace
    action_type = models.CharField(max_length=64, db_index=True)

    entity_type = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64, blank=True, default="")

    vendor = models.ForeignKey(
        "vendors.Vendor",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )

    field_changed = models.CharField(max_length=64, blank=True, default="")
    old_value = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_value = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["vendor", "created_at"], name="audit_vendor_created_idx"),
        ]

    def __str__(self):
        return f"{self.action_type} {self.entity_type}:{self.entity_id} @ {self.created_at}"
