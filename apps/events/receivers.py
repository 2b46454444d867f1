import logging

from django.dispatch import receiver

from events.models import AuditLog
from events.signals import admin_action

logger = logging.getLogger(__name__)


@receiver(admin_action)
def record_admin_action(
    sender,
    actor=None,
    action_type="",
    entity_type="",
    entity_id="",
    vendor=None,
    field_changed="",
    old_value=None,
    new_value=None,
    reason="",
    **kwargs,
):
    actor_user = actor if getattr(actor, "pk", None) else None
    AuditLog.objects.create(
        actor_user=actor_user,
        actor_role=getattr(actor, "role", "") or "",
        action_type=action_type,
        entity_type=entity_type,
        entity_id=str(entity_id or ""),
        vendor=vendor,
        field_changed=field_changed or "",
        old_value=old_value,
        new_value=new_value,
        reason=reason or "",
    )
    logger.info(
        "Audit %s on %s:%s by user %s", action_type, entity_type, entity_id, getattr(actor_user, "pk", None)
    )
