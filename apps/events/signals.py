from django.dispatch import Signal

# Sent after every successful admin mutation.
# kwargs: actor, action_type, entity_type, entity_id, vendor, field_changed,
#         old_value, new_value, reason
admin_action = Signal()
