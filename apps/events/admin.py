from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "action_type",
        "entity_type",
        "entity_id",
        "vendor",
        "actor_user",
        "actor_role",
        "created_at",
    )
    search_fields = ("action_type", "entity_type", "entity_id", "vendor__name", "actor_user__phone")
    list_filter = ("action_type", "entity_type", "created_at")
    readonly_fields = (
        "actor_user",
        "actor_role",
        "action_type",
        "entity_type",
        "entity_id",
        "vendor",
        "field_changed",
        "old_value",
        "new_value",
        "reason",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
