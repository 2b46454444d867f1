from django.contrib import admin

from .models import CityDeliveryConfig, DeliverySlot


@admin.register(DeliverySlot)
class DeliverySlotAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "start_time", "end_time", "base_charge", "is_active", "sort_order")
    list_filter = ("is_active",)
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
    ordering = ("sort_order", "start_time")


@admin.register(CityDeliveryConfig)
class CityDeliveryConfigAdmin(admin.ModelAdmin):
    list_display = ("id", "city", "slot", "charge_override", "is_available")
    list_filter = ("is_available", "city")
    search_fields = ("city__name", "slot__name")
