from django.contrib import admin

from .models import City, CityZone, PincodeCityMap, ServiceArea


class CityZoneInline(admin.TabularInline):
    model = CityZone
    extra = 0
    fields = ("name", "pincodes", "is_active")


@admin.register(City)
class CityAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "slug",
        "state",
        "is_active",
        "is_coming_soon",
        "base_delivery_charge",
        "free_delivery_above",
    )
    list_filter = ("is_active", "is_coming_soon", "state")
    search_fields = ("name", "slug", "state")
    prepopulated_fields = {"slug": ("name",)}
    inlines = [CityZoneInline]


@admin.register(ServiceArea)
class ServiceAreaAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "pincode", "city", "is_active", "lat", "lng", "created_at")
    list_filter = ("is_active", "city")
    search_fields = ("name", "pincode", "city__name")
    raw_id_fields = ("city",)


@admin.register(CityZone)
class CityZoneAdmin(admin.ModelAdmin):
    list_display = ("id", "city", "name", "is_active")
    list_filter = ("is_active", "city")
    search_fields = ("name", "city__name")


@admin.register(PincodeCityMap)
class PincodeCityMapAdmin(admin.ModelAdmin):
    list_display = ("id", "pincode", "city", "area_name")
    search_fields = ("pincode", "area_name", "city__name")
    raw_id_fields = ("city",)
