from django.contrib import admin

from .models import Vendor, VendorPincode, VendorServiceArea, VendorStaff, VendorZone


class VendorZoneInline(admin.TabularInline):
    model = VendorZone
    extra = 1
    raw_id_fields = ("zone",)
    fields = ("zone", "is_active")


class VendorPincodeInline(admin.TabularInline):
    model = VendorPincode
    extra = 0
    fields = ("pincode", "delivery_charge", "is_active")


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "slug",
        "city",
        "status",
        "is_online",
        "delivery_radius_km",
        "coverage_method",
        "created_at",
    )
    list_filter = ("status", "is_online", "coverage_method", "city")
    search_fields = ("name", "slug", "city__name")
    inlines = [VendorZoneInline, VendorPincodeInline]


@admin.register(VendorServiceArea)
class VendorServiceAreaAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "vendor",
        "service_area",
        "status",
        "delivery_surcharge",
        "requested_at",
        "activated_at",
        "reviewed_by",
    )
    list_filter = ("status",)
    search_fields = ("vendor__name", "service_area__name", "service_area__pincode")
    raw_id_fields = ("vendor", "service_area", "activated_by", "reviewed_by")
    # status changes go through the coverage endpoints so they are audited
    readonly_fields = ("status", "is_active", "activated_at", "activated_by", "reviewed_at", "reviewed_by")


@admin.register(VendorPincode)
class VendorPincodeAdmin(admin.ModelAdmin):
    list_display = ("id", "vendor", "pincode", "delivery_charge", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("vendor__name", "pincode")


@admin.register(VendorStaff)
class VendorStaffAdmin(admin.ModelAdmin):
    list_display = ("id", "vendor", "user", "role", "is_active", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("vendor__name", "user__phone", "user__full_name")
