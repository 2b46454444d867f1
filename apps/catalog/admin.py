from django.contrib import admin

from .models import Product, VendorProduct


class VendorProductInline(admin.TabularInline):
    model = VendorProduct
    extra = 0
    raw_id_fields = ("vendor",)
    fields = ("vendor", "is_available")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "is_active", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("name", "slug")
    inlines = [VendorProductInline]


@admin.register(VendorProduct)
class VendorProductAdmin(admin.ModelAdmin):
    list_display = ("id", "vendor", "product", "is_available", "created_at")
    list_filter = ("is_available",)
    search_fields = ("vendor__name", "product__name")
