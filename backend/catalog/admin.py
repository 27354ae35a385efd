from django.contrib import admin

from .models import Addon, AddonGroup, Category, Product, ProductSize, Promotion


class ProductSizeInline(admin.TabularInline):
    model = ProductSize
    extra = 0


class PromotionInline(admin.TabularInline):
    model = Promotion
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "price", "is_available", "stock", "production_area")
    list_filter = ("restaurant", "is_available", "production_area", "categories")
    search_fields = ("name",)
    filter_horizontal = ("categories", "addon_groups")
    inlines = [ProductSizeInline, PromotionInline]


class AddonInline(admin.TabularInline):
    model = Addon
    extra = 0


@admin.register(AddonGroup)
class AddonGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "is_flavor_group", "price_rule")
    list_filter = ("restaurant", "is_flavor_group")
    inlines = [AddonInline]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "order", "flavor_price_rule")
    list_filter = ("restaurant",)
