from django.contrib import admin

from .models import Restaurant, RestaurantSettings


class RestaurantSettingsInline(admin.StackedInline):
    model = RestaurantSettings
    can_delete = False


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
    inlines = [RestaurantSettingsInline]
