from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "restaurant", "role", "is_active", "is_staff")
    list_filter = ("restaurant", "role", "is_active", "is_staff")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Restaurant", {"fields": ("restaurant", "role")}),
        ("Driver pay", {"fields": ("driver_pay_type", "driver_base_rate", "driver_bonus_per_delivery")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Restaurant", {"fields": ("restaurant", "role")}),
    )
