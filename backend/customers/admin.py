from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "restaurant", "loyalty_points", "cashback_balance", "created_at")
    list_filter = ("restaurant",)
    search_fields = ("name", "phone")
    readonly_fields = ("loyalty_points", "cashback_balance")
