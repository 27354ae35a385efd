from django.contrib import admin

from .models import FiscalConfig, Invoice


@admin.register(FiscalConfig)
class FiscalConfigAdmin(admin.ModelAdmin):
    list_display = ("restaurant", "emission_mode", "environment")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("order", "restaurant", "type", "status", "access_key", "issued_at")
    list_filter = ("restaurant", "status")
    readonly_fields = ("order", "status", "access_key", "error_message", "issued_at")
