from django.contrib import admin

from .models import DeliveryInfo, Order, OrderItem, Payment, Table


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "quantity", "unit_price", "get_line_total", "is_paid", "is_ready")
    fields = readonly_fields

    def get_line_total(self, obj):
        return obj.line_total

    get_line_total.short_description = "Line Total"

    def has_add_permission(self, request, obj=None):
        return False


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ("amount", "method", "created_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class DeliveryInfoInline(admin.StackedInline):
    model = DeliveryInfo
    extra = 0
    can_delete = False
    raw_id_fields = ("driver",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "daily_number",
        "business_date",
        "restaurant",
        "order_type",
        "table_number",
        "status",
        "total",
        "created_at",
    )
    list_filter = ("restaurant", "status", "order_type", "business_date")
    search_fields = ("id", "customer_name", "daily_number")
    ordering = ("-created_at",)
    # Totals only move through OrderService
    readonly_fields = ("total", "daily_number", "business_date", "paid_at", "created_at", "updated_at")
    inlines = [OrderItemInline, DeliveryInfoInline, PaymentInline]


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("number", "restaurant", "status", "updated_at")
    list_filter = ("restaurant", "status")
    readonly_fields = ("status",)
