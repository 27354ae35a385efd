from django.contrib import admin

from .models import (
    BankAccount,
    CashierSession,
    FinancialTransaction,
    PaymentMethod,
    Supplier,
    TransactionCategory,
)


@admin.register(CashierSession)
class CashierSessionAdmin(admin.ModelAdmin):
    list_display = ("id", "restaurant", "user", "status", "initial_amount", "final_amount", "opened_at", "closed_at")
    list_filter = ("restaurant", "status")
    readonly_fields = ("opened_at", "closed_at")


@admin.register(FinancialTransaction)
class FinancialTransactionAdmin(admin.ModelAdmin):
    list_display = ("description", "restaurant", "type", "status", "amount", "due_date", "payment_method")
    list_filter = ("restaurant", "type", "status", "is_recurring")
    search_fields = ("description",)
    date_hierarchy = "due_date"


@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "balance", "is_active")
    # Balance moves only through FinancialService
    readonly_fields = ("balance",)


admin.site.register(Supplier)
admin.site.register(TransactionCategory)
admin.site.register(PaymentMethod)
