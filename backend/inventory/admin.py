from django.contrib import admin

from .models import (
    Ingredient,
    IngredientRecipeItem,
    ProductIngredient,
    ProductionLog,
    StockEntry,
    StockEntryItem,
    StockLoss,
)


class IngredientRecipeItemInline(admin.TabularInline):
    model = IngredientRecipeItem
    fk_name = "ingredient"
    extra = 0


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "unit", "stock", "min_stock", "last_unit_cost", "is_produced")
    list_filter = ("restaurant", "is_produced")
    search_fields = ("name",)
    readonly_fields = ("stock", "last_unit_cost")
    inlines = [IngredientRecipeItemInline]


class StockEntryItemInline(admin.TabularInline):
    model = StockEntryItem
    extra = 0


@admin.register(StockEntry)
class StockEntryAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "restaurant", "supplier", "total_amount", "status", "received_at")
    list_filter = ("restaurant", "status")
    readonly_fields = ("status", "financial_transaction")
    inlines = [StockEntryItemInline]


@admin.register(StockLoss)
class StockLossAdmin(admin.ModelAdmin):
    list_display = ("ingredient", "restaurant", "quantity", "reason", "unit_cost_snapshot", "loss_date")
    list_filter = ("restaurant", "reason")


admin.site.register(ProductIngredient)
admin.site.register(ProductionLog)
