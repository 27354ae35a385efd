from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantManager


class Ingredient(models.Model):
    """
    A stocked input. Stock is a signed decimal: concurrent sales may drive it
    below zero, which is reported but never blocks an order.
    """
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="ingredients"
    )
    name = models.CharField(max_length=200)
    unit = models.CharField(max_length=20, default="un", help_text=_("e.g. kg, g, l, un"))
    stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    min_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    last_unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0"),
        help_text=_("Cost per stock unit from the latest confirmed entry"),
    )
    is_produced = models.BooleanField(
        default=False,
        help_text=_("Semi-finished good made in-house from a recipe"),
    )

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["restaurant", "name"], name="ingredient_rest_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.unit})"


class IngredientRecipeItem(models.Model):
    """One component of a produced ingredient's recipe, per unit of yield."""
    ingredient = models.ForeignKey(Ingredient, on_delete=models.CASCADE, related_name="recipe")
    component = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name="used_in")
    quantity = models.DecimalField(max_digits=12, decimal_places=4)
    order = models.IntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.quantity} {self.component.unit} {self.component.name} -> {self.ingredient.name}"


class ProductIngredient(models.Model):
    """Bill of materials for a sellable product: consumed per unit sold."""
    product = models.ForeignKey(
        "catalog.Product", on_delete=models.CASCADE, related_name="recipe_items"
    )
    ingredient = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name="product_usages")
    quantity = models.DecimalField(max_digits=12, decimal_places=4)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["product", "ingredient"], name="unique_product_ingredient"),
        ]

    def __str__(self):
        return f"{self.product.name}: {self.quantity} {self.ingredient.name}"


class StockEntry(models.Model):
    """Goods receipt. Stock and cost only move when the entry is confirmed."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        CONFIRMED = "CONFIRMED", _("Confirmed")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="stock_entries"
    )
    supplier = models.ForeignKey(
        "finance.Supplier", on_delete=models.SET_NULL, null=True, blank=True, related_name="stock_entries"
    )
    invoice_number = models.CharField(max_length=50, blank=True)
    received_at = models.DateTimeField(default=timezone.now)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    financial_transaction = models.ForeignKey(
        "finance.FinancialTransaction",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_entries",
    )
    notes = models.TextField(blank=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["-received_at"]
        verbose_name_plural = _("Stock entries")

    def __str__(self):
        return f"Stock entry {self.invoice_number or self.id} ({self.status})"


class StockEntryItem(models.Model):
    entry = models.ForeignKey(StockEntry, on_delete=models.CASCADE, related_name="items")
    ingredient = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name="entry_items")
    quantity = models.DecimalField(max_digits=12, decimal_places=3, help_text=_("In purchase units"))
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, help_text=_("Per purchase unit"))
    conversion_factor = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("1"),
        help_text=_("Stock units per purchase unit (e.g. 12 for a box of 12)"),
    )
    batch = models.CharField(max_length=50, blank=True)
    expiration_date = models.DateField(null=True, blank=True)

    def __str__(self):
        return f"{self.quantity} x {self.ingredient.name} @ {self.unit_cost}"


class StockLoss(models.Model):
    class Reason(models.TextChoices):
        EXPIRED = "EXPIRED", _("Expired")
        DAMAGED = "DAMAGED", _("Damaged")
        PREPARATION_ERROR = "PREPARATION_ERROR", _("Preparation error")
        AUDIT_ADJUSTMENT = "AUDIT_ADJUSTMENT", _("Audit adjustment")
        OTHER = "OTHER", _("Other")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="stock_losses"
    )
    ingredient = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name="losses")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    reason = models.CharField(max_length=30, choices=Reason.choices)
    notes = models.TextField(blank=True)
    unit_cost_snapshot = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0"),
        help_text=_("Ingredient cost at the time of loss; never updated"),
    )
    loss_date = models.DateTimeField(default=timezone.now)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["-loss_date"]

    def __str__(self):
        return f"Loss of {self.quantity} {self.ingredient.name} ({self.reason})"


class ProductionLog(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="production_logs"
    )
    ingredient = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name="production_logs")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    produced_at = models.DateTimeField(default=timezone.now)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["-produced_at"]

    def __str__(self):
        return f"Produced {self.quantity} {self.ingredient.name}"
