from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantManager


class FlavorPriceRule(models.TextChoices):
    HIGHER = "higher", _("Highest flavor price")
    AVERAGE = "average", _("Average of flavor prices")


class Category(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="categories"
    )
    name = models.CharField(max_length=100)
    order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )
    flavor_price_rule = models.CharField(
        max_length=10,
        choices=FlavorPriceRule.choices,
        null=True,
        blank=True,
        help_text=_("How multi-flavor items are priced. Overrides the product rule."),
    )
    addon_groups = models.ManyToManyField(
        "catalog.AddonGroup", blank=True, related_name="categories"
    )

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        verbose_name_plural = _("Categories")
        ordering = ["order", "name"]

    def __str__(self):
        return self.name


class Product(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="products"
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("The selling price of the product."),
    )
    categories = models.ManyToManyField(Category, blank=True, related_name="products")
    addon_groups = models.ManyToManyField(
        "catalog.AddonGroup", blank=True, related_name="products"
    )
    is_available = models.BooleanField(default=True)
    flavor_price_rule = models.CharField(
        max_length=10,
        choices=FlavorPriceRule.choices,
        null=True,
        blank=True,
    )
    stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        help_text=_("Own stock, decremented on sale when the product has no recipe."),
    )
    production_area = models.CharField(
        max_length=50,
        default="Kitchen",
        help_text=_("Station that prepares the product, e.g. Kitchen or Bar."),
    )

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["restaurant", "is_available"], name="product_rest_available_idx"),
        ]

    def __str__(self):
        return self.name


class ProductSize(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="sizes")
    name = models.CharField(max_length=50)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    order = models.IntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.product.name} ({self.name})"


class AddonGroup(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="addon_groups"
    )
    name = models.CharField(max_length=100)
    is_flavor_group = models.BooleanField(
        default=False,
        help_text=_("Selections in a flavor group are combined by price_rule instead of summed."),
    )
    price_rule = models.CharField(
        max_length=10, choices=FlavorPriceRule.choices, default=FlavorPriceRule.HIGHER
    )
    order = models.IntegerField(default=0)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["order", "name"]

    def __str__(self):
        return self.name


class Addon(models.Model):
    group = models.ForeignKey(AddonGroup, on_delete=models.CASCADE, related_name="addons")
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["group", "name"]

    def __str__(self):
        return self.name


class Promotion(models.Model):
    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", _("Percentage")
        FIXED_AMOUNT = "fixed_amount", _("Fixed amount")

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="promotions")
    name = models.CharField(max_length=100, blank=True)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2)
    is_active = models.BooleanField(default=True)
    priority = models.IntegerField(
        default=0,
        help_text=_("Lower values are applied first. Only one promotion applies per item."),
    )

    class Meta:
        ordering = ["priority", "id"]

    def __str__(self):
        return self.name or f"{self.discount_type} {self.discount_value}"
