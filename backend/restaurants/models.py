import uuid
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Restaurant(models.Model):
    """
    Root entity for multi-tenancy. Every order, ledger row and catalog
    record belongs to exactly one restaurant.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(
        unique=True,
        help_text=_("URL-safe identifier; orders can be placed by id or slug"),
    )
    is_active = models.BooleanField(
        default=True,
        help_text=_("Inactive restaurants cannot access the system"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "restaurants"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["slug"], name="restaurant_slug_idx"),
            models.Index(fields=["is_active"], name="restaurant_active_idx"),
        ]

    def __str__(self):
        return self.name

    def get_settings(self):
        """Return this restaurant's settings row, creating defaults on first access."""
        settings_obj, _created = RestaurantSettings.objects.get_or_create(restaurant=self)
        return settings_obj


class RestaurantSettings(models.Model):
    """
    Per-restaurant runtime configuration read by the order engine.
    """
    restaurant = models.OneToOneField(
        Restaurant, on_delete=models.CASCADE, related_name="settings"
    )
    auto_accept_orders = models.BooleanField(
        default=False,
        help_text=_("New orders skip PENDING and start in PREPARING"),
    )
    delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    loyalty_enabled = models.BooleanField(default=False)
    points_per_currency = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("1.00"),
        help_text=_("Loyalty points awarded per currency unit spent"),
    )
    cashback_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Percentage of the order total credited as cashback"),
    )

    class Meta:
        db_table = "restaurant_settings"
        verbose_name_plural = "Restaurant settings"

    def __str__(self):
        return f"Settings for {self.restaurant.name}"
