from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantManager


class Customer(models.Model):
    """
    A delivery/pickup customer, identified per restaurant by phone digits.
    Loyalty balances accumulate here when orders complete.
    """
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="customers"
    )
    name = models.CharField(max_length=200)
    phone = models.CharField(
        max_length=20,
        help_text=_("Digits only; unique per restaurant"),
    )
    address = models.CharField(max_length=500, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    street = models.CharField(max_length=200, blank=True)
    number = models.CharField(max_length=20, blank=True)
    neighborhood = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=50, blank=True)
    complement = models.CharField(max_length=200, blank=True)
    reference = models.CharField(max_length=200, blank=True)

    loyalty_points = models.IntegerField(default=0)
    cashback_balance = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "phone"],
                name="unique_customer_phone_per_restaurant",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.phone})"
