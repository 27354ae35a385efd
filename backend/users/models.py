from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    """
    Staff account. Orders, cashier sessions and stock adjustments record the
    acting user; authentication itself is handled by Django.
    """
    class Role(models.TextChoices):
        OWNER = "OWNER", _("Owner")
        MANAGER = "MANAGER", _("Manager")
        CASHIER = "CASHIER", _("Cashier")
        WAITER = "WAITER", _("Waiter")
        KITCHEN = "KITCHEN", _("Kitchen")
        DRIVER = "DRIVER", _("Driver")

    class DriverPayType(models.TextChoices):
        DAILY = "DAILY", _("Daily rate")
        SHIFT = "SHIFT", _("Shift rate")
        DELIVERY = "DELIVERY", _("Per delivery")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="users",
        null=True,
        blank=True,
        help_text=_("The restaurant this user belongs to"),
    )
    role = models.CharField(
        _("role"), max_length=50, choices=Role.choices, default=Role.CASHIER
    )

    # Drivers only: base_rate is paid once a day for DAILY and SHIFT, per delivery otherwise
    driver_pay_type = models.CharField(max_length=10, choices=DriverPayType.choices, null=True, blank=True)
    driver_base_rate = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    driver_bonus_per_delivery = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    class Meta:
        indexes = [
            models.Index(fields=["restaurant", "role"], name="user_rest_role_idx"),
        ]

    def __str__(self):
        return self.username
