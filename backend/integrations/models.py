from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantManager


class FiscalConfig(models.Model):
    class EmissionMode(models.TextChoices):
        MANUAL = "MANUAL", _("Manual")
        AUTOMATIC = "AUTOMATIC", _("Automatic")

    restaurant = models.OneToOneField(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="fiscal_config"
    )
    emission_mode = models.CharField(
        max_length=10,
        choices=EmissionMode.choices,
        default=EmissionMode.MANUAL,
        help_text=_("AUTOMATIC emits an invoice for every completed order"),
    )
    environment = models.CharField(max_length=20, default="homologation")

    def __str__(self):
        return f"Fiscal config for {self.restaurant_id} ({self.emission_mode})"


class Invoice(models.Model):
    class Status(models.TextChoices):
        AUTHORIZED = "AUTHORIZED", _("Authorized")
        REJECTED = "REJECTED", _("Rejected")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="invoices"
    )
    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="invoices")
    type = models.CharField(max_length=10, default="NFCe")
    status = models.CharField(max_length=12, choices=Status.choices)
    access_key = models.CharField(max_length=64, blank=True)
    error_message = models.TextField(blank=True)
    issued_at = models.DateTimeField(default=timezone.now)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["-issued_at"]

    def __str__(self):
        return f"{self.type} {self.status} for order {self.order_id}"
