import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantManager


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        SHIPPED = "SHIPPED", _("Shipped")  # Delivery only
        COMPLETED = "COMPLETED", _("Completed")
        CANCELED = "CANCELED", _("Canceled")

    class OrderType(models.TextChoices):
        TABLE = "TABLE", _("Table")
        DELIVERY = "DELIVERY", _("Delivery")

    TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="orders"
    )
    order_type = models.CharField(max_length=10, choices=OrderType.choices)
    table_number = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Sum of item line totals plus delivery_fee; moved only by F() increments"),
    )
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    daily_number = models.PositiveIntegerField(
        help_text=_("Sequential number per restaurant per business day")
    )
    business_date = models.DateField(default=timezone.localdate)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    customer_name = models.CharField(max_length=150, blank=True)

    is_printed = models.BooleanField(default=False)
    fiscal_emitted = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["-created_at"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["restaurant", "status"], name="order_rest_status_idx"),
            models.Index(fields=["restaurant", "table_number", "status"], name="order_rest_table_idx"),
            models.Index(fields=["restaurant", "created_at"], name="order_rest_created_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "business_date", "daily_number"],
                name="unique_daily_number_per_restaurant",
            ),
            # Backstop for the table check-then-create race
            models.UniqueConstraint(
                fields=["restaurant", "table_number"],
                condition=Q(order_type="TABLE", table_number__isnull=False)
                & ~Q(status__in=["COMPLETED", "CANCELED"]),
                name="unique_open_order_per_table",
            ),
        ]

    def __str__(self):
        return f"Order #{self.daily_number} ({self.order_type}) - {self.status}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def items_total(self):
        return sum((item.line_total for item in self.items.all()), Decimal("0.00"))


class OrderItem(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="order_items"
    )
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product", on_delete=models.PROTECT, related_name="order_items"
    )
    quantity = models.PositiveIntegerField(default=1)

    # Price snapshot, never re-derived from the catalog
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Price per unit (base + addons) at the time the item was added"),
    )
    size_snapshot = models.JSONField(null=True, blank=True)
    addons_snapshot = models.JSONField(default=list, blank=True)
    flavors_snapshot = models.JSONField(default=list, blank=True)
    observations = models.TextField(blank=True, help_text=_("Customer notes, e.g. 'no onions'"))

    is_paid = models.BooleanField(default=False, help_text=_("Settled by a partial item payment"))
    is_ready = models.BooleanField(default=False, help_text=_("Finished by the kitchen"))
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["created_at", "id"]
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        indexes = [
            models.Index(fields=["restaurant", "order"], name="item_rest_order_idx"),
            models.Index(fields=["order", "is_ready"], name="item_order_ready_idx"),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product.name} in Order #{self.order.daily_number}"

    @property
    def line_total(self):
        return (self.unit_price * self.quantity).quantize(Decimal("0.01"))


class DeliveryInfo(models.Model):
    class DeliveryType(models.TextChoices):
        DELIVERY = "delivery", _("Delivery")
        PICKUP = "pickup", _("Pickup")

    class DeliveryStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        DELIVERED = "DELIVERED", _("Delivered")
        CANCELED = "CANCELED", _("Canceled")

    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="delivery_info")
    name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.CharField(max_length=255, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    street = models.CharField(max_length=200, blank=True)
    number = models.CharField(max_length=20, blank=True)
    neighborhood = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=50, blank=True)
    complement = models.CharField(max_length=100, blank=True)
    reference = models.CharField(max_length=200, blank=True)
    delivery_type = models.CharField(
        max_length=10, choices=DeliveryType.choices, default=DeliveryType.DELIVERY
    )
    payment_method = models.CharField(max_length=50, blank=True)
    change_for = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text=_("Cash amount the customer will pay with"),
    )
    status = models.CharField(
        max_length=10, choices=DeliveryStatus.choices, default=DeliveryStatus.PENDING
    )
    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deliveries",
    )

    def __str__(self):
        return f"Delivery for Order #{self.order.daily_number} ({self.status})"


class Payment(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="payments"
    )
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=50)
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.method} {self.amount} for Order #{self.order.daily_number}"


class Table(models.Model):
    """
    Occupancy projection. Always recomputed from open TABLE orders inside the
    same transaction that changes them; never written on its own.
    """

    class Status(models.TextChoices):
        FREE = "free", _("Free")
        OCCUPIED = "occupied", _("Occupied")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="tables"
    )
    number = models.PositiveIntegerField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.FREE)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["number"]
        constraints = [
            models.UniqueConstraint(fields=["restaurant", "number"], name="unique_table_number_per_restaurant"),
        ]

    def __str__(self):
        return f"Table {self.number} ({self.status})"


class OrderSequence(models.Model):
    """Row-locked counter for daily order numbers."""
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="order_sequences"
    )
    business_date = models.DateField()
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "business_date"], name="unique_order_sequence_per_day"
            ),
        ]

    def __str__(self):
        return f"{self.restaurant_id} {self.business_date}: {self.last_number}"
