import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantManager


class BankAccount(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="bank_accounts"
    )
    name = models.CharField(max_length=100)
    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Running balance, moved only by PAID transactions"),
    )
    is_active = models.BooleanField(default=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Supplier(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="suppliers"
    )
    name = models.CharField(max_length=200)
    document = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["name"]

    def __str__(self):
        return self.name


class TransactionCategory(models.Model):
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="transaction_categories"
    )
    name = models.CharField(max_length=100)
    type = models.CharField(max_length=10, choices=[("INCOME", _("Income")), ("EXPENSE", _("Expense"))])
    is_system = models.BooleanField(default=False)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        verbose_name_plural = _("Transaction categories")
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "name"], name="unique_transaction_category_per_restaurant"
            ),
        ]

    def __str__(self):
        return self.name


class PaymentMethod(models.Model):
    """
    Settlement terms per payment method: the card fee (MDR) taken from the
    gross amount, and how many days until the money is received.
    """
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="payment_methods"
    )
    name = models.CharField(max_length=100)
    type = models.CharField(
        max_length=50,
        help_text=_("Key sent by clients, e.g. cash, credit_card, pix"),
    )
    fee_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    days_to_receive = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["name"]

    def __str__(self):
        return self.name


class CashierSession(models.Model):
    class Status(models.TextChoices):
        OPEN = "OPEN", _("Open")
        CLOSED = "CLOSED", _("Closed")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="cashier_sessions"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cashier_sessions",
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    initial_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"),
        help_text=_("Opening float"),
    )
    final_amount = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text=_("Cash declared by the operator at close"),
    )
    notes = models.TextField(blank=True)
    opened_at = models.DateTimeField(default=timezone.now)
    closed_at = models.DateTimeField(null=True, blank=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["-opened_at"]
        constraints = [
            # At most one OPEN session per restaurant
            models.UniqueConstraint(
                fields=["restaurant"],
                condition=Q(status="OPEN"),
                name="unique_open_cashier_session_per_restaurant",
            ),
        ]

    def __str__(self):
        return f"Cashier session {self.id} ({self.status})"


class FinancialTransaction(models.Model):
    class Type(models.TextChoices):
        INCOME = "INCOME", _("Income")
        EXPENSE = "EXPENSE", _("Expense")

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PAID = "PAID", _("Paid")
        CANCELED = "CANCELED", _("Canceled")

    class Frequency(models.TextChoices):
        WEEKLY = "WEEKLY", _("Weekly")
        MONTHLY = "MONTHLY", _("Monthly")
        YEARLY = "YEARLY", _("Yearly")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.CASCADE, related_name="financial_transactions"
    )
    description = models.CharField(max_length=255)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Always a positive magnitude; direction comes from type"),
    )
    gross_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Amount before the payment method fee, when one was discounted"),
    )
    type = models.CharField(max_length=10, choices=Type.choices)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    due_date = models.DateField(default=timezone.localdate)
    payment_date = models.DateTimeField(null=True, blank=True)
    payment_method = models.CharField(max_length=50, blank=True, null=True)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="financial_transactions",
    )
    cashier_session = models.ForeignKey(
        CashierSession,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    bank_account = models.ForeignKey(
        BankAccount, on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions"
    )
    supplier = models.ForeignKey(
        Supplier, on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions"
    )
    category = models.ForeignKey(
        TransactionCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions"
    )
    related_transaction = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("The other leg of an inter-account transfer"),
    )

    # Recurrence: a template (is_recurring, no parent) spawns PENDING children
    is_recurring = models.BooleanField(default=False)
    recurrence_frequency = models.CharField(
        max_length=10, choices=Frequency.choices, null=True, blank=True
    )
    recurrence_end_date = models.DateField(null=True, blank=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="children",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantManager()
    all_objects = models.Manager()

    class Meta:
        default_manager_name = "all_objects"
        ordering = ["-due_date", "-created_at"]
        indexes = [
            models.Index(fields=["restaurant", "status", "due_date"], name="tx_rest_status_due_idx"),
            models.Index(fields=["cashier_session", "status"], name="tx_session_status_idx"),
            models.Index(fields=["order", "type", "status"], name="tx_order_type_status_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} ({self.status}) - {self.description}"

    @property
    def affects_balance(self):
        return self.status == self.Status.PAID and self.bank_account_id is not None

    @property
    def signed_amount(self):
        return self.amount if self.type == self.Type.INCOME else -self.amount
