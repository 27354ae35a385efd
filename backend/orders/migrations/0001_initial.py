# Generated manually for orders, tables and payments

from decimal import Decimal
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

ORDER_STATUSES = [
    ("PENDING", "Pending"),
    ("PREPARING", "Preparing"),
    ("READY", "Ready"),
    ("SHIPPED", "Shipped"),
    ("COMPLETED", "Completed"),
    ("CANCELED", "Canceled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
        ("catalog", "0001_initial"),
        ("customers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_type", models.CharField(choices=[("TABLE", "Table"), ("DELIVERY", "Delivery")], max_length=10)),
                ("table_number", models.PositiveIntegerField(blank=True, null=True)),
                ("status", models.CharField(choices=ORDER_STATUSES, default="PENDING", max_length=10)),
                (
                    "total",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Sum of item line totals plus delivery_fee; moved only by F() increments",
                        max_digits=12,
                    ),
                ),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                (
                    "daily_number",
                    models.PositiveIntegerField(help_text="Sequential number per restaurant per business day"),
                ),
                ("business_date", models.DateField(default=django.utils.timezone.localdate)),
                ("customer_name", models.CharField(blank=True, max_length=150)),
                ("is_printed", models.BooleanField(default=False)),
                ("fiscal_emitted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="customers.customer",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="orders",
                        to="restaurants.restaurant",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-created_at"],
                "default_manager_name": "all_objects",
                "indexes": [
                    models.Index(fields=["restaurant", "status"], name="order_rest_status_idx"),
                    models.Index(fields=["restaurant", "table_number", "status"], name="order_rest_table_idx"),
                    models.Index(fields=["restaurant", "created_at"], name="order_rest_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant", "business_date", "daily_number"),
                        name="unique_daily_number_per_restaurant",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            models.Q(("order_type", "TABLE"), ("table_number__isnull", False)),
                            models.Q(("status__in", ["COMPLETED", "CANCELED"]), _negated=True),
                        ),
                        fields=("restaurant", "table_number"),
                        name="unique_open_order_per_table",
                    ),
                ],
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField(default=1)),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Price per unit (base + addons) at the time the item was added",
                        max_digits=10,
                    ),
                ),
                ("size_snapshot", models.JSONField(blank=True, null=True)),
                ("addons_snapshot", models.JSONField(blank=True, default=list)),
                ("flavors_snapshot", models.JSONField(blank=True, default=list)),
                ("observations", models.TextField(blank=True, help_text="Customer notes, e.g. 'no onions'")),
                ("is_paid", models.BooleanField(default=False, help_text="Settled by a partial item payment")),
                ("is_ready", models.BooleanField(default=False, help_text="Finished by the kitchen")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                        to="catalog.product",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="order_items",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order Item",
                "verbose_name_plural": "Order Items",
                "ordering": ["created_at", "id"],
                "default_manager_name": "all_objects",
                "indexes": [
                    models.Index(fields=["restaurant", "order"], name="item_rest_order_idx"),
                    models.Index(fields=["order", "is_ready"], name="item_order_ready_idx"),
                ],
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="DeliveryInfo",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=150)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("zip_code", models.CharField(blank=True, max_length=20)),
                ("street", models.CharField(blank=True, max_length=200)),
                ("number", models.CharField(blank=True, max_length=20)),
                ("neighborhood", models.CharField(blank=True, max_length=100)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("state", models.CharField(blank=True, max_length=50)),
                ("complement", models.CharField(blank=True, max_length=100)),
                ("reference", models.CharField(blank=True, max_length=200)),
                (
                    "delivery_type",
                    models.CharField(
                        choices=[("delivery", "Delivery"), ("pickup", "Pickup")], default="delivery", max_length=10
                    ),
                ),
                ("payment_method", models.CharField(blank=True, max_length=50)),
                (
                    "change_for",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Cash amount the customer will pay with",
                        max_digits=10,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("CONFIRMED", "Confirmed"),
                            ("DELIVERED", "Delivered"),
                            ("CANCELED", "Canceled"),
                        ],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="delivery_info",
                        to="orders.order",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("method", models.CharField(max_length=50)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="orders.order",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "default_manager_name": "all_objects",
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[("free", "Free"), ("occupied", "Occupied")], default="free", max_length=10
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tables",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["number"],
                "default_manager_name": "all_objects",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant", "number"), name="unique_table_number_per_restaurant"
                    ),
                ],
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="OrderSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("business_date", models.DateField()),
                ("last_number", models.PositiveIntegerField(default=0)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="order_sequences",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant", "business_date"), name="unique_order_sequence_per_day"
                    ),
                ],
            },
        ),
    ]
