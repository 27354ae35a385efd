# Generated manually for the restaurant tenancy root

from decimal import Decimal
import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Restaurant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                (
                    "slug",
                    models.SlugField(
                        help_text="URL-safe identifier; orders can be placed by id or slug",
                        unique=True,
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True, help_text="Inactive restaurants cannot access the system"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "restaurants",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["slug"], name="restaurant_slug_idx"),
                    models.Index(fields=["is_active"], name="restaurant_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RestaurantSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "auto_accept_orders",
                    models.BooleanField(
                        default=False, help_text="New orders skip PENDING and start in PREPARING"
                    ),
                ),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("loyalty_enabled", models.BooleanField(default=False)),
                (
                    "points_per_currency",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("1.00"),
                        help_text="Loyalty points awarded per currency unit spent",
                        max_digits=10,
                    ),
                ),
                (
                    "cashback_percentage",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Percentage of the order total credited as cashback",
                        max_digits=5,
                    ),
                ),
                (
                    "restaurant",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="settings",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "db_table": "restaurant_settings",
                "verbose_name_plural": "Restaurant settings",
            },
        ),
    ]
