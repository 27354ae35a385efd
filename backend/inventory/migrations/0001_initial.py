# Generated manually for the ingredient stock ledger

from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
        ("catalog", "0001_initial"),
        ("finance", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Ingredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("unit", models.CharField(default="un", help_text="e.g. kg, g, l, un", max_length=20)),
                ("stock", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12)),
                ("min_stock", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12)),
                (
                    "last_unit_cost",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        help_text="Cost per stock unit from the latest confirmed entry",
                        max_digits=12,
                    ),
                ),
                (
                    "is_produced",
                    models.BooleanField(
                        default=False, help_text="Semi-finished good made in-house from a recipe"
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ingredients",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "default_manager_name": "all_objects",
                "indexes": [
                    models.Index(fields=["restaurant", "name"], name="ingredient_rest_name_idx"),
                ],
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="IngredientRecipeItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=4, max_digits=12)),
                ("order", models.IntegerField(default=0)),
                (
                    "component",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="used_in",
                        to="inventory.ingredient",
                    ),
                ),
                (
                    "ingredient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recipe",
                        to="inventory.ingredient",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
        migrations.CreateModel(
            name="ProductIngredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=4, max_digits=12)),
                (
                    "ingredient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="product_usages",
                        to="inventory.ingredient",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recipe_items",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("product", "ingredient"), name="unique_product_ingredient"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(blank=True, max_length=50)),
                ("received_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("CONFIRMED", "Confirmed")], default="PENDING", max_length=10
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                (
                    "financial_transaction",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_entries",
                        to="finance.financialtransaction",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_entries",
                        to="restaurants.restaurant",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_entries",
                        to="finance.supplier",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Stock entries",
                "ordering": ["-received_at"],
                "default_manager_name": "all_objects",
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="StockEntryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=3, help_text="In purchase units", max_digits=12)),
                ("unit_cost", models.DecimalField(decimal_places=4, help_text="Per purchase unit", max_digits=12)),
                (
                    "conversion_factor",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("1"),
                        help_text="Stock units per purchase unit (e.g. 12 for a box of 12)",
                        max_digits=12,
                    ),
                ),
                ("batch", models.CharField(blank=True, max_length=50)),
                ("expiration_date", models.DateField(blank=True, null=True)),
                (
                    "entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="inventory.stockentry",
                    ),
                ),
                (
                    "ingredient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entry_items",
                        to="inventory.ingredient",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="StockLoss",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("EXPIRED", "Expired"),
                            ("DAMAGED", "Damaged"),
                            ("PREPARATION_ERROR", "Preparation error"),
                            ("AUDIT_ADJUSTMENT", "Audit adjustment"),
                            ("OTHER", "Other"),
                        ],
                        max_length=30,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                (
                    "unit_cost_snapshot",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        help_text="Ingredient cost at the time of loss; never updated",
                        max_digits=12,
                    ),
                ),
                ("loss_date", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "ingredient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="losses",
                        to="inventory.ingredient",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_losses",
                        to="restaurants.restaurant",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-loss_date"],
                "default_manager_name": "all_objects",
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="ProductionLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("produced_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "ingredient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="production_logs",
                        to="inventory.ingredient",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="production_logs",
                        to="restaurants.restaurant",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-produced_at"],
                "default_manager_name": "all_objects",
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
    ]
