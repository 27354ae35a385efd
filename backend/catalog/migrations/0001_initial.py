# Generated manually for the product catalog

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion

FLAVOR_RULES = [("higher", "Highest flavor price"), ("average", "Average of flavor prices")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AddonGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                (
                    "is_flavor_group",
                    models.BooleanField(
                        default=False,
                        help_text="Selections in a flavor group are combined by price_rule instead of summed.",
                    ),
                ),
                ("price_rule", models.CharField(choices=FLAVOR_RULES, default="higher", max_length=10)),
                ("order", models.IntegerField(default=0)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="addon_groups",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "name"],
                "default_manager_name": "all_objects",
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="Addon",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                (
                    "group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="addons",
                        to="catalog.addongroup",
                    ),
                ),
            ],
            options={
                "ordering": ["group", "name"],
            },
        ),
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                (
                    "order",
                    models.IntegerField(
                        default=0,
                        help_text="Display order for this category. Lower numbers appear first.",
                    ),
                ),
                (
                    "flavor_price_rule",
                    models.CharField(
                        blank=True,
                        choices=FLAVOR_RULES,
                        help_text="How multi-flavor items are priced. Overrides the product rule.",
                        max_length=10,
                        null=True,
                    ),
                ),
                (
                    "addon_groups",
                    models.ManyToManyField(blank=True, related_name="categories", to="catalog.addongroup"),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="categories",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Categories",
                "ordering": ["order", "name"],
                "default_manager_name": "all_objects",
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2, help_text="The selling price of the product.", max_digits=10
                    ),
                ),
                ("is_available", models.BooleanField(default=True)),
                (
                    "flavor_price_rule",
                    models.CharField(blank=True, choices=FLAVOR_RULES, max_length=10, null=True),
                ),
                (
                    "stock",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0"),
                        help_text="Own stock, decremented on sale when the product has no recipe.",
                        max_digits=12,
                    ),
                ),
                (
                    "addon_groups",
                    models.ManyToManyField(blank=True, related_name="products", to="catalog.addongroup"),
                ),
                (
                    "categories",
                    models.ManyToManyField(blank=True, related_name="products", to="catalog.category"),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "default_manager_name": "all_objects",
                "indexes": [
                    models.Index(fields=["restaurant", "is_available"], name="product_rest_available_idx"),
                ],
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
        migrations.CreateModel(
            name="ProductSize",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("order", models.IntegerField(default=0)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sizes",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
        migrations.CreateModel(
            name="Promotion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=100)),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percentage", "Percentage"), ("fixed_amount", "Fixed amount")],
                        max_length=20,
                    ),
                ),
                ("discount_value", models.DecimalField(decimal_places=2, max_digits=10)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "priority",
                    models.IntegerField(
                        default=0,
                        help_text="Lower values are applied first. Only one promotion applies per item.",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="promotions",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["priority", "id"],
            },
        ),
    ]
