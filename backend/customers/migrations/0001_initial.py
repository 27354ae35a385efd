# Generated manually for the per-restaurant customer registry

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(help_text="Digits only; unique per restaurant", max_length=20)),
                ("address", models.CharField(blank=True, max_length=500)),
                ("zip_code", models.CharField(blank=True, max_length=20)),
                ("street", models.CharField(blank=True, max_length=200)),
                ("number", models.CharField(blank=True, max_length=20)),
                ("neighborhood", models.CharField(blank=True, max_length=100)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("state", models.CharField(blank=True, max_length=50)),
                ("complement", models.CharField(blank=True, max_length=200)),
                ("reference", models.CharField(blank=True, max_length=200)),
                ("loyalty_points", models.IntegerField(default=0)),
                ("cashback_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="customers",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "default_manager_name": "all_objects",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant", "phone"), name="unique_customer_phone_per_restaurant"
                    ),
                ],
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
    ]
