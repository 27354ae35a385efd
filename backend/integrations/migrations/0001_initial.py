# Generated manually for fiscal configuration and invoices

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="FiscalConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "emission_mode",
                    models.CharField(
                        choices=[("MANUAL", "Manual"), ("AUTOMATIC", "Automatic")],
                        default="MANUAL",
                        help_text="AUTOMATIC emits an invoice for every completed order",
                        max_length=10,
                    ),
                ),
                ("environment", models.CharField(default="homologation", max_length=20)),
                (
                    "restaurant",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fiscal_config",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(default="NFCe", max_length=10)),
                (
                    "status",
                    models.CharField(choices=[("AUTHORIZED", "Authorized"), ("REJECTED", "Rejected")], max_length=12),
                ),
                ("access_key", models.CharField(blank=True, max_length=64)),
                ("error_message", models.TextField(blank=True)),
                ("issued_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoices",
                        to="orders.order",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoices",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["-issued_at"],
                "default_manager_name": "all_objects",
            },
            managers=[
                ("all_objects", models.Manager()),
            ],
        ),
    ]
