from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="user",
            name="role",
            field=models.CharField(
                choices=[
                    ("OWNER", "Owner"),
                    ("MANAGER", "Manager"),
                    ("CASHIER", "Cashier"),
                    ("WAITER", "Waiter"),
                    ("KITCHEN", "Kitchen"),
                    ("DRIVER", "Driver"),
                ],
                default="CASHIER",
                max_length=50,
                verbose_name="role",
            ),
        ),
        migrations.AddField(
            model_name="user",
            name="driver_pay_type",
            field=models.CharField(
                blank=True,
                choices=[("DAILY", "Daily rate"), ("SHIFT", "Shift rate"), ("DELIVERY", "Per delivery")],
                max_length=10,
                null=True,
            ),
        ),
        migrations.AddField(
            model_name="user",
            name="driver_base_rate",
            field=models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10),
        ),
        migrations.AddField(
            model_name="user",
            name="driver_bonus_per_delivery",
            field=models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10),
        ),
    ]
