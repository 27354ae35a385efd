from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("finance", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="financialtransaction",
            name="gross_amount",
            field=models.DecimalField(
                blank=True,
                decimal_places=2,
                help_text="Amount before the payment method fee, when one was discounted",
                max_digits=12,
                null=True,
            ),
        ),
    ]
