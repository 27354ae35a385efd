from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="product",
            name="production_area",
            field=models.CharField(
                default="Kitchen",
                help_text="Station that prepares the product, e.g. Kitchen or Bar.",
                max_length=50,
            ),
        ),
    ]
