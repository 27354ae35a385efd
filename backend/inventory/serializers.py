from rest_framework import serializers

from .models import Ingredient, ProductionLog, StockEntry, StockEntryItem, StockLoss

QTY = {"max_digits": 12, "decimal_places": 3}


class IngredientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Ingredient
        fields = ["id", "name", "unit", "stock", "min_stock", "last_unit_cost", "is_produced"]
        read_only_fields = ["stock", "last_unit_cost"]


class StockEntryItemSerializer(serializers.ModelSerializer):
    ingredient_name = serializers.CharField(source="ingredient.name", read_only=True)

    class Meta:
        model = StockEntryItem
        fields = [
            "id",
            "ingredient",
            "ingredient_name",
            "quantity",
            "unit_cost",
            "conversion_factor",
            "batch",
            "expiration_date",
        ]
        read_only_fields = fields


class StockEntrySerializer(serializers.ModelSerializer):
    items = StockEntryItemSerializer(many=True, read_only=True)

    class Meta:
        model = StockEntry
        fields = [
            "id",
            "supplier",
            "invoice_number",
            "received_at",
            "total_amount",
            "status",
            "financial_transaction",
            "notes",
            "items",
        ]
        read_only_fields = fields


class StockEntryItemInputSerializer(serializers.Serializer):
    ingredient_id = serializers.IntegerField()
    quantity = serializers.DecimalField(**QTY)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0)
    conversion_factor = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, default=1)
    batch = serializers.CharField(required=False, allow_blank=True, default="")
    expiration_date = serializers.DateField(required=False, allow_null=True)


class CreateStockEntrySerializer(serializers.Serializer):
    supplier = serializers.IntegerField(required=False, allow_null=True)
    invoice_number = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    received_at = serializers.DateTimeField(required=False, allow_null=True)
    items = StockEntryItemInputSerializer(many=True, allow_empty=False)


class ProduceSerializer(serializers.Serializer):
    ingredient_id = serializers.IntegerField()
    quantity = serializers.DecimalField(**QTY)


class ProductionLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductionLog
        fields = ["id", "ingredient", "user", "quantity", "produced_at"]
        read_only_fields = fields


class StockLossSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockLoss
        fields = [
            "id",
            "ingredient",
            "user",
            "quantity",
            "reason",
            "notes",
            "unit_cost_snapshot",
            "loss_date",
        ]
        read_only_fields = fields


class RecordLossSerializer(serializers.Serializer):
    ingredient_id = serializers.IntegerField()
    quantity = serializers.DecimalField(**QTY)
    reason = serializers.ChoiceField(choices=StockLoss.Reason.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AuditItemSerializer(serializers.Serializer):
    ingredient_id = serializers.IntegerField()
    physical_count = serializers.DecimalField(**QTY)


class AuditSerializer(serializers.Serializer):
    items = AuditItemSerializer(many=True, allow_empty=False)
