from rest_framework import serializers

from orders.models import DeliveryInfo, Order, OrderItem, Payment


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    production_area = serializers.CharField(source="product.production_area", read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "production_area",
            "quantity",
            "unit_price",
            "line_total",
            "size_snapshot",
            "addons_snapshot",
            "flavors_snapshot",
            "observations",
            "is_paid",
            "is_ready",
            "created_at",
        ]
        read_only_fields = fields


class DeliveryInfoSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliveryInfo
        exclude = ["id", "order"]
        read_only_fields = ["status", "driver"]


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ["id", "amount", "method", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Read representation of an order. Writes never go through this
    serializer; they are validated by the request serializers and applied
    by OrderService.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    delivery_info = serializers.SerializerMethodField()
    payments = PaymentSerializer(many=True, read_only=True)
    items_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "daily_number",
            "business_date",
            "order_type",
            "table_number",
            "status",
            "total",
            "items_total",
            "delivery_fee",
            "customer",
            "customer_name",
            "is_printed",
            "fiscal_emitted",
            "items",
            "delivery_info",
            "payments",
            "created_at",
            "updated_at",
            "paid_at",
        ]
        read_only_fields = fields

    def get_delivery_info(self, obj):
        try:
            info = obj.delivery_info
        except DeliveryInfo.DoesNotExist:
            return None
        return DeliveryInfoSerializer(info).data


class OrderSummarySerializer(serializers.ModelSerializer):
    """Lightweight representation used in lists and websocket payloads."""

    class Meta:
        model = Order
        fields = [
            "id",
            "daily_number",
            "order_type",
            "table_number",
            "status",
            "total",
            "customer_name",
            "is_printed",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
