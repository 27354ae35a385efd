from rest_framework import serializers

from orders.models import DeliveryInfo, Order

MONEY = {"max_digits": 12, "decimal_places": 2}


class ItemSelectionSerializer(serializers.Serializer):
    """One line of a cart: product plus its size, addon and flavor choices."""

    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    size_id = serializers.IntegerField(required=False, allow_null=True)
    addon_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    flavor_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    observations = serializers.CharField(required=False, allow_blank=True, default="")


class DeliveryInfoInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")
    zip_code = serializers.CharField(required=False, allow_blank=True, default="")
    street = serializers.CharField(required=False, allow_blank=True, default="")
    number = serializers.CharField(required=False, allow_blank=True, default="")
    neighborhood = serializers.CharField(required=False, allow_blank=True, default="")
    city = serializers.CharField(required=False, allow_blank=True, default="")
    state = serializers.CharField(required=False, allow_blank=True, default="")
    complement = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    delivery_type = serializers.ChoiceField(
        choices=DeliveryInfo.DeliveryType.choices, default=DeliveryInfo.DeliveryType.DELIVERY
    )
    payment_method = serializers.CharField(required=False, allow_blank=True, default="")
    change_for = serializers.DecimalField(required=False, allow_null=True, **MONEY)


class CreateOrderSerializer(serializers.Serializer):
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    table_number = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    items = ItemSelectionSerializer(many=True, allow_empty=False)
    delivery_info = DeliveryInfoInputSerializer(required=False, allow_null=True)
    payment_method = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["order_type"] == Order.OrderType.TABLE and attrs.get("table_number") is None:
            raise serializers.ValidationError({"table_number": "Required for table orders."})
        return attrs


class AddItemsSerializer(serializers.Serializer):
    items = ItemSelectionSerializer(many=True, allow_empty=False)


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)


class TransferItemsSerializer(serializers.Serializer):
    item_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    to_table = serializers.IntegerField(min_value=1)


class TransferTableSerializer(serializers.Serializer):
    from_table = serializers.IntegerField(min_value=1)
    to_table = serializers.IntegerField(min_value=1)


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(min_value=0, **MONEY)
    method = serializers.CharField(required=False, allow_blank=True, default="")


class CheckoutSerializer(serializers.Serializer):
    payments = PaymentInputSerializer(many=True, required=False, default=list)
    order_ids = serializers.ListField(child=serializers.UUIDField(), required=False, allow_empty=True)


class PartialPaymentSerializer(serializers.Serializer):
    item_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    payments = PaymentInputSerializer(many=True, allow_empty=False)
    discount = serializers.DecimalField(required=False, default=0, min_value=0, **MONEY)
    surcharge = serializers.DecimalField(required=False, default=0, min_value=0, **MONEY)


class PartialValuePaymentSerializer(serializers.Serializer):
    payments = PaymentInputSerializer(many=True, allow_empty=False)
    order_id = serializers.UUIDField(required=False, allow_null=True)


class PaymentMethodSerializer(serializers.Serializer):
    payment_method = serializers.CharField()


class DeliveryTypeSerializer(serializers.Serializer):
    delivery_type = serializers.ChoiceField(choices=DeliveryInfo.DeliveryType.choices)


class AssignDriverSerializer(serializers.Serializer):
    driver_id = serializers.IntegerField(allow_null=True)

