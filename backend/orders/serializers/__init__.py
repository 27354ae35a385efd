"""
Orders serializers package.

Read serializers render orders; request serializers only validate input,
which is then handed to the order services.
"""

# Read serializers
from .order_serializers import (
    DeliveryInfoSerializer,
    OrderItemSerializer,
    OrderSerializer,
    OrderSummarySerializer,
    PaymentSerializer,
)

# Request serializers
from .request_serializers import (
    AddItemsSerializer,
    AssignDriverSerializer,
    CheckoutSerializer,
    CreateOrderSerializer,
    DeliveryInfoInputSerializer,
    DeliveryTypeSerializer,
    ItemSelectionSerializer,
    PartialPaymentSerializer,
    PartialValuePaymentSerializer,
    PaymentInputSerializer,
    PaymentMethodSerializer,
    TransferItemsSerializer,
    TransferTableSerializer,
    UpdateOrderStatusSerializer,
)

__all__ = [
    # Read
    "DeliveryInfoSerializer",
    "OrderItemSerializer",
    "OrderSerializer",
    "OrderSummarySerializer",
    "PaymentSerializer",
    # Requests
    "AddItemsSerializer",
    "AssignDriverSerializer",
    "CheckoutSerializer",
    "CreateOrderSerializer",
    "DeliveryInfoInputSerializer",
    "DeliveryTypeSerializer",
    "ItemSelectionSerializer",
    "PartialPaymentSerializer",
    "PartialValuePaymentSerializer",
    "PaymentInputSerializer",
    "PaymentMethodSerializer",
    "TransferItemsSerializer",
    "TransferTableSerializer",
    "UpdateOrderStatusSerializer",
]
