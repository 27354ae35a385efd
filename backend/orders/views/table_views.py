import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import RestaurantRequestMixin
from orders.serializers import (
    CheckoutSerializer,
    OrderItemSerializer,
    OrderSerializer,
    PartialPaymentSerializer,
    PartialValuePaymentSerializer,
    TransferTableSerializer,
)
from orders.services import CheckoutService, TableRegistry, TransferService

logger = logging.getLogger(__name__)


def _payments(validated):
    return [dict(payment) for payment in validated.get("payments", [])]


class TableViewSet(RestaurantRequestMixin, viewsets.ViewSet):
    """
    Table-level operations. Tables are addressed by number, not by row id,
    because occupancy is derived from open orders.
    """

    lookup_field = "number"
    lookup_value_regex = r"\d+"

    def list(self, request: Request) -> Response:
        """Open tabs per occupied table with the balance still due."""
        tables = TableRegistry.summary(self.get_restaurant())
        for table in tables:
            for tab in table["tabs"]:
                tab["items"] = OrderItemSerializer(tab["items"], many=True).data
        return Response(tables)

    @action(detail=False, methods=["post"], url_path="transfer")
    def transfer(self, request: Request) -> Response:
        serializer = TransferTableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = TransferService.transfer_table(
            self.get_restaurant(),
            serializer.validated_data["from_table"],
            serializer.validated_data["to_table"],
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="checkout")
    def checkout(self, request: Request, number=None) -> Response:
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = CheckoutService.checkout_table(
            self.get_restaurant(),
            int(number),
            _payments(serializer.validated_data),
            order_ids=serializer.validated_data.get("order_ids") or None,
        )
        return Response({
            "success": result["success"],
            "orders": OrderSerializer(result["orders"], many=True).data,
        })

    @action(detail=True, methods=["post"], url_path="partial-payment")
    def partial_payment(self, request: Request, number=None) -> Response:
        serializer = PartialPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = CheckoutService.partial_item_payment(
            self.get_restaurant(),
            int(number),
            data["item_ids"],
            _payments(data),
            discount=data.get("discount", 0),
            surcharge=data.get("surcharge", 0),
        )
        return Response({
            "success": result["success"],
            "paid_items": result["paid_items"],
            "amount": str(result["amount"]),
            "table_closed": result["table_closed"],
            "orders": OrderSerializer(result["orders"], many=True).data,
        })

    @action(detail=True, methods=["post"], url_path="partial-value-payment")
    def partial_value_payment(self, request: Request, number=None) -> Response:
        serializer = PartialValuePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = CheckoutService.partial_value_payment(
            self.get_restaurant(),
            int(number),
            _payments(data),
            order_id=data.get("order_id"),
        )
        return Response({
            "success": result["success"],
            "amount": str(result["amount"]),
            "order": OrderSerializer(result["order"]).data,
        })
