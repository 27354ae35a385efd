import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    CreateOrderSerializer,
    OrderSerializer,
    OrderSummarySerializer,
    TransferItemsSerializer,
)
from orders.services import OrderService, TransferService

from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(StatusActionsMixin, ReadOnlyBaseViewSet):
    """
    ViewSet for orders.

    Reads go through the restaurant-scoped queryset; every write is a single
    service call so the whole operation runs in one transaction:
    - Creation (create)
    - Status transitions and flags (StatusActionsMixin)
    - Item transfers between tables (transfer_items)
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "daily_number", "total"]
    select_related_fields = ["delivery_info", "customer"]
    prefetch_related_fields = ["items__product", "payments"]

    def get_serializer_class(self):
        if self.action == "list":
            return OrderSummarySerializer
        return OrderSerializer

    def _order_response(self, order, status_code=status.HTTP_200_OK) -> Response:
        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status_code)

    def create(self, request: Request) -> Response:
        """
        Creates an order, or adds the items to the open order of the table.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = request.user if request.user.is_authenticated else None
        order = OrderService.create_order(
            self.get_restaurant(),
            items=data["items"],
            order_type=data["order_type"],
            table_number=data.get("table_number"),
            delivery_info=data.get("delivery_info"),
            payment_method=data.get("payment_method") or None,
            user=user,
            customer_name=data.get("customer_name", ""),
        )
        return self._order_response(order, status_code=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="transfer-items")
    def transfer_items(self, request: Request, pk=None) -> Response:
        """Moves selected items to another table; returns the destination order."""
        serializer = TransferItemsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user if request.user.is_authenticated else None
        destination = TransferService.transfer_items(
            self.get_restaurant(),
            pk,
            serializer.validated_data["item_ids"],
            serializer.validated_data["to_table"],
            user=user,
        )
        return self._order_response(destination)
