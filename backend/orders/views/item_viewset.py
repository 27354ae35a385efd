import logging

from rest_framework import mixins, status
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from orders.models import OrderItem
from orders.serializers import AddItemsSerializer, OrderItemSerializer, OrderSerializer
from orders.services import OrderService

logger = logging.getLogger(__name__)


class OrderItemViewSet(mixins.ListModelMixin, BaseViewSet):
    """
    A ViewSet for the items of a specific order.

    POST appends items (repriced, total incremented); DELETE removes one line
    and decrements the total. Both answer with the whole order.
    """

    queryset = OrderItem.objects.all()
    serializer_class = OrderItemSerializer
    pagination_class = None
    ordering = ["created_at", "id"]
    select_related_fields = ["product"]

    def get_queryset(self):
        return super().get_queryset().filter(order_id=self.kwargs["order_pk"])

    def _order_response(self, order, status_code=status.HTTP_200_OK) -> Response:
        return Response(OrderSerializer(order).data, status=status_code)

    def create(self, request: Request, order_pk=None) -> Response:
        serializer = AddItemsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user if request.user.is_authenticated else None
        order = OrderService.add_items(
            self.get_restaurant(), order_pk, serializer.validated_data["items"], user=user
        )
        return self._order_response(order, status_code=status.HTTP_201_CREATED)

    def destroy(self, request: Request, order_pk=None, pk=None) -> Response:
        order = OrderService.remove_item(self.get_restaurant(), order_pk, pk)
        return self._order_response(order)
