import logging

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import (
    AssignDriverSerializer,
    DeliveryTypeSerializer,
    PaymentMethodSerializer,
    UpdateOrderStatusSerializer,
)
from orders.services import OrderService

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order status and flag actions.

    This mixin provides action methods for OrderViewSet. Domain errors raised
    by the service propagate to the exception handler.
    """

    @action(detail=True, methods=["patch", "post"], url_path="status")
    def change_status(self, request: Request, pk=None) -> Response:
        """Moves the order to a new status along the allowed transitions."""
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.update_status(
            self.get_restaurant(), pk, serializer.validated_data["status"]
        )
        return self._order_response(order)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        """Cancels the order and its income journal entries."""
        order = OrderService.cancel_order(self.get_restaurant(), pk)
        return self._order_response(order)

    @action(detail=True, methods=["post"], url_path="print")
    def mark_printed(self, request: Request, pk=None) -> Response:
        """Flags the order as printed. Allowed on closed orders too."""
        order = OrderService.mark_as_printed(self.get_restaurant(), pk)
        return self._order_response(order)

    @action(detail=True, methods=["patch"], url_path="payment-method")
    def payment_method(self, request: Request, pk=None) -> Response:
        serializer = PaymentMethodSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.update_payment_method(
            self.get_restaurant(), pk, serializer.validated_data["payment_method"]
        )
        return self._order_response(order)

    @action(detail=True, methods=["patch"], url_path="delivery-type")
    def delivery_type(self, request: Request, pk=None) -> Response:
        serializer = DeliveryTypeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.update_delivery_type(
            self.get_restaurant(), pk, serializer.validated_data["delivery_type"]
        )
        return self._order_response(order)

    @action(detail=True, methods=["patch"], url_path="driver")
    def driver(self, request: Request, pk=None) -> Response:
        serializer = AssignDriverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.assign_driver(self.get_restaurant(), pk, serializer.validated_data["driver_id"])
        return self._order_response(order)
