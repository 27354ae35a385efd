from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import RestaurantRequestMixin
from orders.serializers import OrderItemSerializer
from orders.services import KitchenService


class KitchenItemViewSet(RestaurantRequestMixin, viewsets.ViewSet):
    """Kitchen display: the queue of unready items and the finish action."""

    def list(self, request: Request) -> Response:
        queue = KitchenService.kitchen_queue(self.get_restaurant(), area=request.query_params.get("area"))
        for entry in queue:
            entry["items"] = OrderItemSerializer(entry["items"], many=True).data
        return Response(queue)

    @action(detail=True, methods=["post"], url_path="finish")
    def finish(self, request: Request, pk=None) -> Response:
        item = KitchenService.finish_kitchen_item(self.get_restaurant(), pk)
        return Response(OrderItemSerializer(item).data)
