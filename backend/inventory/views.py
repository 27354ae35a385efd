import logging

from django.db.models import F
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import BaseViewSet, RestaurantAPIView
from core_backend.exceptions import NotFound
from finance.models import Supplier

from .models import Ingredient, ProductionLog, StockEntry, StockLoss
from .serializers import (
    AuditSerializer,
    CreateStockEntrySerializer,
    IngredientSerializer,
    ProduceSerializer,
    ProductionLogSerializer,
    RecordLossSerializer,
    StockEntrySerializer,
    StockLossSerializer,
)
from .services import InventoryService

logger = logging.getLogger(__name__)


def _user(request):
    return request.user if request.user.is_authenticated else None


class IngredientViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, BaseViewSet):
    """Stock levels per ingredient. Stock itself only moves through InventoryService."""

    queryset = Ingredient.objects.all()
    serializer_class = IngredientSerializer
    filterset_fields = ["is_produced", "unit"]
    ordering = ["name"]

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request: Request) -> Response:
        queryset = self.get_queryset().filter(stock__lt=F("min_stock"))
        return Response(self.get_serializer(queryset, many=True).data)


class StockEntryViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, BaseViewSet):
    """
    Goods receipts. Created PENDING; confirming moves stock and books the
    purchase as a pending expense.
    """

    queryset = StockEntry.objects.all()
    serializer_class = StockEntrySerializer
    filterset_fields = ["status", "supplier"]
    ordering = ["-received_at"]
    prefetch_related_fields = ["items__ingredient"]

    def create(self, request: Request) -> Response:
        serializer = CreateStockEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        restaurant = self.get_restaurant()

        supplier = None
        if data.get("supplier") is not None:
            supplier = Supplier.all_objects.filter(restaurant=restaurant, pk=data["supplier"]).first()
            if supplier is None:
                raise NotFound("Supplier", data["supplier"])

        entry = InventoryService.create_stock_entry(
            restaurant,
            [dict(item) for item in data["items"]],
            supplier=supplier,
            invoice_number=data.get("invoice_number", ""),
            notes=data.get("notes", ""),
            received_at=data.get("received_at"),
        )
        return Response(StockEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request: Request, pk=None) -> Response:
        entry = InventoryService.confirm_stock_entry(self.get_restaurant(), pk)
        return Response(StockEntrySerializer(entry).data)


class ProductionView(RestaurantAPIView):
    def post(self, request: Request) -> Response:
        serializer = ProduceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        log = InventoryService.produce(
            self.get_restaurant(),
            serializer.validated_data["ingredient_id"],
            serializer.validated_data["quantity"],
            user=_user(request),
        )
        return Response(ProductionLogSerializer(log).data, status=status.HTTP_201_CREATED)


class StockLossView(RestaurantAPIView):
    def get(self, request: Request) -> Response:
        losses = StockLoss.all_objects.filter(restaurant=self.get_restaurant()).order_by("-loss_date")[:200]
        return Response(StockLossSerializer(losses, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = RecordLossSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        loss = InventoryService.record_loss(
            self.get_restaurant(),
            data["ingredient_id"],
            data["quantity"],
            data["reason"],
            notes=data.get("notes", ""),
            user=_user(request),
        )
        return Response(StockLossSerializer(loss).data, status=status.HTTP_201_CREATED)


class InventoryAuditView(RestaurantAPIView):
    def post(self, request: Request) -> Response:
        serializer = AuditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        results = InventoryService.audit(
            self.get_restaurant(),
            [dict(item) for item in serializer.validated_data["items"]],
            user=_user(request),
        )
        return Response({"items": results})
