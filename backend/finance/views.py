import logging

from django.contrib.auth import get_user_model
from django.utils.dateparse import parse_date
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import BaseViewSet, RestaurantRequestMixin
from core_backend.exceptions import InvalidSelection, NotFound

from .models import BankAccount, FinancialTransaction
from .serializers import (
    BankAccountSerializer,
    CashierSessionSerializer,
    CloseSessionSerializer,
    DriverPaymentSerializer,
    FinancialTransactionSerializer,
    OpenSessionSerializer,
    TransferSerializer,
)
from .services import CashierService, FinancialService

logger = logging.getLogger(__name__)


class CashierViewSet(RestaurantRequestMixin, viewsets.ViewSet):
    """Open, close and inspect the restaurant's cashier session."""

    @action(detail=False, methods=["get"], url_path="status")
    def session_status(self, request: Request) -> Response:
        summary = CashierService.session_status(self.get_restaurant())
        if summary["session"] is not None:
            summary["session"] = CashierSessionSerializer(summary["session"]).data
        return Response(summary)

    @action(detail=False, methods=["post"], url_path="open")
    def open(self, request: Request) -> Response:
        serializer = OpenSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user if request.user.is_authenticated else None
        session = CashierService.open_session(
            self.get_restaurant(), user, serializer.validated_data["initial_amount"]
        )
        return Response(CashierSessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="close")
    def close(self, request: Request) -> Response:
        serializer = CloseSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        session = CashierService.close_session(
            self.get_restaurant(),
            data["final_amount"],
            notes=data.get("notes", ""),
            closing_details=data.get("closing_details"),
        )
        return Response(CashierSessionSerializer(session).data)


class FinancialTransactionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    BaseViewSet,
):
    """
    Ledger rows. Create, update and delete are delegated to FinancialService
    so the bank balance effect of PAID rows is applied in the same unit.
    """

    queryset = FinancialTransaction.objects.all()
    serializer_class = FinancialTransactionSerializer
    filterset_fields = ["type", "status", "bank_account", "category", "cashier_session", "order"]
    ordering_fields = ["due_date", "created_at", "amount"]
    ordering = ["-due_date", "-created_at"]

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["restaurant"] = self.get_restaurant()
        return context

    def create(self, request: Request) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tx = FinancialService.record_transaction(self.get_restaurant(), **serializer.validated_data)
        return Response(self.get_serializer(tx).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk=None) -> Response:
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        tx = FinancialService.update_transaction(self.get_restaurant(), pk, **serializer.validated_data)
        return Response(self.get_serializer(tx).data)

    def destroy(self, request: Request, pk=None) -> Response:
        FinancialService.delete_transaction(self.get_restaurant(), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="transfer")
    def transfer(self, request: Request) -> Response:
        serializer = TransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        debit, credit = FinancialService.transfer(
            self.get_restaurant(),
            data["from_account"],
            data["to_account"],
            data["amount"],
            date=data.get("date"),
            description=data.get("description"),
        )
        return Response(
            {
                "debit": self.get_serializer(debit).data,
                "credit": self.get_serializer(credit).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["post"], url_path="sync-recurring")
    def sync_recurring(self, request: Request) -> Response:
        """Materialize upcoming occurrences of recurring templates now."""
        generated = FinancialService.materialize_recurring(self.get_restaurant())
        return Response({"generated": len(generated)})


class BankAccountViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, BaseViewSet):
    queryset = BankAccount.objects.all()
    serializer_class = BankAccountSerializer
    pagination_class = None
    ordering = ["name"]

    def perform_create(self, serializer):
        serializer.save(restaurant=self.get_restaurant())


class DriverSettlementViewSet(RestaurantRequestMixin, viewsets.ViewSet):
    """Daily settlement of delivery drivers and its cash payout."""

    def list(self, request: Request) -> Response:
        day = None
        if request.query_params.get("date"):
            try:
                day = parse_date(request.query_params["date"])
            except ValueError:
                day = None
            if day is None:
                raise InvalidSelection("date must be formatted as YYYY-MM-DD")
        return Response(FinancialService.driver_settlement(self.get_restaurant(), day))

    @action(detail=False, methods=["post"], url_path="pay")
    def pay(self, request: Request) -> Response:
        serializer = DriverPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        restaurant = self.get_restaurant()

        driver = None
        if data.get("driver_id"):
            driver = get_user_model().objects.filter(pk=data["driver_id"], restaurant=restaurant).first()
            if driver is None:
                raise NotFound("Driver", data["driver_id"])

        tx = FinancialService.pay_driver(
            restaurant, data.get("driver_name"), data["amount"], day=data.get("date"), driver=driver
        )
        return Response(FinancialTransactionSerializer(tx).data, status=status.HTTP_201_CREATED)
