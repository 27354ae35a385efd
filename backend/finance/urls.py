from django.urls import path, include
from rest_framework import routers

from .views import BankAccountViewSet, CashierViewSet, DriverSettlementViewSet, FinancialTransactionViewSet

app_name = "finance"

router = routers.DefaultRouter()
router.register(r"cashier", CashierViewSet, basename="cashier")
router.register(r"transactions", FinancialTransactionViewSet, basename="transaction")
router.register(r"accounts", BankAccountViewSet, basename="bank-account")
router.register(r"drivers/settlement", DriverSettlementViewSet, basename="driver-settlement")

urlpatterns = [
    path("", include(router.urls)),
]
