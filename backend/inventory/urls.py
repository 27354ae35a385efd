from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    IngredientViewSet,
    InventoryAuditView,
    ProductionView,
    StockEntryViewSet,
    StockLossView,
)

router = DefaultRouter()
router.register(r'ingredients', IngredientViewSet, basename='ingredient')
router.register(r'stock-entries', StockEntryViewSet, basename='stock-entry')

app_name = "inventory"

urlpatterns = [
    path('', include(router.urls)),
    path('production/', ProductionView.as_view(), name='production'),
    path('losses/', StockLossView.as_view(), name='losses'),
    path('audit/', InventoryAuditView.as_view(), name='audit'),
]
