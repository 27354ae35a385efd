from django.urls import path, include
from rest_framework import routers
from rest_framework_nested import routers as nested_routers
from .views import KitchenItemViewSet, OrderItemViewSet, OrderViewSet, TableViewSet

app_name = "orders"

router = routers.DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"tables", TableViewSet, basename="table")
router.register(r"kitchen/items", KitchenItemViewSet, basename="kitchen-item")

orders_router = nested_routers.NestedSimpleRouter(router, r"orders", lookup="order")
orders_router.register(r"items", OrderItemViewSet, basename="order-item")

urlpatterns = [
    # Include the nested router URLs first for precedence.
    path("", include(orders_router.urls)),
    path("", include(router.urls)),
]
