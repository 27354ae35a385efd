"""
Orders views package - modular view layer with mixins.
"""

from .order_viewset import OrderViewSet
from .item_viewset import OrderItemViewSet
from .table_views import TableViewSet
from .kitchen_views import KitchenItemViewSet

__all__ = [
    'OrderViewSet',
    'OrderItemViewSet',
    'TableViewSet',
    'KitchenItemViewSet',
]
