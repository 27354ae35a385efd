"""
Core backend base components.

Foundational view classes shared by every app's API layer.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet, RestaurantAPIView
from .mixins import RestaurantScopedQuerysetMixin, RestaurantRequestMixin

__all__ = [
    # ViewSets
    'BaseViewSet',
    'ReadOnlyBaseViewSet',
    'RestaurantAPIView',

    # Mixins
    'RestaurantScopedQuerysetMixin',
    'RestaurantRequestMixin',
]
