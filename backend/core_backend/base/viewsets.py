from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.views import APIView

from ..pagination import StandardPagination
from .mixins import RestaurantRequestMixin, RestaurantScopedQuerysetMixin


class BaseViewSet(RestaurantScopedQuerysetMixin, viewsets.GenericViewSet):
    """
    Base ViewSet for restaurant-scoped resources.

    Only the generic machinery is provided; each viewset opts into the list,
    retrieve or destroy mixins it needs, because writes go through services.

    Usage:
        class StockEntryViewSet(mixins.ListModelMixin, BaseViewSet):
            queryset = StockEntry.objects.all()
            serializer_class = StockEntrySerializer
    """

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]
    ordering = ['-created_at']


class ReadOnlyBaseViewSet(RestaurantScopedQuerysetMixin, viewsets.ReadOnlyModelViewSet):
    """
    Base ViewSet for read-only endpoints with write actions layered on top.
    """

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]
    ordering = ['-created_at']


class RestaurantAPIView(RestaurantRequestMixin, APIView):
    """Plain APIView with access to the request's restaurant."""
    pass
