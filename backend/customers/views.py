from rest_framework import mixins
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from core_backend.exceptions import NotFound

from .models import Customer
from .serializers import CustomerSerializer
from .services import CustomerService


class CustomerViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, BaseViewSet):
    """
    Customers are registered implicitly by delivery orders; this endpoint
    only reads them, e.g. to prefill a delivery form from a phone number.
    """

    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    ordering = ["name"]

    @action(detail=False, methods=["get"], url_path="by-phone")
    def by_phone(self, request: Request) -> Response:
        phone = request.query_params.get("phone", "")
        customer = CustomerService.find_by_phone(self.get_restaurant(), phone)
        if customer is None:
            raise NotFound("Customer", phone)
        return Response(self.get_serializer(customer).data)
