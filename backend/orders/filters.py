import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    """
    Filters for the order list.

    `open=true` keeps only non-terminal orders; `business_date` defaults to
    nothing so historical days stay reachable.
    """

    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    order_type = django_filters.ChoiceFilter(choices=Order.OrderType.choices)
    table_number = django_filters.NumberFilter()
    business_date = django_filters.DateFilter()
    open = django_filters.BooleanFilter(method="filter_open")

    created_at__gte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_at__lte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "order_type", "table_number", "business_date"]

    def filter_open(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.exclude(status__in=Order.TERMINAL_STATUSES)
        return queryset.filter(status__in=Order.TERMINAL_STATUSES)
