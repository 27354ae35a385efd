from core_backend.exceptions import NotFound


class RestaurantRequestMixin:
    """
    Gives views access to the restaurant resolved by RestaurantMiddleware.

    Every service call takes the restaurant explicitly, so views fail loud
    here instead of letting a missing context reach the service layer.
    """

    def get_restaurant(self):
        restaurant = getattr(self.request, "restaurant", None)
        if restaurant is None:
            raise NotFound("Restaurant", message="No restaurant could be resolved for this request")
        return restaurant


class RestaurantScopedQuerysetMixin(RestaurantRequestMixin):
    """
    Filters the viewset queryset by the request's restaurant.

    Uses the model's unscoped manager plus an explicit restaurant filter, so
    results do not depend on the thread-local context still being set.

    Usage:
        class OrderViewSet(RestaurantScopedQuerysetMixin, ReadOnlyBaseViewSet):
            queryset = Order.objects.all()
    """

    def get_queryset(self):
        model = self.queryset.model
        qs = model.all_objects.filter(restaurant=self.get_restaurant())
        select_related = getattr(self, "select_related_fields", None)
        if select_related:
            qs = qs.select_related(*select_related)
        prefetch_related = getattr(self, "prefetch_related_fields", None)
        if prefetch_related:
            qs = qs.prefetch_related(*prefetch_related)
        return qs
