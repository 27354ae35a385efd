from django.conf import settings
from django.http import JsonResponse

from .managers import set_current_restaurant
from .models import Restaurant
from .services import resolve_restaurant


class RestaurantNotFoundError(Exception):
    """Raised when a restaurant cannot be resolved from the request."""
    pass


class RestaurantMiddleware:
    """
    Resolves the restaurant for the request and attaches it to request.restaurant.

    Resolution precedence (highest to lowest):
    1. X-Restaurant header (slug or id)
    2. Authenticated user's restaurant
    3. DEFAULT_RESTAURANT_SLUG (local development)

    Requests without a resolvable restaurant run with no context; tenant-scoped
    managers then return empty querysets.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith("/admin/"):
            request.restaurant = None
            set_current_restaurant(None)
            return self.get_response(request)

        try:
            restaurant = self.get_restaurant_from_request(request)
            request.restaurant = restaurant

            # CRITICAL: Set thread-local context for RestaurantManager
            set_current_restaurant(restaurant)

            if restaurant and not restaurant.is_active:
                return JsonResponse({
                    "error": "Restaurant account is inactive",
                    "code": "RESTAURANT_INACTIVE",
                }, status=403)

            return self.get_response(request)

        except RestaurantNotFoundError as e:
            return JsonResponse({
                "error": str(e),
                "code": "RESTAURANT_NOT_FOUND",
            }, status=400)

        finally:
            # Always clean up, even if the view raised
            set_current_restaurant(None)

    def get_restaurant_from_request(self, request):
        header = request.headers.get("X-Restaurant")
        if header:
            restaurant = resolve_restaurant(header)
            if restaurant is None:
                raise RestaurantNotFoundError(f"Restaurant '{header}' not found")
            return restaurant

        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated and getattr(user, "restaurant_id", None):
            return user.restaurant

        default_slug = getattr(settings, "DEFAULT_RESTAURANT_SLUG", "")
        if default_slug:
            return Restaurant.objects.filter(slug=default_slug).first()

        return None
