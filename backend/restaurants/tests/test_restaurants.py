"""
Restaurant Resolution and Isolation Tests

Covers restaurant lookup, the request middleware and the fail-closed
restaurant-scoped manager.

Run with: pytest backend/restaurants/tests/test_restaurants.py -v
"""
import json

import pytest
from django.contrib.auth.models import AnonymousUser
from django.http import HttpResponse
from django.test import RequestFactory

from catalog.models import Product
from core_backend.exceptions import NotFound
from restaurants.managers import get_current_restaurant, restaurant_context, set_current_restaurant
from restaurants.middleware import RestaurantMiddleware
from restaurants.services import get_restaurant_or_404, resolve_restaurant


@pytest.fixture
def run_middleware():
    """Run RestaurantMiddleware and capture the context seen by the view."""
    seen = {}

    def view(request):
        seen["request"] = request.restaurant
        seen["context"] = get_current_restaurant()
        return HttpResponse("ok")

    middleware = RestaurantMiddleware(view)

    def run(request):
        if not hasattr(request, "user"):
            request.user = AnonymousUser()
        response = middleware(request)
        return response, seen

    return run


@pytest.mark.django_db
class TestResolveRestaurant:

    def test_by_slug_id_and_instance(self, restaurant_a):
        assert resolve_restaurant("pizza-place") == restaurant_a, "Slug should resolve"
        assert resolve_restaurant(str(restaurant_a.id)) == restaurant_a, "UUID string should resolve"
        assert resolve_restaurant(restaurant_a.id) == restaurant_a, "UUID should resolve"
        assert resolve_restaurant(restaurant_a) is restaurant_a, "Instance is returned as is"

    def test_unknown_reference(self, db):
        assert resolve_restaurant(None) is None, "None resolves to None"
        assert resolve_restaurant("nowhere") is None, "Unknown slug resolves to None"

        with pytest.raises(NotFound):
            get_restaurant_or_404("nowhere")


@pytest.mark.django_db
class TestRestaurantMiddleware:

    def test_header_wins_over_user(self, run_middleware, restaurant_b, cashier_a):
        request = RequestFactory().get('/api/orders/', HTTP_X_RESTAURANT=restaurant_b.slug)
        request.user = cashier_a

        response, seen = run_middleware(request)

        assert response.status_code == 200, "Request should pass through"
        assert seen["request"] == restaurant_b, "Header should take precedence"
        assert seen["context"] == restaurant_b, "Thread-local context should match"
        assert get_current_restaurant() is None, "Context must be cleared after the request"

    def test_user_restaurant(self, run_middleware, restaurant_a, cashier_a):
        request = RequestFactory().get('/api/orders/')
        request.user = cashier_a

        _response, seen = run_middleware(request)

        assert seen["request"] == restaurant_a, "User's restaurant should be used"

    def test_default_slug(self, run_middleware, restaurant_a, settings):
        settings.DEFAULT_RESTAURANT_SLUG = restaurant_a.slug

        _response, seen = run_middleware(RequestFactory().get('/api/orders/'))

        assert seen["request"] == restaurant_a, "Default slug should be used as a last resort"

    def test_no_restaurant_runs_without_context(self, run_middleware, db):
        _response, seen = run_middleware(RequestFactory().get('/api/orders/'))

        assert seen["request"] is None, "No restaurant should be attached"
        assert seen["context"] is None, "No context should be set"

    def test_unknown_header(self, run_middleware, db):
        response, _seen = run_middleware(RequestFactory().get('/api/orders/', HTTP_X_RESTAURANT='nowhere'))

        assert response.status_code == 400, "Unknown restaurant should be rejected"
        assert json.loads(response.content)["code"] == "RESTAURANT_NOT_FOUND", "Error code mismatch"

    def test_inactive_restaurant(self, run_middleware, inactive_restaurant):
        request = RequestFactory().get('/api/orders/', HTTP_X_RESTAURANT=inactive_restaurant.slug)

        response, seen = run_middleware(request)

        assert response.status_code == 403, "Inactive restaurant should be refused"
        assert "request" not in seen, "View must not run"
        assert json.loads(response.content)["code"] == "RESTAURANT_INACTIVE", "Error code mismatch"


@pytest.mark.django_db
class TestRestaurantManager:

    def test_fails_closed_without_context(self, burger, product_b):
        set_current_restaurant(None)

        assert Product.objects.count() == 0, "No context must return nothing"
        assert Product.all_objects.count() == 2, "Unscoped manager sees every row"

    def test_scoped_to_current_restaurant(self, restaurant_a, restaurant_b, burger, product_b):
        with restaurant_context(restaurant_b):
            assert list(Product.objects.all()) == [product_b], "Only restaurant B products"
            with restaurant_context(restaurant_a):
                assert list(Product.objects.all()) == [burger], "Inner context should win"
            assert get_current_restaurant() == restaurant_b, "Outer context should be restored"

        assert get_current_restaurant() is None, "Context should be cleared on exit"

    def test_context_restored_after_error(self, restaurant_a):
        with pytest.raises(RuntimeError):
            with restaurant_context(restaurant_a):
                raise RuntimeError("boom")

        assert get_current_restaurant() is None, "Context should be restored even on error"
