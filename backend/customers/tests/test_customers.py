"""
Customer Registry and Loyalty Tests

Run with: pytest backend/customers/tests/test_customers.py -v
"""
import pytest
from decimal import Decimal

from customers.models import Customer
from customers.services import (
    PICKUP_ADDRESS,
    CustomerService,
    LoyaltyService,
    clean_phone,
    format_address,
)
from orders.models import Order
from orders.services import OrderService


class TestFormatting:

    def test_clean_phone_keeps_digits(self):
        assert clean_phone("(11) 99999-0000") == "11999990000", "Only digits should remain"
        assert clean_phone(None) == "", "Missing phone should be empty"

    def test_format_address(self):
        info = {"delivery_type": "delivery", "street": "Rua A", "number": "10", "neighborhood": "Centro"}

        assert format_address(info) == "Rua A, 10 - Centro", "Address format incorrect"
        assert format_address({**info, "delivery_type": "pickup"}) == PICKUP_ADDRESS, \
            "Pickup orders have no street address"
        assert format_address({"delivery_type": "delivery"}) == PICKUP_ADDRESS, \
            "No street falls back to pickup"


@pytest.mark.django_db
class TestCustomerUpsert:

    def test_create_then_update_same_phone(self, restaurant_a):
        first = CustomerService.upsert_from_delivery(
            restaurant_a, {"name": "Maria", "phone": "11 99999-0000", "delivery_type": "delivery", "street": "Rua A"}
        )
        second = CustomerService.upsert_from_delivery(
            restaurant_a, {"name": "Maria Silva", "phone": "(11) 99999-0000", "delivery_type": "pickup"}
        )

        second.refresh_from_db()
        assert first.id == second.id, "Same phone digits should update the same customer"
        assert second.name == "Maria Silva", "Name should be updated"
        assert second.address == PICKUP_ADDRESS, "Address should follow the latest order"
        assert Customer.all_objects.count() == 1, "Only one customer should exist"

    def test_same_phone_in_two_restaurants(self, restaurant_a, restaurant_b):
        CustomerService.upsert_from_delivery(restaurant_a, {"name": "Ana", "phone": "1188887777"})
        CustomerService.upsert_from_delivery(restaurant_b, {"name": "Ana", "phone": "1188887777"})

        assert Customer.all_objects.count() == 2, "Phone uniqueness is per restaurant"

    def test_without_phone_nothing_is_registered(self, restaurant_a):
        assert CustomerService.upsert_from_delivery(restaurant_a, {"name": "Walk-in"}) is None, \
            "No phone means no customer"
        assert not Customer.all_objects.exists(), "Nothing should be persisted"


@pytest.mark.django_db
class TestLoyalty:

    def _completed_delivery(self, restaurant, product):
        order = OrderService.create_order(
            restaurant,
            items=[{"product_id": product.id, "quantity": 2}],
            order_type=Order.OrderType.DELIVERY,
            delivery_info={"name": "Maria", "phone": "11999990000", "delivery_type": "pickup"},
        )
        return Order.all_objects.get(pk=order.pk)

    def test_disabled_program_awards_nothing(self, restaurant_a, burger):
        order = self._completed_delivery(restaurant_a, burger)
        settings_obj = restaurant_a.get_settings()
        settings_obj.loyalty_enabled = False

        assert LoyaltyService.award(order, settings_obj) is None, "Disabled program should not award"

    def test_customer_resolved_from_delivery_phone(self, restaurant_a, settings_a, burger):
        order = self._completed_delivery(restaurant_a, burger)
        Order.all_objects.filter(pk=order.pk).update(customer=None)
        order = Order.all_objects.get(pk=order.pk)

        points, cashback = LoyaltyService.award(order, settings_a)

        customer = Customer.all_objects.get(phone="11999990000")
        assert points == 50, f"Points should be floor(total): {points}"
        assert cashback == Decimal('2.50'), f"Cashback should be 5% of 50.00: {cashback}"
        assert customer.loyalty_points == 50, "Points should be credited"
        assert customer.cashback_balance == Decimal('2.50'), "Cashback should be credited"

    def test_table_order_without_customer(self, restaurant_a, settings_a, burger):
        order = OrderService.create_order(
            restaurant_a, items=[{"product_id": burger.id}], order_type=Order.OrderType.TABLE, table_number=1
        )

        assert LoyaltyService.award(order, settings_a) is None, "No customer means no award"


@pytest.mark.django_db
class TestCustomerEndpoints:

    def test_list_is_scoped_and_lookup_by_phone(self, client_a, restaurant_a, restaurant_b):
        CustomerService.upsert_from_delivery(restaurant_a, {"name": "Maria", "phone": "11999990000"})
        CustomerService.upsert_from_delivery(restaurant_b, {"name": "Bruno", "phone": "11911112222"})

        response = client_a.get('/api/customers/')
        assert [row["name"] for row in response.data["results"]] == ["Maria"], "Only restaurant A customers"

        response = client_a.get('/api/customers/by-phone/', {"phone": "(11) 99999-0000"})
        assert response.status_code == 200, "Lookup should normalize the phone"
        assert response.data["name"] == "Maria", "Wrong customer returned"

        response = client_a.get('/api/customers/by-phone/', {"phone": "11911112222"})
        assert response.status_code == 404, "Foreign customer should not be found"
