"""
Kitchen Tests

Kitchen queue contents and item completion cascading to the order status.

Run with: pytest backend/orders/tests/test_kitchen.py -v
"""
import threading

import pytest
from django.db import connection

from catalog.models import Product
from core_backend.exceptions import NotFound, OrderClosed
from orders.models import Order, OrderItem
from orders.services import KitchenService, OrderService


@pytest.mark.django_db
class TestKitchen:

    def test_queue_groups_unready_items_by_order(self, restaurant_a, burger, soda):
        first = OrderService.create_order(
            restaurant_a,
            items=[{"product_id": burger.id}, {"product_id": soda.id}],
            order_type=Order.OrderType.TABLE,
            table_number=1,
        )
        second = OrderService.create_order(
            restaurant_a, items=[{"product_id": burger.id}], order_type=Order.OrderType.TABLE, table_number=2
        )

        queue = KitchenService.kitchen_queue(restaurant_a)

        assert [entry["order_id"] for entry in queue] == [first.id, second.id], "Oldest order should come first"
        assert len(queue[0]["items"]) == 2, "First order should list both items"
        assert queue[0]["table_number"] == 1, "Table number should be included"

    def test_finishing_last_item_moves_order_to_ready(self, restaurant_a, burger, soda):
        order = OrderService.create_order(
            restaurant_a,
            items=[{"product_id": burger.id}, {"product_id": soda.id}],
            order_type=Order.OrderType.TABLE,
            table_number=1,
        )
        burger_item, soda_item = order.items.order_by("id")

        KitchenService.finish_kitchen_item(restaurant_a, burger_item.id)
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.PENDING, "One item left, order should not move"

        KitchenService.finish_kitchen_item(restaurant_a, soda_item.id)
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.READY, "Every item ready should move the order to READY"
        assert KitchenService.kitchen_queue(restaurant_a) == [], "Ready orders leave the queue"

    def test_finishing_does_not_move_order_backwards(self, restaurant_a, burger):
        order = OrderService.create_order(
            restaurant_a,
            items=[{"product_id": burger.id}],
            order_type=Order.OrderType.DELIVERY,
            delivery_info={"name": "Maria", "phone": "11999990000"},
        )
        OrderService.update_status(restaurant_a, order.id, Order.OrderStatus.SHIPPED)

        KitchenService.finish_kitchen_item(restaurant_a, order.items.get().id)

        order.refresh_from_db()
        assert order.status == Order.OrderStatus.SHIPPED, "A shipped order must stay shipped"

    def test_item_of_another_restaurant_is_not_found(self, restaurant_a, restaurant_b, burger):
        order = OrderService.create_order(
            restaurant_a, items=[{"product_id": burger.id}], order_type=Order.OrderType.TABLE, table_number=1
        )

        with pytest.raises(NotFound):
            KitchenService.finish_kitchen_item(restaurant_b, order.items.get().id)

    def test_item_of_closed_order_is_rejected(self, restaurant_a, burger, soda):
        order = OrderService.create_order(
            restaurant_a,
            items=[{"product_id": burger.id}, {"product_id": soda.id}],
            order_type=Order.OrderType.TABLE,
            table_number=1,
        )
        OrderService.update_status(restaurant_a, order.id, Order.OrderStatus.COMPLETED)
        item = order.items.order_by("id").first()

        with pytest.raises(OrderClosed):
            KitchenService.finish_kitchen_item(restaurant_a, item.id)

        item.refresh_from_db()
        order.refresh_from_db()
        assert not item.is_ready, "Items of a completed order must not change"
        assert order.status == Order.OrderStatus.COMPLETED, "Order must stay completed"

    def test_queue_filters_by_production_area(self, restaurant_a, burger, soda):
        Product.all_objects.filter(pk=soda.pk).update(production_area='Bar')
        OrderService.create_order(
            restaurant_a,
            items=[{"product_id": burger.id}, {"product_id": soda.id}],
            order_type=Order.OrderType.TABLE,
            table_number=1,
        )

        bar = KitchenService.kitchen_queue(restaurant_a, area='bar')
        kitchen = KitchenService.kitchen_queue(restaurant_a, area='Kitchen')

        assert [item.product_id for item in bar[0]["items"]] == [soda.id], "Bar should only see the soda"
        assert [item.product_id for item in kitchen[0]["items"]] == [burger.id], "Kitchen should only see the burger"
        assert len(KitchenService.kitchen_queue(restaurant_a)[0]["items"]) == 2, "No area lists every item"

    def test_queue_endpoint_accepts_area(self, client_a, restaurant_a, burger, soda):
        Product.all_objects.filter(pk=soda.pk).update(production_area='Bar')
        OrderService.create_order(
            restaurant_a,
            items=[{"product_id": burger.id}, {"product_id": soda.id}],
            order_type=Order.OrderType.TABLE,
            table_number=1,
        )

        response = client_a.get('/api/kitchen/items/', {"area": "Bar"})

        assert response.status_code == 200, f"Unexpected status: {response.data}"
        assert [item["product_name"] for item in response.data[0]["items"]] == ["Soda"], "Only bar items expected"


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(connection.vendor == "sqlite", reason="SQLite serializes writers without row locks")
class TestConcurrentKitchenFinish:

    def test_finishing_last_two_items_together_moves_order_to_ready(self, restaurant_a, burger, soda):
        order = OrderService.create_order(
            restaurant_a,
            items=[{"product_id": burger.id}, {"product_id": soda.id}],
            order_type=Order.OrderType.TABLE,
            table_number=1,
        )
        item_ids = list(OrderItem.all_objects.filter(order=order).values_list("id", flat=True))
        barrier = threading.Barrier(len(item_ids))
        errors = []

        def finish(item_id):
            try:
                barrier.wait()
                KitchenService.finish_kitchen_item(restaurant_a, item_id)
            except Exception as exc:
                errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=finish, args=(item_id,)) for item_id in item_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        order.refresh_from_db()
        assert errors == [], f"No finish should fail: {errors}"
        assert order.status == Order.OrderStatus.READY, "Both items ready should move the order to READY"
