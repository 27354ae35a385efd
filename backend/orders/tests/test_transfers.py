"""
Table Transfer Tests

These tests verify table moves and merges, and item transfers between
tables. Value must be conserved: whatever leaves one order arrives on the
other, and table occupancy follows the open orders.

Run with: pytest backend/orders/tests/test_transfers.py -v
"""
import pytest
from decimal import Decimal

from catalog.models import Product
from core_backend.exceptions import InvalidSelection, NotFound, OrderClosed
from orders.models import Order, OrderItem
from orders.services import OrderService, TableRegistry, TransferService


def open_table(restaurant, product, table_number, quantity=1):
    return OrderService.create_order(
        restaurant,
        items=[{"product_id": product.id, "quantity": quantity}],
        order_type=Order.OrderType.TABLE,
        table_number=table_number,
    )


@pytest.mark.django_db
class TestTransferTable:
    """Moving a whole tab to another table"""

    def test_move_to_free_table_repoints_order(self, restaurant_a, burger):
        order = open_table(restaurant_a, burger, 1)

        result = TransferService.transfer_table(restaurant_a, 1, 2)

        assert result.id == order.id, "The same order should move"
        assert result.table_number == 2, "Order should now be on table 2"
        assert not TableRegistry.is_occupied(restaurant_a, 1), "Table 1 should be free"
        assert TableRegistry.is_occupied(restaurant_a, 2), "Table 2 should be occupied"

    def test_merge_into_occupied_table_sums_totals(self, restaurant_a, burger, soda):
        source = open_table(restaurant_a, burger, 1, quantity=2)
        destination = open_table(restaurant_a, soda, 2)

        result = TransferService.transfer_table(restaurant_a, 1, 2)

        source.refresh_from_db()
        assert result.id == destination.id, "Destination order should receive the merge"
        # 50.00 + 5.40
        assert result.total == Decimal('55.40'), f"Merged total incorrect: {result.total}"
        assert result.items.count() == 2, "Items should be re-parented onto the destination"
        assert source.status == Order.OrderStatus.CANCELED, "Emptied source should be canceled"
        assert source.total == Decimal('0.00'), "Emptied source total should be zero"
        assert not TableRegistry.is_occupied(restaurant_a, 1), "Source table should be free"

    def test_free_source_table_is_not_found(self, restaurant_a):
        with pytest.raises(NotFound):
            TransferService.transfer_table(restaurant_a, 1, 2)

    def test_same_table_is_rejected(self, restaurant_a, burger):
        open_table(restaurant_a, burger, 1)

        with pytest.raises(InvalidSelection):
            TransferService.transfer_table(restaurant_a, 1, 1)


@pytest.mark.django_db
class TestTransferItems:
    """Moving selected items of a tab to another table"""

    def test_partial_transfer_to_free_table(self, restaurant_a):
        """
        CRITICAL: Moving 1 of 3 items (15.00) off a 45.00 order to a free table
        opens a 15.00 order there and leaves 30.00 behind
        """
        product = Product.objects.create(
            restaurant=restaurant_a, name='Lasagna', price=Decimal('15.00')
        )
        order_a = open_table(restaurant_a, product, 3)
        OrderService.add_items(restaurant_a, order_a.id, [{"product_id": product.id}, {"product_id": product.id}])
        order_a.refresh_from_db()
        assert order_a.total == Decimal('45.00'), "Precondition: order A should total 45.00"
        item = order_a.items.first()

        order_b = TransferService.transfer_items(restaurant_a, order_a.id, [item.id], 7)

        order_a.refresh_from_db()
        assert order_b.id != order_a.id, "A new order should be opened on table 7"
        assert order_b.table_number == 7, "New order should be on table 7"
        assert order_b.total == Decimal('15.00'), f"New order total incorrect: {order_b.total}"
        assert order_a.total == Decimal('30.00'), f"Source total incorrect: {order_a.total}"
        assert order_a.total + order_b.total == Decimal('45.00'), "Value must be conserved"
        assert TableRegistry.is_occupied(restaurant_a, 7), "Table 7 should be occupied"
        assert order_b.status == order_a.status, "New order should take the source status"

    def test_transfer_to_occupied_table_joins_its_order(self, restaurant_a, burger, soda):
        source = open_table(restaurant_a, burger, 1)
        OrderService.add_items(restaurant_a, source.id, [{"product_id": soda.id}])
        destination = open_table(restaurant_a, soda, 2)
        burger_item = OrderItem.all_objects.get(order=source, product=burger)

        result = TransferService.transfer_items(restaurant_a, source.id, [burger_item.id], 2)

        source.refresh_from_db()
        assert result.id == destination.id, "Items should join the open order of table 2"
        assert result.total == Decimal('30.40'), f"Destination total incorrect: {result.total}"
        assert source.total == Decimal('5.40'), f"Source total incorrect: {source.total}"

    def test_moving_every_item_leaves_zero_total(self, restaurant_a, burger):
        source = open_table(restaurant_a, burger, 1)

        TransferService.transfer_items(restaurant_a, source.id, [source.items.get().id], 5)

        source.refresh_from_db()
        assert source.total == Decimal('0.00'), "Emptied source total should be zero"
        assert source.items.count() == 0, "Source should hold no items"

    def test_items_of_another_order_are_rejected(self, restaurant_a, burger):
        order_1 = open_table(restaurant_a, burger, 1)
        order_2 = open_table(restaurant_a, burger, 2)

        with pytest.raises(InvalidSelection):
            TransferService.transfer_items(restaurant_a, order_1.id, [order_2.items.get().id], 3)

    def test_closed_source_order_is_rejected(self, restaurant_a, burger):
        order = open_table(restaurant_a, burger, 1)
        item_id = order.items.get().id
        OrderService.update_status(restaurant_a, order.id, Order.OrderStatus.COMPLETED)

        with pytest.raises(OrderClosed):
            TransferService.transfer_items(restaurant_a, order.id, [item_id], 3)

    def test_transfer_to_own_table_is_rejected(self, restaurant_a, burger):
        order = open_table(restaurant_a, burger, 1)

        with pytest.raises(InvalidSelection):
            TransferService.transfer_items(restaurant_a, order.id, [order.items.get().id], 1)
