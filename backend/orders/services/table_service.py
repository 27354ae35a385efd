import logging
from decimal import Decimal

from django.db.models import Prefetch

from core_backend.money import ZERO, quantize

from ..models import Order, OrderItem, Table

logger = logging.getLogger(__name__)


class TableRegistry:
    """
    Table occupancy as a projection of open TABLE orders.

    occupied(number) <=> a non-terminal TABLE order references that number.
    Callers run these inside their own transaction.atomic block, so the
    projection commits or rolls back with the order change that caused it.
    """

    @staticmethod
    def open_orders(restaurant, number):
        return Order.all_objects.filter(
            restaurant=restaurant,
            order_type=Order.OrderType.TABLE,
            table_number=number,
        ).exclude(status__in=Order.TERMINAL_STATUSES)

    @staticmethod
    def open_order_for(restaurant, number, lock=False):
        qs = TableRegistry.open_orders(restaurant, number).order_by("created_at")
        if lock:
            qs = qs.select_for_update()
        return qs.first()

    @staticmethod
    def lock(restaurant, number) -> Table:
        """
        Get-or-create the Table row and lock it. Serializes every
        check-then-act on this table number until the caller commits.
        """
        table, created = Table.all_objects.get_or_create(restaurant=restaurant, number=number)
        if created:
            logger.info(f"Registered table {number} for restaurant {restaurant.slug}")
        return Table.all_objects.select_for_update().get(pk=table.pk)

    @staticmethod
    def is_occupied(restaurant, number) -> bool:
        return TableRegistry.open_orders(restaurant, number).exists()

    @staticmethod
    def reconcile(restaurant, number) -> Table:
        """Recompute one table's status from its open orders."""
        if number is None:
            return None
        table, _created = Table.all_objects.get_or_create(restaurant=restaurant, number=number)
        status = Table.Status.OCCUPIED if TableRegistry.is_occupied(restaurant, number) else Table.Status.FREE
        if table.status != status:
            table.status = status
            table.save(update_fields=["status", "updated_at"])
            logger.info(f"Table {number} is now {status}")
        return table

    @staticmethod
    def occupy(restaurant, number) -> Table:
        """Called after an order was attached to the table."""
        return TableRegistry.reconcile(restaurant, number)

    @staticmethod
    def summary(restaurant) -> list:
        """
        Every table with its open tabs. Balance due counts unpaid items only,
        minus payments already recorded on the tab.
        """
        unpaid_items = Prefetch(
            "items",
            queryset=OrderItem.all_objects.filter(is_paid=False).select_related("product"),
            to_attr="unpaid_items",
        )
        open_orders = (
            Order.all_objects.filter(restaurant=restaurant, order_type=Order.OrderType.TABLE)
            .exclude(status__in=Order.TERMINAL_STATUSES)
            .select_related("user")
            .prefetch_related(unpaid_items, "payments")
        )

        tabs_by_table = {}
        for order in open_orders:
            items_total = sum((item.line_total for item in order.unpaid_items), Decimal("0.00"))
            paid = sum((p.amount for p in order.payments.all()), Decimal("0.00"))
            tabs_by_table.setdefault(order.table_number, []).append({
                "order_id": order.id,
                "daily_number": order.daily_number,
                "customer_name": order.customer_name or f"Table {order.table_number}",
                "waiter_name": order.user.get_full_name() if order.user else None,
                "total_amount": quantize(items_total),
                "balance_due": quantize(max(items_total - paid, ZERO)),
                "items": order.unpaid_items,
                "created_at": order.created_at,
            })

        result = []
        for table in Table.all_objects.filter(restaurant=restaurant).order_by("number"):
            tabs = tabs_by_table.get(table.number, [])
            result.append({
                "id": table.id,
                "number": table.number,
                "status": Table.Status.OCCUPIED if tabs else Table.Status.FREE,
                "total_amount": quantize(sum((tab["balance_due"] for tab in tabs), ZERO)),
                "tabs": tabs,
            })
        return result
