import logging

from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import InvalidSelection, NotFound, OrderClosed
from core_backend.money import ZERO, money_sum

from ..models import Order, OrderItem
from .notification_service import OrderEventDispatcher
from .order_service import OrderService
from .sequence_service import OrderSequenceService
from .table_service import TableRegistry

logger = logging.getLogger(__name__)


class TransferService:
    """
    Moves value between tables. Totals move by the exact sum of the lines
    moved (F() increments), never by recomputing either order from scratch.
    """

    @staticmethod
    def _lock_tables(restaurant, *numbers):
        # Always lock in ascending order so two opposite transfers cannot deadlock
        for number in sorted(set(numbers)):
            TableRegistry.lock(restaurant, number)

    @staticmethod
    @transaction.atomic
    def transfer_table(restaurant, from_table, to_table) -> Order:
        """
        Move a table's open order to another table.

        If the destination is free, the source order is simply re-pointed.
        Otherwise its items are re-parented onto the destination order, the
        totals are summed there, and the emptied source order is canceled
        with a zero total.

        Raises:
            NotFound: no open order on the source table
        """
        if from_table == to_table:
            raise InvalidSelection("Source and destination tables are the same")

        TransferService._lock_tables(restaurant, from_table, to_table)

        source = TableRegistry.open_order_for(restaurant, from_table, lock=True)
        if source is None:
            raise NotFound("Open order", f"table {from_table}")
        destination = TableRegistry.open_order_for(restaurant, to_table, lock=True)

        if destination is None:
            source.table_number = to_table
            source.save(update_fields=["table_number", "updated_at"])
            result = source
            logger.info(f"Order {source.id} moved from table {from_table} to table {to_table}")
        else:
            moved = OrderItem.all_objects.filter(order=source).update(order=destination)
            amount = source.total
            OrderService._increment_total(destination, amount, updated_at=timezone.now())

            source.status = Order.OrderStatus.CANCELED
            source.total = ZERO
            source.save(update_fields=["status", "total", "updated_at"])

            destination.refresh_from_db()
            result = destination
            logger.info(
                f"Merged order {source.id} ({moved} items, {amount}) from table {from_table} "
                f"into order {destination.id} on table {to_table}"
            )
            OrderEventDispatcher.on_order_changed(source)

        TableRegistry.reconcile(restaurant, from_table)
        TableRegistry.reconcile(restaurant, to_table)

        OrderEventDispatcher.on_order_changed(result)
        return result

    @staticmethod
    @transaction.atomic
    def transfer_items(restaurant, source_order_id, item_ids, to_table, user=None) -> Order:
        """
        Move selected items of an order to another table, opening an order
        there if it has none.

        Returns:
            The destination order

        Raises:
            InvalidSelection: none of the item ids belong to the source order
            OrderClosed: the source order is COMPLETED or CANCELED
        """
        source = OrderService.get_order(restaurant, source_order_id)
        locked_tables = [to_table]
        if source.table_number is not None:
            locked_tables.append(source.table_number)
        TransferService._lock_tables(restaurant, *locked_tables)

        source = OrderService.get_order(restaurant, source_order_id, lock=True)
        if source.is_terminal:
            raise OrderClosed(source)

        try:
            items = list(OrderItem.all_objects.filter(order=source, pk__in=list(item_ids or [])))
        except ValueError:
            items = []
        if not items:
            raise InvalidSelection("None of the selected items belong to the source order")

        destination = TableRegistry.open_order_for(restaurant, to_table, lock=True)
        if destination is not None and destination.pk == source.pk:
            raise InvalidSelection("Items are already on that table's order")

        if destination is None:
            business_date, daily_number = OrderSequenceService.next_daily_number(restaurant)
            destination = Order.all_objects.create(
                restaurant=restaurant,
                order_type=Order.OrderType.TABLE,
                table_number=to_table,
                status=source.status,
                daily_number=daily_number,
                business_date=business_date,
                user=user or source.user,
                customer_name=source.customer_name,
            )
            OrderEventDispatcher.on_order_created(destination)

        amount = money_sum(item.line_total for item in items)
        OrderItem.all_objects.filter(pk__in=[item.pk for item in items]).update(order=destination)
        OrderService._decrement_total(source, amount)
        OrderService._increment_total(destination, amount, updated_at=timezone.now())

        source.refresh_from_db()
        destination.refresh_from_db()

        if source.table_number is not None:
            TableRegistry.reconcile(restaurant, source.table_number)
        TableRegistry.occupy(restaurant, to_table)

        logger.info(
            f"Transferred {len(items)} items ({amount}) from order {source.id} "
            f"to order {destination.id} on table {to_table}"
        )
        OrderEventDispatcher.on_order_changed(source)
        OrderEventDispatcher.on_order_changed(destination)
        return destination
