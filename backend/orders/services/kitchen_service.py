import logging

from django.db import transaction

from core_backend.exceptions import NotFound, OrderClosed

from ..models import Order, OrderItem
from .order_service import STATUS_SEQUENCE, OrderService

logger = logging.getLogger(__name__)

KITCHEN_STATUSES = (Order.OrderStatus.PENDING, Order.OrderStatus.PREPARING)


class KitchenService:

    @staticmethod
    @transaction.atomic
    def finish_kitchen_item(restaurant, item_id) -> OrderItem:
        """
        Mark one item ready. When every item of its order is ready and the
        order has not reached READY yet, the order moves to READY.

        The parent order is locked before the item.

        Raises:
            NotFound: the item does not exist for this restaurant
            OrderClosed: the order is COMPLETED or CANCELED
        """
        try:
            order_id = OrderItem.all_objects.values_list("order_id", flat=True).get(
                pk=item_id, restaurant=restaurant
            )
        except (OrderItem.DoesNotExist, ValueError):
            raise NotFound("Order item", item_id)

        order = Order.all_objects.select_for_update().get(pk=order_id)
        if order.is_terminal:
            raise OrderClosed(order)

        item = OrderItem.all_objects.select_for_update().get(pk=item_id)
        if not item.is_ready:
            item.is_ready = True
            item.save(update_fields=["is_ready"])

        all_ready = not order.items.filter(is_ready=False).exists()
        if all_ready and STATUS_SEQUENCE.index(order.status) < STATUS_SEQUENCE.index(Order.OrderStatus.READY):
            logger.info(f"All items of order #{order.daily_number} ready; moving order to READY")
            OrderService.update_status(restaurant, order.pk, Order.OrderStatus.READY)
            order.refresh_from_db()

        item.order = order
        return item

    @staticmethod
    def kitchen_queue(restaurant, area=None) -> list:
        """
        Unready items of PENDING/PREPARING orders, grouped by order, oldest order first.
        An area keeps only items of products prepared at that station.
        """
        items = (
            OrderItem.all_objects.filter(
                restaurant=restaurant,
                is_ready=False,
                order__status__in=KITCHEN_STATUSES,
            )
            .select_related("order", "product")
            .order_by("order__created_at", "created_at", "id")
        )
        if area:
            items = items.filter(product__production_area__iexact=area)

        grouped = {}
        for item in items:
            order = item.order
            entry = grouped.get(order.pk)
            if entry is None:
                entry = grouped[order.pk] = {
                    "order_id": order.pk,
                    "daily_number": order.daily_number,
                    "table_number": order.table_number,
                    "order_type": order.order_type,
                    "customer_name": order.customer_name,
                    "created_at": order.created_at,
                    "items": [],
                }
            entry["items"].append(item)
        return list(grouped.values())
