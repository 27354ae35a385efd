import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)

ORDER_CREATED = "order_created"
ORDER_UPDATED = "order_updated"


def orders_group_name(restaurant_id):
    return f"restaurant_{restaurant_id}_orders"


class OrderEventDispatcher:
    """
    Post-commit fan-out of order events: a Channels push for the admin and
    kitchen screens, and a Celery task mirroring the order to the external POS.

    Nothing here runs inside the order's transaction. Failures are logged and
    never reach the caller, and never roll back order state.
    """

    @staticmethod
    def build_payload(order, event):
        return {
            "event": event,
            "order_id": str(order.id),
            "daily_number": order.daily_number,
            "status": order.status,
            "order_type": order.order_type,
            "table_number": order.table_number,
            "total": str(order.total),
        }

    @staticmethod
    def broadcast(restaurant_id, payload):
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("Channel layer not available. Cannot push order event.")
            return
        async_to_sync(channel_layer.group_send)(
            orders_group_name(restaurant_id),
            {"type": "order_event", "payload": payload},
        )

    @staticmethod
    def _send(restaurant_id, payload):
        from integrations.tasks import sync_order_to_pos

        try:
            OrderEventDispatcher.broadcast(restaurant_id, payload)
        except Exception as e:
            logger.error(f"Failed to push {payload['event']} for order {payload['order_id']}: {e}", exc_info=True)

        try:
            sync_order_to_pos.delay(payload["order_id"], payload["event"])
        except Exception as e:
            logger.error(f"Failed to queue POS sync for order {payload['order_id']}: {e}", exc_info=True)

    @staticmethod
    def dispatch(order, event):
        # Payload is captured now; the order may change again before commit
        payload = OrderEventDispatcher.build_payload(order, event)
        restaurant_id = order.restaurant_id
        transaction.on_commit(lambda: OrderEventDispatcher._send(restaurant_id, payload))

    @staticmethod
    def on_order_created(order):
        OrderEventDispatcher.dispatch(order, ORDER_CREATED)

    @staticmethod
    def on_order_changed(order):
        OrderEventDispatcher.dispatch(order, ORDER_UPDATED)
