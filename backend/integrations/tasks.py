import logging

from celery import shared_task

from restaurants.managers import restaurant_context

from .services import FiscalService, PosSyncService

logger = logging.getLogger(__name__)


def _backoff(task):
    return task.default_retry_delay * (2 ** task.request.retries)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def emit_fiscal_invoice(self, order_id):
    """
    Emit the fiscal invoice of a completed order.

    Queued on commit of the status change. Backend failures are retried with
    exponential backoff; once retries run out the failure is logged and dropped.
    """
    from orders.models import Order

    order = Order.all_objects.select_related("restaurant").filter(pk=order_id).first()
    if order is None:
        logger.warning(f"Fiscal emission skipped: order {order_id} no longer exists")
        return None
    if order.status != Order.OrderStatus.COMPLETED:
        logger.warning(f"Fiscal emission skipped: order {order_id} is {order.status}")
        return None

    try:
        with restaurant_context(order.restaurant):
            invoice = FiscalService.emit(order)
    except Exception as exc:
        if self.request.retries >= self.max_retries:
            logger.error(f"Fiscal emission for order {order_id} failed permanently: {exc}", exc_info=True)
            return None
        logger.warning(f"Fiscal emission for order {order_id} failed, retrying: {exc}")
        raise self.retry(exc=exc, countdown=_backoff(self))

    return invoice.status if invoice else None


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def sync_order_to_pos(self, order_id, event):
    """Mirror an order event to the third-party POS. Best effort."""
    from orders.models import Order
    from orders.services.notification_service import OrderEventDispatcher

    order = Order.all_objects.filter(pk=order_id).first()
    if order is None:
        logger.warning(f"POS sync skipped: order {order_id} no longer exists")
        return None

    payload = OrderEventDispatcher.build_payload(order, event)
    try:
        PosSyncService.push(payload)
    except Exception as exc:
        if self.request.retries >= self.max_retries:
            logger.error(f"POS sync of order {order_id} failed permanently: {exc}", exc_info=True)
            return None
        logger.warning(f"POS sync of order {order_id} failed, retrying: {exc}")
        raise self.retry(exc=exc, countdown=_backoff(self))

    return payload["event"]
