import logging

from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string

from .models import FiscalConfig, Invoice

logger = logging.getLogger(__name__)


def get_fiscal_backend():
    return import_string(settings.FISCAL_BACKEND)()


def get_pos_sync_backend():
    return import_string(settings.POS_SYNC_BACKEND)()


class FiscalService:
    """
    Invoice emission after an order is paid. Emission runs in a Celery task
    queued on commit; its failure never touches the order's own state.
    """

    @staticmethod
    def is_automatic(restaurant) -> bool:
        config = FiscalConfig.objects.filter(restaurant=restaurant).first()
        return config is not None and config.emission_mode == FiscalConfig.EmissionMode.AUTOMATIC

    @staticmethod
    def schedule_emission(order):
        if not FiscalService.is_automatic(order.restaurant):
            return

        order_id = str(order.id)

        def _enqueue():
            from .tasks import emit_fiscal_invoice

            try:
                emit_fiscal_invoice.delay(order_id)
            except Exception as e:
                logger.error(f"Failed to queue fiscal emission for order {order_id}: {e}", exc_info=True)

        transaction.on_commit(_enqueue)

    @staticmethod
    def emit(order):
        """
        Ask the fiscal backend to authorize an invoice for a COMPLETED order.
        Backend errors propagate to the task, which retries.
        """
        if order.fiscal_emitted:
            logger.info(f"Order {order.id} already has a fiscal invoice")
            return None

        result = get_fiscal_backend().authorize(order)
        if not result.get("success"):
            invoice = Invoice.all_objects.create(
                restaurant=order.restaurant,
                order=order,
                status=Invoice.Status.REJECTED,
                error_message=result.get("error") or "",
            )
            logger.error(f"Fiscal invoice rejected for order {order.id}: {invoice.error_message}")
            return invoice

        with transaction.atomic():
            invoice = Invoice.all_objects.create(
                restaurant=order.restaurant,
                order=order,
                status=Invoice.Status.AUTHORIZED,
                access_key=result.get("access_key") or "",
            )
            type(order).all_objects.filter(pk=order.pk).update(fiscal_emitted=True)

        logger.info(f"Fiscal invoice authorized for order {order.id}")
        return invoice


class PosSyncService:

    @staticmethod
    def push(payload):
        get_pos_sync_backend().push(payload)
