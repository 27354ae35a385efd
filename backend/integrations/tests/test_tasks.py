"""
Integration Task Tests

Fiscal emission and POS sync Celery tasks, run eagerly with apply().

Run with: pytest backend/integrations/tests/test_tasks.py -v
"""
import pytest
from unittest import mock

from integrations.backends import HttpPosSyncBackend
from integrations.models import Invoice
from integrations.services import FiscalService
from integrations.tasks import emit_fiscal_invoice, sync_order_to_pos
from orders.models import Order
from orders.services import OrderService


@pytest.fixture
def completed_order(restaurant_a, burger):
    order = OrderService.create_order(
        restaurant_a, items=[{"product_id": burger.id}], order_type=Order.OrderType.TABLE, table_number=1
    )
    return OrderService.update_status(restaurant_a, order.id, Order.OrderStatus.COMPLETED)


@pytest.mark.django_db
class TestEmitFiscalInvoice:

    def test_authorized_invoice_flags_the_order(self, completed_order):
        result = emit_fiscal_invoice.apply(args=[str(completed_order.id)])

        completed_order.refresh_from_db()
        assert result.get() == Invoice.Status.AUTHORIZED, "Task should report the invoice status"
        assert completed_order.fiscal_emitted, "Order should be flagged as emitted"

    def test_second_emission_is_skipped(self, completed_order):
        emit_fiscal_invoice.apply(args=[str(completed_order.id)])
        result = emit_fiscal_invoice.apply(args=[str(completed_order.id)])

        assert result.get() is None, "An emitted order should not be emitted again"
        assert Invoice.all_objects.filter(order=completed_order).count() == 1, "Only one invoice should exist"

    def test_rejection_is_recorded_without_retry(self, completed_order):
        with mock.patch("integrations.services.get_fiscal_backend") as get_backend:
            get_backend.return_value.authorize.return_value = {"success": False, "error": "Invalid tax id"}
            result = emit_fiscal_invoice.apply(args=[str(completed_order.id)])

        invoice = Invoice.all_objects.get(order=completed_order)
        assert result.get() == Invoice.Status.REJECTED, "Task should report the rejection"
        assert invoice.error_message == "Invalid tax id", "Rejection reason should be stored"
        assert get_backend.return_value.authorize.call_count == 1, "A rejection is not retried"

    def test_transient_failure_is_retried(self, completed_order):
        with mock.patch("integrations.services.get_fiscal_backend") as get_backend:
            get_backend.return_value.authorize.side_effect = [
                ConnectionError("timeout"),
                {"success": True, "access_key": "abc123"},
            ]
            emit_fiscal_invoice.apply(args=[str(completed_order.id)])

        invoice = Invoice.all_objects.get(order=completed_order)
        assert invoice.access_key == "abc123", "Retry should emit the invoice"
        assert get_backend.return_value.authorize.call_count == 2, "Backend should be called twice"

    def test_exhausted_retries_are_logged_and_dropped(self, completed_order, caplog):
        with mock.patch("integrations.services.get_fiscal_backend") as get_backend:
            get_backend.return_value.authorize.side_effect = ConnectionError("authority offline")
            result = emit_fiscal_invoice.apply(
                args=[str(completed_order.id)], retries=emit_fiscal_invoice.max_retries
            )

        assert result.get() is None, "Permanent failure should be dropped"
        assert "failed permanently" in caplog.text, "Permanent failure should be logged"
        assert not Invoice.all_objects.filter(order=completed_order).exists(), "No invoice should exist"

    def test_open_order_is_skipped(self, restaurant_a, burger):
        order = OrderService.create_order(
            restaurant_a, items=[{"product_id": burger.id}], order_type=Order.OrderType.TABLE, table_number=1
        )

        result = emit_fiscal_invoice.apply(args=[str(order.id)])

        assert result.get() is None, "Only completed orders are emitted"
        assert not FiscalService.is_automatic(restaurant_a), "Restaurants default to manual emission"


@pytest.mark.django_db
class TestSyncOrderToPos:

    def test_payload_is_pushed(self, completed_order):
        with mock.patch("integrations.services.get_pos_sync_backend") as get_backend:
            result = sync_order_to_pos.apply(args=[str(completed_order.id), "order_updated"])

        payload = get_backend.return_value.push.call_args[0][0]
        assert result.get() == "order_updated", "Task should report the event"
        assert result.successful(), "Task should succeed"
        assert payload["status"] == Order.OrderStatus.COMPLETED, "Payload should reflect current state"

    def test_missing_order_is_skipped(self, db):
        result = sync_order_to_pos.apply(args=["00000000-0000-0000-0000-000000000000", "order_updated"])

        assert result.get() is None, "Unknown orders are skipped"


class TestHttpPosSyncBackend:

    def test_posts_payload_as_json(self):
        backend = HttpPosSyncBackend(url="https://pos.example.com/orders", timeout=5)

        with mock.patch("integrations.backends.requests.post") as post:
            backend.push({"event": "order_created", "order_id": "1"})

        post.assert_called_once_with(
            "https://pos.example.com/orders", json={"event": "order_created", "order_id": "1"}, timeout=5
        )
        post.return_value.raise_for_status.assert_called_once_with()

    def test_missing_url_skips_push(self, settings):
        settings.POS_SYNC_URL = ""
        backend = HttpPosSyncBackend()

        with mock.patch("integrations.backends.requests.post") as post:
            backend.push({"event": "order_created", "order_id": "1"})

        assert post.call_count == 0, "Nothing should be posted without a URL"
