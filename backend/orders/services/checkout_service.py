import logging
from collections import OrderedDict

from django.core.exceptions import ValidationError
from django.db import transaction

from core_backend.exceptions import InvalidSelection, NotFound
from core_backend.money import ZERO, money_sum, quantize, to_decimal
from finance.models import FinancialTransaction
from finance.services import CashierService, FinancialService

from ..models import Order, OrderItem, Payment
from .notification_service import OrderEventDispatcher
from .order_service import DEFAULT_PAYMENT_METHOD, OrderService
from .table_service import TableRegistry

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Table settlement: full checkout of one or more tabs, and partial payment
    of selected items. Payments are journaled once per payment method for
    the whole operation, so orders closed here skip the per-order journal.
    """

    @staticmethod
    def _clean_payments(payments):
        cleaned = []
        for payment in payments or []:
            amount = quantize(payment.get("amount") or 0)
            if amount < ZERO:
                raise InvalidSelection("Payment amounts cannot be negative")
            cleaned.append({"amount": amount, "method": payment.get("method") or DEFAULT_PAYMENT_METHOD})
        return cleaned

    @staticmethod
    def _record_payments(order, payments):
        for payment in payments:
            Payment.all_objects.create(
                restaurant_id=order.restaurant_id,
                order=order,
                amount=payment["amount"],
                method=payment["method"],
            )

    @staticmethod
    def _journal_payments(restaurant, order, payments, description):
        """One PAID income per payment method, tagged with the open session if any."""
        by_method = OrderedDict()
        for payment in payments:
            by_method[payment["method"]] = by_method.get(payment["method"], ZERO) + payment["amount"]

        session = CashierService.get_open_session(restaurant)
        category = FinancialService.get_sales_category(restaurant)
        journal = []
        for method, amount in by_method.items():
            if amount <= ZERO:
                continue
            journal.append(FinancialService.record_transaction(
                restaurant,
                description=description,
                amount=amount,
                type=FinancialTransaction.Type.INCOME,
                status=FinancialTransaction.Status.PAID,
                payment_method=method,
                order=order,
                cashier_session=session,
                category=category,
            ))
        return journal

    @staticmethod
    def _complete_without_journal(restaurant, orders):
        settings = restaurant.get_settings()
        for order in orders:
            order.status = Order.OrderStatus.COMPLETED
            OrderService.settle(order, settings, journal=False)
            order.save(update_fields=["status", "paid_at", "updated_at"])
            OrderService._sync_delivery_status(order)
            OrderService._finish_terminal(order)
            OrderEventDispatcher.on_order_changed(order)

    @staticmethod
    @transaction.atomic
    def checkout_table(restaurant, table_number, payments, order_ids=None) -> dict:
        """
        Close the selected open orders of a table (all of them by default).

        Payments are recorded on the first closed order and journaled as PAID
        income. The table is freed when no open order remains on it.

        Raises:
            NotFound: the table has no matching open order
        """
        TableRegistry.lock(restaurant, table_number)
        payments = CheckoutService._clean_payments(payments)

        orders_qs = TableRegistry.open_orders(restaurant, table_number).order_by("created_at")
        if order_ids:
            orders_qs = orders_qs.filter(pk__in=list(order_ids))
        try:
            orders = list(orders_qs.select_for_update())
        except (ValueError, ValidationError):
            orders = []
        if not orders:
            raise NotFound("Open order", f"table {table_number}")

        main_order = orders[0]
        CheckoutService._record_payments(main_order, payments)

        CheckoutService._complete_without_journal(restaurant, orders)

        if payments:
            names = ", ".join(o.customer_name for o in orders if o.customer_name)
            description = f"Table {table_number} sale" + (f": {names}" if names else "")
            CheckoutService._journal_payments(restaurant, main_order, payments, description)

        logger.info(
            f"Checkout of table {table_number}: {len(orders)} orders closed, "
            f"{money_sum(p['amount'] for p in payments)} received"
        )
        return {"success": True, "orders": orders}

    @staticmethod
    @transaction.atomic
    def partial_item_payment(restaurant, table_number, item_ids, payments, discount=0, surcharge=0) -> dict:
        """
        Pay for selected items of a table's open orders.

        The paid amount is what the payments add up to (discount and surcharge
        are already applied by the caller and only appear in the description).
        When every item on the table is paid, its orders are closed and the
        table is freed.

        Raises:
            InvalidSelection: no unpaid item of this table's open orders was selected
        """
        TableRegistry.lock(restaurant, table_number)
        payments = CheckoutService._clean_payments(payments)
        if not payments:
            raise InvalidSelection("At least one payment is required")

        open_orders = TableRegistry.open_orders(restaurant, table_number)
        try:
            items = list(
                OrderItem.all_objects.select_for_update()
                .filter(order__in=open_orders, pk__in=list(item_ids or []), is_paid=False)
                .order_by("created_at", "id")
            )
        except ValueError:
            items = []
        if not items:
            raise InvalidSelection(f"No unpaid items of table {table_number} were selected")

        OrderItem.all_objects.filter(pk__in=[item.pk for item in items]).update(is_paid=True)

        first_order = Order.all_objects.get(pk=items[0].order_id)
        CheckoutService._record_payments(first_order, payments)

        paid = money_sum(p["amount"] for p in payments)
        subtotal = quantize(paid + to_decimal(discount) - to_decimal(surcharge))
        CheckoutService._journal_payments(
            restaurant,
            first_order,
            payments,
            f"Partial item payment - table {table_number} (subtotal {subtotal})",
        )

        remaining = OrderItem.all_objects.filter(order__in=open_orders, is_paid=False).exists()
        closed = []
        if not remaining:
            closed = list(open_orders.select_for_update().order_by("created_at"))
            CheckoutService._complete_without_journal(restaurant, closed)

        logger.info(
            f"Partial payment on table {table_number}: {len(items)} items, {paid} received"
            + (f", {len(closed)} orders closed" if closed else "")
        )
        return {
            "success": True,
            "paid_items": [item.pk for item in items],
            "amount": paid,
            "table_closed": bool(closed),
            "orders": closed,
        }


    @staticmethod
    @transaction.atomic
    def partial_value_payment(restaurant, table_number, payments, order_id=None) -> dict:
        """
        Pay an arbitrary amount towards one tab of a table, the oldest open
        tab unless order_id picks another. No item is marked paid and no order
        closes; the payment lowers the tab's balance due and is journaled as
        PAID income, so completing the order later journals only the rest.

        Raises:
            InvalidSelection: no positive payment was given
            NotFound: the table has no matching open order
        """
        TableRegistry.lock(restaurant, table_number)
        payments = [p for p in CheckoutService._clean_payments(payments) if p["amount"] > ZERO]
        if not payments:
            raise InvalidSelection("At least one payment is required")

        orders_qs = TableRegistry.open_orders(restaurant, table_number).order_by("created_at")
        if order_id is not None:
            orders_qs = orders_qs.filter(pk=order_id)
        try:
            order = orders_qs.select_for_update().first()
        except (ValueError, ValidationError):
            order = None
        if order is None:
            raise NotFound("Open order", f"table {table_number}")

        CheckoutService._record_payments(order, payments)
        CheckoutService._journal_payments(
            restaurant, order, payments, f"Partial payment - table {table_number} (order #{order.daily_number})"
        )

        paid = money_sum(p["amount"] for p in payments)
        logger.info(f"Partial value payment on table {table_number}: {paid} towards order {order.id}")
        OrderEventDispatcher.on_order_changed(order)
        return {"success": True, "order": order, "amount": paid}
