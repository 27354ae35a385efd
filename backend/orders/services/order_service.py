import logging
from decimal import Decimal
from typing import Dict, List, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from catalog.pricing import price_line
from catalog.services import CatalogService
from core_backend.exceptions import (
    Conflict,
    InvalidSelection,
    InvalidTransition,
    NotFound,
    OrderClosed,
)
from core_backend.money import ZERO, money_sum, quantize, to_decimal
from customers.services import CustomerService, LoyaltyService, format_address
from finance.models import FinancialTransaction
from finance.services import CashierService, FinancialService
from integrations.services import FiscalService
from inventory.services import InventoryService
from restaurants.services import get_restaurant_or_404

from ..models import DeliveryInfo, Order, OrderItem, Payment
from .notification_service import OrderEventDispatcher
from .sequence_service import OrderSequenceService
from .table_service import TableRegistry

logger = logging.getLogger(__name__)

S = Order.OrderStatus

# Forward-only lifecycle; CANCELED is reachable from every non-terminal state
STATUS_SEQUENCE = [S.PENDING, S.PREPARING, S.READY, S.SHIPPED, S.COMPLETED]

VALID_STATUS_TRANSITIONS = {
    S.PENDING: {S.PREPARING, S.READY, S.SHIPPED, S.COMPLETED, S.CANCELED},
    S.PREPARING: {S.READY, S.SHIPPED, S.COMPLETED, S.CANCELED},
    S.READY: {S.SHIPPED, S.COMPLETED, S.CANCELED},
    S.SHIPPED: {S.COMPLETED, S.CANCELED},
    S.COMPLETED: set(),
    S.CANCELED: set(),
}

DELIVERY_STATUS_FOR = {
    S.PENDING: DeliveryInfo.DeliveryStatus.PENDING,
    S.PREPARING: DeliveryInfo.DeliveryStatus.CONFIRMED,
    S.READY: DeliveryInfo.DeliveryStatus.CONFIRMED,
    S.SHIPPED: DeliveryInfo.DeliveryStatus.CONFIRMED,
    S.COMPLETED: DeliveryInfo.DeliveryStatus.DELIVERED,
    S.CANCELED: DeliveryInfo.DeliveryStatus.CANCELED,
}

DELIVERY_FIELDS = (
    "name", "phone", "address", "zip_code", "street", "number", "neighborhood",
    "city", "state", "complement", "reference",
)

DEFAULT_PAYMENT_METHOD = "other"


class OrderService:
    """
    Order lifecycle: create, add/remove items, status machine, settlement side effects.

    Every public method is one unit of work. Domain errors raised anywhere
    inside abort the whole operation; post-commit integrations are queued with
    transaction.on_commit and can never undo committed order state.
    """

    # --- Helpers ---

    @staticmethod
    def get_order(restaurant, order_id, lock=False) -> Order:
        qs = Order.all_objects.filter(restaurant=restaurant)
        if lock:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=order_id)
        except (Order.DoesNotExist, ValueError, ValidationError):
            raise NotFound("Order", order_id)

    @staticmethod
    def submitted_status(settings) -> str:
        """State of a freshly submitted order: PREPARING under auto-accept."""
        return S.PREPARING if settings.auto_accept_orders else S.PENDING

    @staticmethod
    def allowed_transitions(order) -> set:
        allowed = set(VALID_STATUS_TRANSITIONS.get(order.status, set()))
        if order.order_type != Order.OrderType.DELIVERY:
            allowed.discard(S.SHIPPED)
        return allowed

    @staticmethod
    def price_items(restaurant, items) -> List[tuple]:
        """
        Price every requested item before anything is written.

        Returns:
            [(PricedLine, observations)]
        """
        if not items:
            raise InvalidSelection("At least one item is required")

        snapshots = {}
        priced = []
        for data in items:
            product_id = data.get("product_id")
            if product_id is None:
                raise InvalidSelection("Every item needs a product_id")
            key = str(product_id)
            if key not in snapshots:
                snapshots[key] = CatalogService.get_product_snapshot(restaurant, product_id)

            flavors = CatalogService.get_flavor_snapshots(restaurant, data.get("flavor_ids") or [])
            line = price_line(
                snapshots[key],
                data.get("quantity", 1),
                size_id=data.get("size_id"),
                addon_ids=data.get("addon_ids") or (),
                flavors=flavors,
            )
            priced.append((line, data.get("observations") or ""))
        return priced

    @staticmethod
    def _create_items(order, priced) -> Decimal:
        """Persist priced lines on the order. Returns the exact sum of their totals."""
        rows = []
        for line, observations in priced:
            rows.append(OrderItem(
                restaurant_id=order.restaurant_id,
                order=order,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                size_snapshot=line.size,
                addons_snapshot=line.addons,
                flavors_snapshot=line.flavors,
                observations=observations,
            ))
        OrderItem.all_objects.bulk_create(rows)
        return money_sum(line.line_total for line, _obs in priced)

    @staticmethod
    def _increment_total(order, delta: Decimal, **extra):
        Order.all_objects.filter(pk=order.pk).update(total=F("total") + delta, **extra)

    @staticmethod
    def _decrement_total(order, delta: Decimal):
        """Subtract from a locked order, clamped so the total never goes below zero."""
        delta = min(to_decimal(delta), to_decimal(order.total))
        Order.all_objects.filter(pk=order.pk).update(total=F("total") - delta, updated_at=timezone.now())

    @staticmethod
    def _sync_delivery_status(order):
        if order.order_type != Order.OrderType.DELIVERY:
            return
        DeliveryInfo.objects.filter(order=order).update(status=DELIVERY_STATUS_FOR[order.status])

    @staticmethod
    def _payment_method_for(order) -> str:
        payment = order.payments.order_by("created_at", "id").first()
        if payment is not None:
            return payment.method
        delivery = DeliveryInfo.objects.filter(order=order).first()
        if delivery is not None and delivery.payment_method:
            return delivery.payment_method
        return DEFAULT_PAYMENT_METHOD

    @staticmethod
    def settle(order, settings, journal=True):
        """
        Side effects of completing an order, in order:
        (a) loyalty award, (b) income journal on the open session,
        (c) stock deduction. Runs inside the caller's transaction.

        journal=False is used by table checkout, which journals the
        payments of all closed orders itself.
        """
        LoyaltyService.award(order, settings)

        if journal:
            session = CashierService.get_open_session(order.restaurant)
            if session is None:
                logger.info(f"No open cashier session; income for order {order.id} not journaled")
            else:
                remainder = quantize(to_decimal(order.total) - FinancialService.journaled_order_income(order))
                if remainder <= ZERO:
                    logger.info(f"Order {order.id} income already journaled in full")
                else:
                    FinancialService.journal_order_income(
                        order,
                        session,
                        OrderService._payment_method_for(order),
                        remainder,
                        f"Order #{order.daily_number}",
                    )

        InventoryService.deduct_for_order(order)

        order.paid_at = timezone.now()

    @staticmethod
    def _finish_terminal(order):
        """Bookkeeping shared by every path that makes an order terminal."""
        if order.order_type == Order.OrderType.TABLE:
            TableRegistry.reconcile(order.restaurant, order.table_number)
        if order.status == S.COMPLETED:
            FiscalService.schedule_emission(order)

    # --- Operations ---

    @staticmethod
    @transaction.atomic
    def create_order(
        restaurant_ref,
        items,
        order_type,
        table_number=None,
        delivery_info: Optional[Dict] = None,
        payment_method: Optional[str] = None,
        user=None,
        customer_name: str = "",
    ) -> Order:
        """
        Create an order, or add to the open order of an occupied table.

        Raises:
            NotFound: unknown restaurant or product
            InvalidSelection: invalid item configuration (nothing is persisted)
        """
        restaurant = get_restaurant_or_404(restaurant_ref)
        settings = restaurant.get_settings()

        if order_type not in Order.OrderType.values:
            raise InvalidSelection(f"Unknown order type '{order_type}'")
        if order_type == Order.OrderType.TABLE:
            if table_number is None:
                raise InvalidSelection("A table order needs a table number")
            TableRegistry.lock(restaurant, table_number)
            existing = TableRegistry.open_order_for(restaurant, table_number)
            if existing is not None:
                logger.info(
                    f"Table {table_number} already has open order {existing.id}; adding items to it"
                )
                return OrderService.add_items(restaurant, existing.id, items, user=user)
        else:
            table_number = None

        priced = OrderService.price_items(restaurant, items)

        delivery_info = dict(delivery_info or {})
        delivery_type = delivery_info.get("delivery_type") or DeliveryInfo.DeliveryType.DELIVERY
        delivery_info["delivery_type"] = delivery_type
        delivery_fee = ZERO
        if order_type == Order.OrderType.DELIVERY and delivery_type == DeliveryInfo.DeliveryType.DELIVERY:
            delivery_fee = quantize(settings.delivery_fee)

        business_date, daily_number = OrderSequenceService.next_daily_number(restaurant)

        try:
            with transaction.atomic():
                order = Order.all_objects.create(
                    restaurant=restaurant,
                    order_type=order_type,
                    table_number=table_number,
                    status=OrderService.submitted_status(settings),
                    delivery_fee=delivery_fee,
                    daily_number=daily_number,
                    business_date=business_date,
                    user=user,
                    customer_name=customer_name or delivery_info.get("name") or "",
                )
        except IntegrityError:
            # Lost the race for the table to a concurrent create
            winner = TableRegistry.open_order_for(restaurant, table_number) if table_number is not None else None
            if winner is None:
                raise Conflict("Could not create the order, please retry")
            logger.warning(f"Concurrent order for table {table_number}; adding items to {winner.id}")
            return OrderService.add_items(restaurant, winner.id, items, user=user)

        items_total = OrderService._create_items(order, priced)
        order.total = quantize(items_total + delivery_fee)
        order.save(update_fields=["total", "updated_at"])

        if order_type == Order.OrderType.DELIVERY:
            customer = CustomerService.upsert_from_delivery(restaurant, delivery_info)
            if customer is not None:
                order.customer = customer
                order.save(update_fields=["customer", "updated_at"])

            values = {field: delivery_info.get(field) or "" for field in DELIVERY_FIELDS}
            values["address"] = values["address"] or format_address(delivery_info)
            DeliveryInfo.objects.create(
                order=order,
                delivery_type=delivery_type,
                payment_method=payment_method or "",
                change_for=delivery_info.get("change_for"),
                status=DELIVERY_STATUS_FOR[order.status],
                **values,
            )

        if payment_method:
            Payment.all_objects.create(
                restaurant=restaurant, order=order, amount=order.total, method=payment_method
            )
            session = CashierService.get_open_session(restaurant)
            if session is not None:
                FinancialService.journal_order_income(
                    order, session, payment_method, order.total, f"Order #{order.daily_number}"
                )

        if order_type == Order.OrderType.TABLE:
            TableRegistry.occupy(restaurant, table_number)

        logger.info(
            f"Order #{order.daily_number} ({order.id}) created for restaurant {restaurant.slug}: "
            f"{len(priced)} items, total {order.total}"
        )
        OrderEventDispatcher.on_order_created(order)
        return order

    @staticmethod
    @transaction.atomic
    def add_items(restaurant, order_id, items, user=None) -> Order:
        """
        Append repriced items and move the total by their exact sum. The order
        goes back to the just-submitted state so the kitchen sees it again.

        Raises:
            OrderClosed: the order is COMPLETED or CANCELED
        """
        order = OrderService.get_order(restaurant, order_id, lock=True)
        if order.is_terminal:
            raise OrderClosed(order)

        priced = OrderService.price_items(restaurant, items)
        added = OrderService._create_items(order, priced)

        status = OrderService.submitted_status(restaurant.get_settings())
        OrderService._increment_total(order, added, status=status, updated_at=timezone.now())
        order.refresh_from_db()
        OrderService._sync_delivery_status(order)

        logger.info(f"Added {len(priced)} items ({added}) to order {order.id}")
        OrderEventDispatcher.on_order_changed(order)
        return order

    @staticmethod
    @transaction.atomic
    def update_status(restaurant, order_id, new_status) -> Order:
        """
        Move an order through the status machine. COMPLETED settles the order
        (loyalty, income journal, stock) atomically with the status change.

        Raises:
            InvalidTransition: the move is not allowed from the current state
        """
        order = OrderService.get_order(restaurant, order_id, lock=True)
        if new_status == order.status:
            return order
        if new_status not in OrderService.allowed_transitions(order):
            raise InvalidTransition(order.status, new_status)

        previous = order.status
        order.status = new_status
        if new_status == S.COMPLETED:
            OrderService.settle(order, restaurant.get_settings())
        order.save(update_fields=["status", "paid_at", "updated_at"])

        OrderService._sync_delivery_status(order)
        if order.is_terminal:
            OrderService._finish_terminal(order)

        logger.info(f"Order {order.id} status changed from {previous} to {new_status}")
        OrderEventDispatcher.on_order_changed(order)
        return order

    @staticmethod
    @transaction.atomic
    def cancel_order(restaurant, order_id) -> Order:
        """
        Cancel an open order. Income journaled at creation is canceled too,
        which reverses any balance effect.
        """
        order = OrderService.update_status(restaurant, order_id, S.CANCELED)
        journal = FinancialTransaction.all_objects.filter(
            order=order, type=FinancialTransaction.Type.INCOME
        ).exclude(status=FinancialTransaction.Status.CANCELED)
        for tx_id in journal.values_list("id", flat=True):
            FinancialService.update_transaction(
                restaurant, tx_id, status=FinancialTransaction.Status.CANCELED
            )
        return order

    @staticmethod
    @transaction.atomic
    def remove_item(restaurant, order_id, item_id) -> Order:
        """
        Delete one line and subtract its captured value, never below zero.

        Raises:
            NotFound: the item is not on this order
            OrderClosed: the order is COMPLETED or CANCELED
        """
        order = OrderService.get_order(restaurant, order_id, lock=True)
        if order.is_terminal:
            raise OrderClosed(order)

        try:
            item = order.items.filter(pk=item_id).first()
        except ValueError:
            item = None
        if item is None:
            raise NotFound("Order item", item_id)

        value = item.line_total
        item.delete()
        OrderService._decrement_total(order, value)
        order.refresh_from_db()

        logger.info(f"Removed item {item_id} ({value}) from order {order.id}")
        OrderEventDispatcher.on_order_changed(order)
        return order

    @staticmethod
    @transaction.atomic
    def mark_as_printed(restaurant, order_id) -> Order:
        """Allowed on terminal orders: the printed flag is not order state."""
        order = OrderService.get_order(restaurant, order_id, lock=True)
        if not order.is_printed:
            order.is_printed = True
            order.save(update_fields=["is_printed", "updated_at"])
        return order

    @staticmethod
    @transaction.atomic
    def update_payment_method(restaurant, order_id, method) -> Order:
        """Switch the method on payments, delivery info and journal rows together."""
        if not method:
            raise InvalidSelection("A payment method is required")
        order = OrderService.get_order(restaurant, order_id, lock=True)

        Payment.all_objects.filter(order=order).update(method=method)
        DeliveryInfo.objects.filter(order=order).update(payment_method=method)
        FinancialTransaction.all_objects.filter(order=order, restaurant=restaurant).update(
            payment_method=method, updated_at=timezone.now()
        )

        logger.info(f"Payment method of order {order.id} changed to {method}")
        OrderEventDispatcher.on_order_changed(order)
        return order

    @staticmethod
    @transaction.atomic
    def update_delivery_type(restaurant, order_id, delivery_type) -> Order:
        """
        Switch between delivery and pickup. The fee comes from the restaurant
        settings and the total moves by the fee difference.
        """
        if delivery_type not in DeliveryInfo.DeliveryType.values:
            raise InvalidSelection(f"Unknown delivery type '{delivery_type}'")

        order = OrderService.get_order(restaurant, order_id, lock=True)
        delivery = DeliveryInfo.objects.filter(order=order).first()
        if order.order_type != Order.OrderType.DELIVERY or delivery is None:
            raise NotFound("Delivery order", order_id)
        if order.is_terminal:
            raise OrderClosed(order)

        new_fee = ZERO
        if delivery_type == DeliveryInfo.DeliveryType.DELIVERY:
            new_fee = quantize(restaurant.get_settings().delivery_fee)
        difference = new_fee - to_decimal(order.delivery_fee)

        delivery.delivery_type = delivery_type
        if delivery_type == DeliveryInfo.DeliveryType.PICKUP:
            delivery.driver = None
        delivery.save(update_fields=["delivery_type", "driver"])
        OrderService._increment_total(order, difference, delivery_fee=new_fee, updated_at=timezone.now())
        order.refresh_from_db()

        logger.info(f"Order {order.id} switched to {delivery_type}; fee {new_fee}")
        OrderEventDispatcher.on_order_changed(order)
        return order

    @staticmethod
    @transaction.atomic
    def assign_driver(restaurant, order_id, driver_id) -> Order:
        """Hand a delivery order to one of the restaurant's staff. None takes it back."""
        order = OrderService.get_order(restaurant, order_id, lock=True)
        delivery = DeliveryInfo.objects.filter(order=order).first()
        if order.order_type != Order.OrderType.DELIVERY or delivery is None:
            raise NotFound("Delivery order", order_id)
        if order.is_terminal:
            raise OrderClosed(order)

        driver = None
        if driver_id is not None:
            driver = get_user_model().objects.filter(pk=driver_id, restaurant=restaurant).first()
            if driver is None:
                raise NotFound("Driver", driver_id)
            if delivery.delivery_type == DeliveryInfo.DeliveryType.PICKUP:
                raise InvalidSelection("Pickup orders are not handed to a driver")

        delivery.driver = driver
        delivery.save(update_fields=["driver"])

        logger.info(f"Order {order.id} assigned to driver {driver_id}")
        OrderEventDispatcher.on_order_changed(order)
        return order

