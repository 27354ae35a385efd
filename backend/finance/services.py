import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from core_backend.exceptions import InvalidSelection, NoOpenSession, NotFound, SessionAlreadyOpen
from core_backend.money import ZERO, quantize, to_decimal
from orders.models import Order
from restaurants.models import Restaurant

from .models import (
    BankAccount,
    CashierSession,
    FinancialTransaction,
    PaymentMethod,
    TransactionCategory,
)

logger = logging.getLogger(__name__)

CASH = "cash"
SALES_CATEGORY = "Sales"

TX_FIELDS = (
    "description", "amount", "gross_amount", "type", "status", "due_date", "payment_date",
    "payment_method", "order", "cashier_session", "bank_account", "supplier",
    "category", "related_transaction", "is_recurring", "recurrence_frequency",
    "recurrence_end_date", "parent",
)


class CashierService:
    """Cashier sessions: at most one OPEN per restaurant."""

    @staticmethod
    def get_open_session(restaurant, lock: bool = False) -> Optional[CashierSession]:
        qs = CashierSession.all_objects.filter(restaurant=restaurant, status=CashierSession.Status.OPEN)
        if lock:
            qs = qs.select_for_update()
        return qs.first()

    @staticmethod
    @transaction.atomic
    def open_session(restaurant, user, initial_amount) -> CashierSession:
        """
        Open a cashier session.

        The existence check and the insert run in one unit of work with the
        restaurant row locked; the partial unique constraint is the backstop.

        Raises:
            SessionAlreadyOpen: an OPEN session already exists
        """
        # Serialize concurrent opens for the same restaurant
        Restaurant.objects.select_for_update().filter(pk=restaurant.pk).first()

        if CashierService.get_open_session(restaurant) is not None:
            raise SessionAlreadyOpen()

        try:
            with transaction.atomic():
                session = CashierSession.all_objects.create(
                    restaurant=restaurant,
                    user=user,
                    initial_amount=quantize(initial_amount or 0),
                    status=CashierSession.Status.OPEN,
                    opened_at=timezone.now(),
                )
        except IntegrityError:
            raise SessionAlreadyOpen()

        logger.info(
            f"Cashier session {session.id} opened for restaurant {restaurant.slug} "
            f"with float {session.initial_amount}"
        )
        return session

    @staticmethod
    @transaction.atomic
    def close_session(restaurant, final_amount, notes: str = "", closing_details: dict = None) -> CashierSession:
        """
        Close the OPEN session, stamping the declared amount. No reconciliation
        against computed cash on hand happens here.

        Raises:
            NoOpenSession: there is no OPEN session
        """
        session = CashierService.get_open_session(restaurant, lock=True)
        if session is None:
            raise NoOpenSession()

        final_notes = notes or ""
        if closing_details:
            lines = [
                f"{method.upper()}: {quantize(value or 0)}"
                for method, value in closing_details.items()
            ]
            final_notes += "\n\n[CLOSING COUNT]:\n" + "\n".join(lines)

        session.status = CashierSession.Status.CLOSED
        session.closed_at = timezone.now()
        session.final_amount = quantize(final_amount or 0)
        session.notes = final_notes
        session.save(update_fields=["status", "closed_at", "final_amount", "notes"])

        logger.info(f"Cashier session {session.id} closed with declared amount {session.final_amount}")
        return session

    @staticmethod
    def cash_on_hand(session: CashierSession) -> Decimal:
        """opening float + PAID cash INCOME - PAID cash EXPENSE over the session's transactions."""
        total = to_decimal(session.initial_amount)
        paid = session.transactions.filter(
            status=FinancialTransaction.Status.PAID, payment_method=CASH
        )
        for tx in paid.only("amount", "type"):
            total += tx.signed_amount
        return quantize(total)

    @staticmethod
    def session_status(restaurant) -> dict:
        """Summary of the OPEN session: cash on hand and income per payment method."""
        session = CashierService.get_open_session(restaurant)
        if session is None:
            return {"is_open": False, "session": None}

        sales_by_method = {}
        paid_income = session.transactions.filter(
            status=FinancialTransaction.Status.PAID,
            type=FinancialTransaction.Type.INCOME,
        )
        for tx in paid_income.only("amount", "payment_method"):
            method = tx.payment_method or "other"
            sales_by_method[method] = quantize(sales_by_method.get(method, ZERO) + tx.amount)

        return {
            "is_open": True,
            "session": session,
            "cash_in_hand": CashierService.cash_on_hand(session),
            "sales_by_method": sales_by_method,
        }


class FinancialService:
    """Journal rows and the bank-account balances they move."""

    @staticmethod
    def _adjust_balance(bank_account_id, delta: Decimal):
        # Atomic F() expression, never read-modify-write
        BankAccount.all_objects.filter(pk=bank_account_id).update(balance=F("balance") + delta)

    @staticmethod
    def _apply(tx: FinancialTransaction):
        if tx.affects_balance:
            FinancialService._adjust_balance(tx.bank_account_id, tx.signed_amount)

    @staticmethod
    def _reverse(tx: FinancialTransaction):
        if tx.affects_balance:
            FinancialService._adjust_balance(tx.bank_account_id, -tx.signed_amount)

    @staticmethod
    def _get_locked(restaurant, transaction_id) -> FinancialTransaction:
        try:
            return FinancialTransaction.all_objects.select_for_update().get(
                id=transaction_id, restaurant=restaurant
            )
        except (FinancialTransaction.DoesNotExist, ValueError, ValidationError):
            raise NotFound("Financial transaction", transaction_id)

    @staticmethod
    @transaction.atomic
    def record_transaction(restaurant, **data) -> FinancialTransaction:
        """
        Create a journal row. A PAID row with a bank account moves that
        account's balance in the same unit of work.
        """
        unknown = set(data) - set(TX_FIELDS)
        if unknown:
            raise TypeError(f"Unknown transaction fields: {', '.join(sorted(unknown))}")

        amount = quantize(data.get("amount") or 0)
        if amount < ZERO:
            raise InvalidSelection("Transaction amount must be a positive magnitude")
        data["amount"] = amount

        if data.get("status") == FinancialTransaction.Status.PAID and not data.get("payment_date"):
            data["payment_date"] = timezone.now()
        if data.get("due_date") is None:
            data.pop("due_date", None)

        tx = FinancialTransaction.all_objects.create(restaurant=restaurant, **data)
        FinancialService._apply(tx)
        return tx

    @staticmethod
    @transaction.atomic
    def update_transaction(restaurant, transaction_id, **changes) -> FinancialTransaction:
        """
        Update a journal row: the old balance effect is reversed before the new
        one is applied, all inside one unit of work with the row locked.

        Raises:
            NotFound: the transaction does not exist for this restaurant
        """
        unknown = set(changes) - set(TX_FIELDS)
        if unknown:
            raise TypeError(f"Unknown transaction fields: {', '.join(sorted(unknown))}")

        tx = FinancialService._get_locked(restaurant, transaction_id)
        FinancialService._reverse(tx)

        for field, value in changes.items():
            if field == "amount":
                value = quantize(value)
                if value < ZERO:
                    raise InvalidSelection("Transaction amount must be a positive magnitude")
            setattr(tx, field, value)

        if tx.status == FinancialTransaction.Status.PAID and tx.payment_date is None:
            tx.payment_date = timezone.now()
        tx.save()

        FinancialService._apply(tx)
        return tx

    @staticmethod
    @transaction.atomic
    def delete_transaction(restaurant, transaction_id):
        """Explicit reversal: undo the balance effect, then delete the row."""
        tx = FinancialService._get_locked(restaurant, transaction_id)
        FinancialService._reverse(tx)
        tx.delete()
        logger.info(f"Financial transaction {transaction_id} reversed and deleted")

    @staticmethod
    @transaction.atomic
    def transfer(restaurant, from_account_id, to_account_id, amount, date=None, description=None):
        """
        Move money between two accounts: a PAID EXPENSE on the source and a
        PAID INCOME on the destination, cross-referenced, both balances moved.

        Returns:
            (debit, credit) transactions
        """
        amount = quantize(amount)
        if amount <= ZERO:
            raise InvalidSelection("Transfer amount must be positive")
        if str(from_account_id) == str(to_account_id):
            raise InvalidSelection("Cannot transfer to the same account")

        accounts = {
            str(a.pk): a
            for a in BankAccount.all_objects.filter(restaurant=restaurant, pk__in=[from_account_id, to_account_id])
        }
        for account_id in (from_account_id, to_account_id):
            if str(account_id) not in accounts:
                raise NotFound("Bank account", account_id)

        when = date or timezone.localdate()
        label = description or "Transfer"
        paid_at = timezone.now()

        debit = FinancialTransaction.all_objects.create(
            restaurant=restaurant,
            description=f"TRANSFER OUT: {label}",
            amount=amount,
            type=FinancialTransaction.Type.EXPENSE,
            status=FinancialTransaction.Status.PAID,
            due_date=when,
            payment_date=paid_at,
            bank_account_id=from_account_id,
            payment_method="transfer",
        )
        credit = FinancialTransaction.all_objects.create(
            restaurant=restaurant,
            description=f"TRANSFER IN: {label}",
            amount=amount,
            type=FinancialTransaction.Type.INCOME,
            status=FinancialTransaction.Status.PAID,
            due_date=when,
            payment_date=paid_at,
            bank_account_id=to_account_id,
            payment_method="transfer",
            related_transaction=debit,
        )
        debit.related_transaction = credit
        debit.save(update_fields=["related_transaction", "updated_at"])

        FinancialService._adjust_balance(from_account_id, -amount)
        FinancialService._adjust_balance(to_account_id, amount)

        logger.info(f"Transfer of {amount} from account {from_account_id} to {to_account_id}")
        return debit, credit

    @staticmethod
    def driver_settlement(restaurant, day=None) -> list:
        """
        What each driver collected on the day's completed deliveries and what
        the restaurant owes them for it.

        Takings are split into cash, card, pix and other by the delivery's
        payment method. amount_due starts at the base rate once for DAILY and
        SHIFT drivers (per delivery for DELIVERY drivers) plus the per-delivery
        bonus; store_net is the takings minus amount_due.
        """
        day = day or timezone.localdate()
        User = get_user_model()
        orders = (
            Order.all_objects.filter(
                restaurant=restaurant,
                order_type=Order.OrderType.DELIVERY,
                status=Order.OrderStatus.COMPLETED,
                created_at__date=day,
                delivery_info__driver__isnull=False,
            )
            .select_related("delivery_info__driver")
            .order_by("created_at")
        )

        settlement = {}
        for order in orders:
            delivery = order.delivery_info
            driver = delivery.driver
            entry = settlement.get(driver.pk)
            if entry is None:
                entry = settlement[driver.pk] = {
                    "driver_id": driver.pk,
                    "driver_name": driver.get_full_name() or driver.username,
                    "total_orders": 0,
                    "cash": ZERO,
                    "card": ZERO,
                    "pix": ZERO,
                    "other": ZERO,
                    "delivery_fees": ZERO,
                    "amount_due": ZERO,
                }
                if driver.driver_pay_type in (User.DriverPayType.DAILY, User.DriverPayType.SHIFT):
                    entry["amount_due"] += to_decimal(driver.driver_base_rate)

            entry["total_orders"] += 1
            entry["amount_due"] += to_decimal(driver.driver_bonus_per_delivery)
            if driver.driver_pay_type == User.DriverPayType.DELIVERY:
                entry["amount_due"] += to_decimal(driver.driver_base_rate)
            entry["delivery_fees"] += to_decimal(order.delivery_fee)

            method = delivery.payment_method or CASH
            if method == CASH:
                bucket = "cash"
            elif "card" in method:
                bucket = "card"
            elif method == "pix":
                bucket = "pix"
            else:
                bucket = "other"
            entry[bucket] += to_decimal(order.total)

        result = []
        for entry in settlement.values():
            for key in ("cash", "card", "pix", "other", "delivery_fees", "amount_due"):
                entry[key] = quantize(entry[key])
            takings = entry["cash"] + entry["card"] + entry["pix"] + entry["other"]
            entry["store_net"] = quantize(takings - entry["amount_due"])
            result.append(entry)
        return result

    @staticmethod
    @transaction.atomic
    def pay_driver(restaurant, driver_name, amount, day=None, driver=None) -> FinancialTransaction:
        """
        Pay a driver's settlement in cash: a PAID cash EXPENSE, tagged with the
        open cashier session when there is one so it leaves the drawer.

        Raises:
            InvalidSelection: the amount is not positive
        """
        amount = quantize(amount)
        if amount <= ZERO:
            raise InvalidSelection("Settlement amount must be positive")
        day = day or timezone.localdate()
        if driver is not None and not driver_name:
            driver_name = driver.get_full_name() or driver.username

        tx = FinancialService.record_transaction(
            restaurant,
            description=f"Driver settlement: {driver_name} ({day.isoformat()})",
            amount=amount,
            type=FinancialTransaction.Type.EXPENSE,
            status=FinancialTransaction.Status.PAID,
            payment_method=CASH,
            cashier_session=CashierService.get_open_session(restaurant),
        )
        logger.info(f"Driver settlement of {amount} paid to {driver_name} for {day}")
        return tx

    @staticmethod
    def get_sales_category(restaurant) -> TransactionCategory:
        category, _created = TransactionCategory.all_objects.get_or_create(
            restaurant=restaurant,
            name=SALES_CATEGORY,
            defaults={"type": FinancialTransaction.Type.INCOME, "is_system": True},
        )
        return category

    @staticmethod
    def find_payment_method(restaurant, key) -> Optional[PaymentMethod]:
        if not key:
            return None
        return (
            PaymentMethod.all_objects.filter(restaurant=restaurant, is_active=True)
            .filter(Q(type=key) | Q(name=key))
            .first()
        )

    @staticmethod
    def journaled_order_income(order) -> Decimal:
        """Gross income already journaled for an order, ignoring canceled rows."""
        total = FinancialTransaction.all_objects.filter(
            order=order,
            type=FinancialTransaction.Type.INCOME,
            status__in=[FinancialTransaction.Status.PAID, FinancialTransaction.Status.PENDING],
        ).aggregate(total=Sum(Coalesce("gross_amount", "amount")))["total"]
        return quantize(total or ZERO)

    @staticmethod
    def journal_order_income(order, session, payment_method: str, gross_amount, description: str):
        """
        Journal an order's income. A configured payment method applies its fee
        (net amount) and settlement lag (PENDING until the due date).
        """
        gross = quantize(gross_amount)
        net = gross
        status = FinancialTransaction.Status.PAID
        due_date = timezone.localdate()

        config = FinancialService.find_payment_method(order.restaurant, payment_method)
        if config is not None:
            if config.fee_percentage > ZERO:
                net = quantize(gross - gross * config.fee_percentage / 100)
            if config.days_to_receive > 0:
                due_date = due_date + timedelta(days=config.days_to_receive)
                status = FinancialTransaction.Status.PENDING
                description += f" (expected {due_date.isoformat()})"

        return FinancialService.record_transaction(
            order.restaurant,
            description=description,
            amount=net,
            gross_amount=gross,
            type=FinancialTransaction.Type.INCOME,
            status=status,
            due_date=due_date,
            payment_method=payment_method,
            order=order,
            cashier_session=session,
            category=FinancialService.get_sales_category(order.restaurant),
        )

    @staticmethod
    def _step(frequency, anchor_day):
        if frequency == FinancialTransaction.Frequency.WEEKLY:
            return relativedelta(weeks=1)
        if frequency == FinancialTransaction.Frequency.MONTHLY:
            # day= keeps month-end bills on the month end instead of drifting
            return relativedelta(months=1, day=anchor_day)
        if frequency == FinancialTransaction.Frequency.YEARLY:
            return relativedelta(years=1, day=anchor_day)
        return None

    @staticmethod
    def materialize_recurring(restaurant, today=None) -> list:
        """
        Generate PENDING occurrences of every active recurring template up to
        today + RECURRING_LOOKAHEAD_DAYS, at most RECURRING_MAX_ITERATIONS per
        template per run. Each template is processed in its own unit of work.
        """
        today = today or timezone.localdate()
        horizon = today + timedelta(days=settings.RECURRING_LOOKAHEAD_DAYS)
        max_iterations = settings.RECURRING_MAX_ITERATIONS

        templates = FinancialTransaction.all_objects.filter(
            restaurant=restaurant,
            is_recurring=True,
            parent__isnull=True,
            recurrence_frequency__isnull=False,
        ).filter(
            Q(recurrence_end_date__isnull=True) | Q(recurrence_end_date__gte=today)
        ).exclude(status=FinancialTransaction.Status.CANCELED)

        generated = []
        for template_id in templates.values_list("id", flat=True):
            generated.extend(
                FinancialService._materialize_template(template_id, horizon, max_iterations)
            )

        if generated:
            logger.info(
                f"Materialized {len(generated)} recurring transactions for restaurant {restaurant.slug}"
            )
        return generated

    @staticmethod
    @transaction.atomic
    def _materialize_template(template_id, horizon, max_iterations) -> list:
        template = FinancialTransaction.all_objects.select_for_update().get(id=template_id)
        step = FinancialService._step(template.recurrence_frequency, template.due_date.day)
        if step is None:
            return []

        last_child = template.children.order_by("-due_date").first()
        last_date = last_child.due_date if last_child else template.due_date

        created = []
        for _ in range(max_iterations):
            next_date = last_date + step
            if next_date > horizon:
                break
            if template.recurrence_end_date and next_date > template.recurrence_end_date:
                break

            created.append(
                FinancialTransaction.all_objects.create(
                    restaurant_id=template.restaurant_id,
                    description=template.description,
                    amount=template.amount,
                    type=template.type,
                    status=FinancialTransaction.Status.PENDING,
                    due_date=next_date,
                    payment_method=template.payment_method,
                    bank_account_id=template.bank_account_id,
                    supplier_id=template.supplier_id,
                    category_id=template.category_id,
                    is_recurring=False,
                    parent=template,
                )
            )
            last_date = next_date

        return created
