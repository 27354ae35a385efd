import logging
import re

from django.db import IntegrityError, transaction
from django.db.models import F

from core_backend.exceptions import Conflict
from core_backend.money import ZERO, floor_int, quantize, to_decimal

from .models import Customer

logger = logging.getLogger(__name__)

PICKUP_ADDRESS = "Pickup at counter"

ADDRESS_FIELDS = (
    "zip_code", "street", "number", "neighborhood",
    "city", "state", "complement", "reference",
)


def clean_phone(phone) -> str:
    """Strip everything but digits; the result is the per-restaurant dedup key."""
    return re.sub(r"\D", "", phone or "")


def format_address(delivery_info: dict) -> str:
    if delivery_info.get("delivery_type") != "delivery" or not delivery_info.get("street"):
        return PICKUP_ADDRESS
    address = delivery_info["street"]
    if delivery_info.get("number"):
        address += f", {delivery_info['number']}"
    if delivery_info.get("neighborhood"):
        address += f" - {delivery_info['neighborhood']}"
    return address


class CustomerService:

    @staticmethod
    def upsert_from_delivery(restaurant, delivery_info: dict) -> Customer:
        """
        Create or update the customer keyed by (restaurant, phone digits).

        Runs inside the caller's transaction. A concurrent insert of the same
        phone is retried once as an update inside a savepoint.
        """
        phone = clean_phone(delivery_info.get("phone"))
        if not phone:
            return None

        values = {
            "name": delivery_info.get("name") or "",
            "address": format_address(delivery_info),
        }
        for field in ADDRESS_FIELDS:
            values[field] = delivery_info.get(field) or ""

        try:
            with transaction.atomic():
                customer, created = Customer.all_objects.update_or_create(
                    restaurant=restaurant, phone=phone, defaults=values
                )
        except IntegrityError:
            customer = Customer.all_objects.filter(restaurant=restaurant, phone=phone).first()
            if customer is None:
                raise Conflict(f"Could not register customer with phone {phone}")
            Customer.all_objects.filter(pk=customer.pk).update(**values)
            created = False

        if created:
            logger.info(f"Registered customer {customer.id} for restaurant {restaurant.slug}")
        return customer

    @staticmethod
    def find_by_phone(restaurant, phone):
        digits = clean_phone(phone)
        if not digits:
            return None
        return Customer.all_objects.filter(restaurant=restaurant, phone=digits).first()


class LoyaltyService:
    """Points and cashback credited when an order completes."""

    @staticmethod
    def resolve_customer(order):
        if order.customer_id:
            return order.customer
        delivery = getattr(order, "delivery_info", None)
        if delivery is not None and delivery.phone:
            return CustomerService.find_by_phone(order.restaurant, delivery.phone)
        return None

    @staticmethod
    def award(order, settings):
        """
        Credit loyalty for a completed order when the program is enabled and a
        customer can be resolved. Returns (points, cashback) or None.

        points = floor(total x points_per_currency)
        cashback = total x cashback_percentage / 100
        """
        if not settings.loyalty_enabled:
            return None

        customer = LoyaltyService.resolve_customer(order)
        if customer is None:
            return None

        total = to_decimal(order.total)
        points = floor_int(total * to_decimal(settings.points_per_currency))
        cashback = quantize(total * to_decimal(settings.cashback_percentage) / 100)

        if points <= 0 and cashback <= ZERO:
            return None

        Customer.all_objects.filter(pk=customer.pk).update(
            loyalty_points=F("loyalty_points") + points,
            cashback_balance=F("cashback_balance") + cashback,
        )
        logger.info(
            f"Loyalty: credited {points} points and {cashback} cashback to customer {customer.id} "
            f"for order {order.id}"
        )
        return points, cashback
