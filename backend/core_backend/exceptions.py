"""
Domain exceptions shared by every app, plus the DRF handler that maps them to HTTP.

Services raise these inside transaction.atomic blocks; raising aborts the
unit of work, and the handler turns the error into a JSON 4xx response.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base exception for business-rule violations."""

    code = "domain_error"
    http_status = status.HTTP_400_BAD_REQUEST


class NotFound(DomainError):
    """Raised when a referenced entity does not exist (or belongs to another restaurant)."""

    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, entity, identifier=None, message=None):
        self.entity = entity
        self.identifier = identifier
        if message is None:
            suffix = f" '{identifier}'" if identifier is not None else ""
            message = f"{entity}{suffix} not found"
        super().__init__(message)


class InvalidSelection(DomainError):
    """Raised when a size, addon, product or item selection is not valid for the target."""

    code = "invalid_selection"


class InvalidTransition(DomainError):
    """Raised when an order status change is not allowed."""

    code = "invalid_transition"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, current, requested, message=None):
        self.current = current
        self.requested = requested
        if message is None:
            message = f"Cannot transition order from {current} to {requested}"
        super().__init__(message)


class OrderClosed(InvalidTransition):
    """Raised when items are added to, or removed from, a COMPLETED or CANCELED order."""

    code = "order_closed"

    def __init__(self, order, message=None):
        self.order = order
        if message is None:
            message = f"Order #{order.daily_number} is {order.status} and cannot be modified"
        super().__init__(order.status, None, message=message)


class SessionAlreadyOpen(DomainError):
    """Raised when opening a cashier session while another one is OPEN."""

    code = "session_already_open"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, message="A cashier session is already open for this restaurant"):
        super().__init__(message)


class NoOpenSession(DomainError):
    """Raised when closing a cashier session and none is OPEN."""

    code = "no_open_session"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, message="No open cashier session for this restaurant"):
        super().__init__(message)


class AlreadyConfirmed(DomainError):
    """Raised when confirming a stock entry twice."""

    code = "already_confirmed"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, entry, message=None):
        self.entry = entry
        if message is None:
            message = f"Stock entry {entry.id} is already confirmed"
        super().__init__(message)


class InsufficientStock(DomainError):
    """Raised when a production run lacks component stock. Nothing is mutated."""

    code = "insufficient_stock"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, ingredient, required, available, message=None):
        self.ingredient = ingredient
        self.required = required
        self.available = available
        if message is None:
            message = (
                f"Insufficient stock of '{ingredient.name}': "
                f"required {required}, available {available}"
            )
        super().__init__(message)


class NotProducible(DomainError):
    """Raised when producing an ingredient that has no recipe."""

    code = "not_producible"

    def __init__(self, ingredient, message=None):
        self.ingredient = ingredient
        if message is None:
            message = f"Ingredient '{ingredient.name}' has no recipe and cannot be produced"
        super().__init__(message)


class Conflict(DomainError):
    """Raised when a concurrent writer won a uniqueness race that could not be resolved."""

    code = "conflict"
    http_status = status.HTTP_409_CONFLICT


def domain_exception_handler(exc, context):
    """
    DRF exception handler that maps DomainError subclasses to 4xx responses.

    Anything DRF does not recognise falls through (and becomes a 500); those
    are logged here with the view and its kwargs so the order id survives.
    """
    if isinstance(exc, DomainError):
        return Response(
            {"error": str(exc), "code": exc.code},
            status=exc.http_status,
        )

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'} "
            f"kwargs={context.get('kwargs')}: {exc}",
            exc_info=True,
        )

    return response
