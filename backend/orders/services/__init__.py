"""
Orders services package - the order transaction engine.

- OrderService: order lifecycle (create, add/remove items, status machine, settlement)
- TransferService: table moves/merges and item transfers between tables
- CheckoutService: full table checkout, partial item payment and partial value payment
- KitchenService: kitchen queue and item completion
- TableRegistry: table occupancy derived from open orders
- OrderEventDispatcher: post-commit UI push and POS sync
"""

# Core order operations
from .order_service import OrderService

# Table operations
from .table_service import TableRegistry
from .transfer_service import TransferService
from .checkout_service import CheckoutService

# Kitchen operations
from .kitchen_service import KitchenService

# Notifications
from .notification_service import OrderEventDispatcher

__all__ = [
    'OrderService',
    'TableRegistry',
    'TransferService',
    'CheckoutService',
    'KitchenService',
    'OrderEventDispatcher',
]
