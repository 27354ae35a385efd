"""
Pluggable external collaborators, selected by dotted path in settings
(FISCAL_BACKEND, POS_SYNC_BACKEND).

The fiscal authority and third-party POS protocols are black boxes: a backend
only has to accept the order data and report success or raise.
"""
import logging
import uuid

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class LoggingFiscalBackend:
    """Development backend: authorizes every invoice locally."""

    def authorize(self, order):
        access_key = uuid.uuid4().hex
        logger.info(f"[fiscal] Authorized invoice for order {order.id} (total {order.total}), key {access_key}")
        return {"success": True, "access_key": access_key}


class LoggingPosSyncBackend:
    def push(self, payload):
        logger.info(f"[pos-sync] {payload['event']} for order {payload['order_id']}")


class HttpPosSyncBackend:
    """POSTs the order payload as JSON to POS_SYNC_URL."""

    def __init__(self, url=None, timeout=None):
        self.url = url or settings.POS_SYNC_URL
        self.timeout = timeout or settings.POS_SYNC_TIMEOUT

    def push(self, payload):
        if not self.url:
            logger.warning("POS_SYNC_URL is not configured. Skipping POS sync.")
            return
        response = requests.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
