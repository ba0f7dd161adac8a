"""
Saleor Checkout Completer

A Saleor app that listens for CHECKOUT_FULLY_PAID webhooks and completes
the paid checkout into an order with the checkoutComplete mutation.
"""

__version__ = "0.1.0"

from .config import AppConfig
from .apl import InMemoryAPL, SQLiteAPL
from .handler import CheckoutFullyPaidHandler
from .webhook import create_webhook_app
from .mock_client import MockSaleorClient

__all__ = [
    "AppConfig",
    "InMemoryAPL",
    "SQLiteAPL",
    "CheckoutFullyPaidHandler",
    "create_webhook_app",
    "MockSaleorClient",
]
