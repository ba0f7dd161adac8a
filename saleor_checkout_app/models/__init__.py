"""Data models for Saleor payloads and webhook handling."""

from .saleor_models import (
    AuthData,
    CheckoutRef,
    CheckoutError,
    CheckoutFullyPaidPayload,
    CheckoutCompleteResult,
    OrderRef,
)
from .webhook_models import (
    WebhookContext,
    WebhookRejection,
    CheckoutCompleted,
    CheckoutCompleteRejected,
    CheckoutCompleteFault,
    CheckoutCompleteOutcome,
    HandlerResponse,
)

__all__ = [
    "AuthData",
    "CheckoutRef",
    "CheckoutError",
    "CheckoutFullyPaidPayload",
    "CheckoutCompleteResult",
    "OrderRef",
    "WebhookContext",
    "WebhookRejection",
    "CheckoutCompleted",
    "CheckoutCompleteRejected",
    "CheckoutCompleteFault",
    "CheckoutCompleteOutcome",
    "HandlerResponse",
]
