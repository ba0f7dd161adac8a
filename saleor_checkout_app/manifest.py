"""Webhook definitions and the app manifest Saleor installs the app from."""

from typing import Any, Dict

from .config import AppConfig


CHECKOUT_FULLY_PAID_PAYLOAD_FRAGMENT = """
fragment CheckoutFullyPaidWebhookPayload on CheckoutFullyPaid {
  checkout {
    id
  }
}
"""

# Payload fragment must be included in the root query
CHECKOUT_FULLY_PAID_SUBSCRIPTION = CHECKOUT_FULLY_PAID_PAYLOAD_FRAGMENT + """
subscription CheckoutFullyPaid {
  event {
    ...CheckoutFullyPaidWebhookPayload
  }
}
"""


class SaleorAsyncWebhook:
    """
    Registration metadata for an asynchronous Saleor webhook.

    Saleor uses the subscription query from the manifest to decide which
    payload fields to deliver.
    """

    def __init__(self, name: str, webhook_path: str, event: str, query: str, is_active: bool = True):
        self.name = name
        self.webhook_path = webhook_path.strip("/")
        self.event = event
        self.query = query
        self.is_active = is_active

    @property
    def route(self) -> str:
        return f"/{self.webhook_path}"

    def target_url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/{self.webhook_path}"

    def get_webhook_manifest(self, base_url: str) -> Dict[str, Any]:
        """Webhook entry for the app manifest."""
        return {
            "name": self.name,
            "asyncEvents": [self.event],
            "query": self.query,
            "targetUrl": self.target_url(base_url),
            "isActive": self.is_active,
        }


checkout_fully_paid_webhook = SaleorAsyncWebhook(
    name="Checkout Fully Paid in Saleor",
    webhook_path="api/webhooks/checkout-fully-paid",
    event="CHECKOUT_FULLY_PAID",
    query=CHECKOUT_FULLY_PAID_SUBSCRIPTION,
)


def get_app_manifest(config: AppConfig) -> Dict[str, Any]:
    """Build the app manifest served at /api/manifest."""
    base_url = config.app.app_url.rstrip("/")
    return {
        "id": config.app.app_id,
        "version": config.app.version,
        "name": config.app.name,
        "permissions": config.app.permissions,
        "appUrl": base_url,
        "tokenTargetUrl": f"{base_url}/api/register",
        "webhooks": [checkout_fully_paid_webhook.get_webhook_manifest(base_url)],
    }
