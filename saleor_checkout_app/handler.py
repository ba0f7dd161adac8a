"""Handler completing checkouts when Saleor reports them fully paid."""

from time import perf_counter
from typing import Any, Optional
import logging

from .client import SaleorGraphQLClient, complete_checkout
from .models.saleor_models import AuthData
from .models.webhook_models import (
    WebhookContext,
    CheckoutCompleted,
    CheckoutCompleteRejected,
    CheckoutCompleteFault,
    CheckoutCompleteOutcome,
    HandlerResponse,
)

logger = logging.getLogger("saleor_checkout_app")

EVENT_HANDLED = "event handled"


class CheckoutFullyPaidHandler:
    """
    Turn a fully paid checkout into an order.

    For each verified delivery the handler reads ``checkout.id`` from the
    payload (empty string when missing), calls ``checkoutComplete`` with the
    installation's credentials and answers:

    - 500 with the first field error message if Saleor rejected the checkout
    - 200 ``event handled`` otherwise, including when the call itself failed
    """

    def __init__(
        self,
        http_client: Optional[Any] = None,
        request_timeout: float = 30.0,
        duration_histogram: Optional[Any] = None,
    ):
        """
        Initialize the handler.

        Args:
            http_client: Optional HTTP client shared by Saleor clients (e.g., MockSaleorClient)
            request_timeout: Timeout for Saleor API calls in seconds
            duration_histogram: Optional OpenTelemetry histogram for handling duration
        """
        self.http_client = http_client
        self.request_timeout = request_timeout
        self.duration_histogram = duration_histogram

    def create_client(self, auth_data: AuthData) -> SaleorGraphQLClient:
        """Build a client authenticated as the installation that sent the event."""
        return SaleorGraphQLClient(
            auth_data.saleor_api_url,
            auth_data.token,
            client=self.http_client,
            timeout=self.request_timeout,
        )

    async def handle(self, context: WebhookContext) -> HandlerResponse:
        """Process one verified CHECKOUT_FULLY_PAID delivery."""
        start = perf_counter()
        checkout_id = context.payload.checkout_id
        logger.info(
            "Checkout Fully Paid webhook received",
            extra={
                "event": context.event,
                "checkout_id": checkout_id,
                "saleor_api_url": context.auth_data.saleor_api_url,
            },
        )

        async with self.create_client(context.auth_data) as client:
            outcome = await complete_checkout(client, checkout_id)

        response = self.respond(outcome)

        if self.duration_histogram is not None:
            duration_ms = (perf_counter() - start) * 1000
            self.duration_histogram.record(duration_ms, attributes={"outcome": _outcome_label(outcome)})
        return response

    def respond(self, outcome: CheckoutCompleteOutcome) -> HandlerResponse:
        """Map a checkoutComplete outcome to the webhook response."""
        if isinstance(outcome, CheckoutCompleteRejected):
            for error in outcome.errors:
                logger.warning(
                    "checkoutComplete error",
                    extra={"field": error.field, "error_message": error.message, "code": error.code},
                )
            return HandlerResponse(status_code=500, message=outcome.first_error.message)

        if isinstance(outcome, CheckoutCompleteFault):
            # Acknowledged so Saleor does not redeliver; the failure only shows up here.
            # TODO: answer non-2xx here if product decides faults should trigger redelivery.
            logger.error("checkoutComplete failed", extra={"reason": outcome.reason})
        else:
            logger.info("Checkout completed", extra={"order_id": outcome.order_id})

        logger.info("Event handled")
        return HandlerResponse(status_code=200, message=EVENT_HANDLED)


def _outcome_label(outcome: CheckoutCompleteOutcome) -> str:
    if isinstance(outcome, CheckoutCompleted):
        return "completed"
    if isinstance(outcome, CheckoutCompleteRejected):
        return "rejected"
    return "fault"
