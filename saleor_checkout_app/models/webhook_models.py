"""Models passed between verification, handler and routes."""

from typing import Optional, List, Union
from pydantic import BaseModel, Field

from .saleor_models import AuthData, CheckoutError, CheckoutFullyPaidPayload


class WebhookContext(BaseModel):
    """Authenticated delivery produced by webhook verification."""
    event: str
    payload: CheckoutFullyPaidPayload
    auth_data: AuthData


class WebhookRejection(BaseModel):
    """Verification failure, returned to the caller as-is."""
    status_code: int
    message: str


class CheckoutCompleted(BaseModel):
    """checkoutComplete succeeded without field errors."""
    order_id: Optional[str] = None


class CheckoutCompleteRejected(BaseModel):
    """checkoutComplete returned one or more field errors; no order was created."""
    errors: List[CheckoutError] = Field(min_length=1)

    @property
    def first_error(self) -> CheckoutError:
        return self.errors[0]


class CheckoutCompleteFault(BaseModel):
    """checkoutComplete could not be carried out (transport or GraphQL failure)."""
    reason: str


CheckoutCompleteOutcome = Union[CheckoutCompleted, CheckoutCompleteRejected, CheckoutCompleteFault]


class HandlerResponse(BaseModel):
    """Status and message the webhook endpoint responds with."""
    status_code: int
    message: Optional[str] = None

    def body(self) -> dict:
        return {"message": self.message}
