"""Pydantic models for Saleor webhook payloads and API responses."""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class CheckoutRef(BaseModel):
    """Checkout reference delivered in the webhook payload."""
    id: Optional[str] = None


class CheckoutFullyPaidPayload(BaseModel):
    """Payload of the CHECKOUT_FULLY_PAID subscription."""
    checkout: Optional[CheckoutRef] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def checkout_id(self) -> str:
        """Checkout ID, or an empty string when the payload has none."""
        if self.checkout is None or not self.checkout.id:
            return ""
        return self.checkout.id


class CheckoutError(BaseModel):
    """Field-level error returned by checkoutComplete."""
    field: Optional[str] = None
    message: Optional[str] = None
    code: Optional[str] = None


class OrderRef(BaseModel):
    """Order created from a completed checkout."""
    id: str
    errors: List[CheckoutError] = Field(default_factory=list)


class CheckoutCompleteResult(BaseModel):
    """Result of the checkoutComplete mutation."""
    order: Optional[OrderRef] = None
    errors: List[CheckoutError] = Field(default_factory=list)


class AuthData(BaseModel):
    """Credentials stored for a Saleor installation."""
    saleor_api_url: str = Field(alias="saleorApiUrl")
    token: str
    app_id: str = Field(alias="appId")
    domain: Optional[str] = None
    jwks: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
