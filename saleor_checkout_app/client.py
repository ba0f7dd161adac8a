"""Saleor GraphQL client and the checkoutComplete call."""

from typing import Optional, Dict, Any, List
from urllib.parse import urlparse
import httpx
from pydantic import ValidationError

from .models.saleor_models import CheckoutCompleteResult
from .models.webhook_models import (
    CheckoutCompleted,
    CheckoutCompleteRejected,
    CheckoutCompleteFault,
    CheckoutCompleteOutcome,
)


CHECKOUT_COMPLETE_MUTATION = """
mutation CheckoutComplete($checkoutId: ID!) {
  checkoutComplete(id: $checkoutId) {
    order {
      id
      errors {
        field
        message
        code
      }
    }
    errors {
      field
      message
      code
    }
  }
}
"""

APP_ID_QUERY = """
query AppId {
  app {
    id
  }
}
"""


class SaleorClientError(Exception):
    """Base error for Saleor API calls."""


class SaleorTransportError(SaleorClientError):
    """The request to Saleor failed or returned an unusable HTTP response."""


class SaleorGraphQLError(SaleorClientError):
    """Saleor answered with top-level GraphQL errors and no result."""

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        messages = "; ".join(str(e.get("message") if isinstance(e, dict) else e) for e in errors)
        super().__init__(f"GraphQL errors: {messages}")


class SaleorGraphQLClient:
    """
    Authenticated GraphQL client for one Saleor installation.

    Every request carries ``Authorization: Bearer <token>`` and is POSTed
    to the installation's GraphQL endpoint.
    """

    def __init__(
        self,
        api_url: str,
        token: str,
        client: Optional[Any] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            api_url: Saleor GraphQL endpoint (e.g., 'https://store.saleor.cloud/graphql/')
            token: App token used as bearer credential
            client: Optional HTTP client (e.g., MockSaleorClient)
            timeout: Request timeout in seconds
        """
        self.api_url = api_url
        self.token = token
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.AsyncClient(timeout=timeout)
            self._owns_client = True

    async def close(self):
        """Close HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a GraphQL operation.

        Args:
            query: GraphQL document
            variables: Operation variables

        Returns:
            The ``data`` object of the response

        Raises:
            SaleorTransportError: on network errors, non-2xx statuses or invalid JSON
            SaleorGraphQLError: when the response has errors and no usable data
        """
        try:
            response = await self.client.request(
                "POST",
                self.api_url,
                json={"query": query, "variables": variables or {}},
                headers=self.headers,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise SaleorTransportError(str(e)) from e
        except ValueError as e:
            raise SaleorTransportError(f"Invalid JSON response from {self.api_url}") from e

        if not isinstance(body, dict):
            raise SaleorTransportError(f"Unexpected response from {self.api_url}: not a JSON object")
        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise SaleorTransportError(f"Unexpected response from {self.api_url}: data is not an object")
        errors = body.get("errors") or []
        if not isinstance(errors, list):
            errors = [errors]
        if errors and all(value is None for value in data.values()):
            raise SaleorGraphQLError(errors)
        return data

    async def checkout_complete(self, checkout_id: str) -> CheckoutCompleteResult:
        """Run the checkoutComplete mutation and parse its payload."""
        data = await self.execute(CHECKOUT_COMPLETE_MUTATION, {"checkoutId": checkout_id})
        try:
            return CheckoutCompleteResult.model_validate(data.get("checkoutComplete") or {})
        except ValidationError as e:
            raise SaleorClientError(f"Unexpected checkoutComplete payload: {e}") from e

    async def fetch_app_id(self) -> Optional[str]:
        """Return the ID of the app the token belongs to."""
        data = await self.execute(APP_ID_QUERY)
        app = data.get("app") or {}
        return app.get("id")


async def complete_checkout(client: SaleorGraphQLClient, checkout_id: str) -> CheckoutCompleteOutcome:
    """
    Complete a checkout and classify the result.

    Client errors are converted into a ``CheckoutCompleteFault`` here and
    nowhere else; field errors become ``CheckoutCompleteRejected``.
    """
    try:
        result = await client.checkout_complete(checkout_id)
    except SaleorClientError as e:
        return CheckoutCompleteFault(reason=str(e))

    if result.errors:
        return CheckoutCompleteRejected(errors=result.errors)

    return CheckoutCompleted(order_id=result.order.id if result.order else None)


def jwks_url_for(saleor_api_url: str) -> str:
    """JWKS location for a Saleor API URL."""
    parsed = urlparse(saleor_api_url)
    return f"{parsed.scheme}://{parsed.netloc}/.well-known/jwks.json"


async def fetch_jwks(saleor_api_url: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Download the JSON Web Key Set Saleor signs webhooks with.

    Returns:
        The raw JWKS document as a string

    Raises:
        SaleorTransportError: if the keys cannot be fetched
    """
    url = jwks_url_for(saleor_api_url)
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=30.0)
    try:
        response = await http.get(url)
        response.raise_for_status()
        return response.text
    except httpx.HTTPError as e:
        raise SaleorTransportError(f"Unable to fetch JWKS from {url}: {e}") from e
    finally:
        if owns_client:
            await http.aclose()
