"""Mock Saleor client for sandbox mode."""

from typing import Any, Dict, List, Optional
import httpx


class MockResponse:
    """Minimal response object compatible with SaleorGraphQLClient usage."""

    def __init__(self, data: Dict[str, Any], status_code: int = 200, url: str = "http://sandbox/graphql/"):
        self._data = data
        self.status_code = status_code
        self.url = url

    def json(self) -> Dict[str, Any]:
        return self._data

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("POST", self.url)
            raise httpx.HTTPStatusError(
                f"Mock HTTP error {self.status_code}",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )


class MockSaleorClient:
    """
    Mock Saleor client that answers checkoutComplete with canned data.

    Calls are recorded in ``calls`` as ``(query, variables)`` tuples.
    """

    def __init__(
        self,
        errors: Optional[List[Dict[str, Any]]] = None,
        order_id: str = "T3JkZXI6MQ==",
        app_id: str = "QXBwOjE=",
        status_code: int = 200,
    ):
        self.errors = errors or []
        self.order_id = order_id
        self.app_id = app_id
        self.status_code = status_code
        self.calls: List[tuple] = []

    async def request(self, _method: str, url: str, **kwargs) -> MockResponse:
        body = kwargs.get("json") or {}
        query = body.get("query", "")
        variables = body.get("variables", {})
        self.calls.append((query, variables))

        if "checkoutComplete" in query:
            order = None if self.errors else {"id": self.order_id, "errors": []}
            data = {"checkoutComplete": {"order": order, "errors": self.errors}}
        else:
            data = {"app": {"id": self.app_id}}
        return MockResponse({"data": data}, status_code=self.status_code, url=url)

    async def aclose(self) -> None:
        return None
