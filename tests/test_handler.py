import json
import logging

import httpx
import pytest

from saleor_checkout_app.handler import CheckoutFullyPaidHandler
from saleor_checkout_app.mock_client import MockSaleorClient
from saleor_checkout_app.models.saleor_models import AuthData, CheckoutFullyPaidPayload
from saleor_checkout_app.models.webhook_models import WebhookContext


def make_context(payload: dict) -> WebhookContext:
    return WebhookContext(
        event="CHECKOUT_FULLY_PAID",
        payload=CheckoutFullyPaidPayload(**payload),
        auth_data=AuthData(
            saleor_api_url="https://store.saleor.cloud/graphql/",
            token="app-token",
            app_id="QXBwOjE=",
        ),
    )


def transport_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class RecordingHistogram:
    def __init__(self):
        self.records = []

    def record(self, value, attributes=None):
        self.records.append((value, attributes))


@pytest.mark.asyncio
async def test_paid_checkout_is_completed_and_acknowledged():
    mock = MockSaleorClient()
    handler = CheckoutFullyPaidHandler(http_client=mock)

    response = await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert response.status_code == 200
    assert response.body() == {"message": "event handled"}
    assert len(mock.calls) == 1
    query, variables = mock.calls[0]
    assert "checkoutComplete" in query
    assert variables == {"checkoutId": "abc"}


@pytest.mark.asyncio
async def test_first_field_error_is_returned_as_500():
    mock = MockSaleorClient(
        errors=[
            {"field": "id", "message": "Invalid checkout", "code": "INVALID"},
            {"field": "lines", "message": "Insufficient stock", "code": "INSUFFICIENT_STOCK"},
        ]
    )
    handler = CheckoutFullyPaidHandler(http_client=mock)

    response = await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert response.status_code == 500
    assert response.body() == {"message": "Invalid checkout"}


@pytest.mark.asyncio
async def test_missing_checkout_id_still_calls_mutation_with_empty_id():
    mock = MockSaleorClient()
    handler = CheckoutFullyPaidHandler(http_client=mock)

    response = await handler.handle(make_context({}))

    assert response.status_code == 200
    assert mock.calls[0][1] == {"checkoutId": ""}


@pytest.mark.asyncio
async def test_checkout_without_id_uses_empty_id():
    mock = MockSaleorClient()
    handler = CheckoutFullyPaidHandler(http_client=mock)

    await handler.handle(make_context({"checkout": {}}))

    assert mock.calls[0][1] == {"checkoutId": ""}


@pytest.mark.asyncio
async def test_transport_fault_is_acknowledged():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with transport_client(refuse) as http_client:
        handler = CheckoutFullyPaidHandler(http_client=http_client)
        response = await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert response.status_code == 200
    assert response.body() == {"message": "event handled"}


@pytest.mark.asyncio
async def test_http_error_status_is_acknowledged():
    handler = CheckoutFullyPaidHandler(http_client=MockSaleorClient(status_code=502))

    response = await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_graphql_permission_error_is_acknowledged():
    def denied(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": {"checkoutComplete": None},
                "errors": [{"message": "You need one of the following permissions: HANDLE_CHECKOUTS"}],
            },
        )

    async with transport_client(denied) as http_client:
        handler = CheckoutFullyPaidHandler(http_client=http_client)
        response = await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_request_uses_installation_url_and_bearer_token():
    seen = []

    def capture(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"data": {"checkoutComplete": {"order": {"id": "order1", "errors": []}, "errors": []}}},
        )

    async with transport_client(capture) as http_client:
        handler = CheckoutFullyPaidHandler(http_client=http_client)
        await handler.handle(make_context({"checkout": {"id": "abc"}}))

    request = seen[0]
    assert str(request.url) == "https://store.saleor.cloud/graphql/"
    assert request.headers["Authorization"] == "Bearer app-token"
    assert json.loads(request.content)["variables"] == {"checkoutId": "abc"}


@pytest.mark.asyncio
async def test_duration_is_recorded_with_outcome():
    histogram = RecordingHistogram()
    handler = CheckoutFullyPaidHandler(
        http_client=MockSaleorClient(errors=[{"field": "id", "message": "Invalid checkout", "code": "INVALID"}]),
        duration_histogram=histogram,
    )

    await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert len(histogram.records) == 1
    assert histogram.records[0][1] == {"outcome": "rejected"}


@pytest.mark.asyncio
async def test_error_without_code_is_returned_as_500():
    handler = CheckoutFullyPaidHandler(
        http_client=MockSaleorClient(errors=[{"field": "id", "message": "Invalid checkout", "code": None}])
    )

    response = await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert response.status_code == 500
    assert response.body() == {"message": "Invalid checkout"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [[], "ok", {"data": {"checkoutComplete": ["x"]}}])
async def test_unexpected_response_shape_is_acknowledged(body):
    def odd(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    histogram = RecordingHistogram()
    async with transport_client(odd) as http_client:
        handler = CheckoutFullyPaidHandler(http_client=http_client, duration_histogram=histogram)
        response = await handler.handle(make_context({"checkout": {"id": "abc"}}))

    assert response.status_code == 200
    assert response.body() == {"message": "event handled"}
    assert histogram.records[0][1] == {"outcome": "fault"}


@pytest.mark.asyncio
async def test_receipt_is_logged_with_event_name(caplog):
    handler = CheckoutFullyPaidHandler(http_client=MockSaleorClient())

    with caplog.at_level(logging.INFO, logger="saleor_checkout_app"):
        await handler.handle(make_context({"checkout": {"id": "abc"}}))

    received = [r for r in caplog.records if r.getMessage() == "Checkout Fully Paid webhook received"]
    assert len(received) == 1
    assert received[0].event == "CHECKOUT_FULLY_PAID"
    assert received[0].checkout_id == "abc"
