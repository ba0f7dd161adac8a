"""FastAPI router for the Saleor app endpoints."""

from typing import Any, Optional
from urllib.parse import urlparse
import logging
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .apl import BaseAPL
from .client import SaleorClientError, SaleorGraphQLClient, fetch_jwks
from .config import AppConfig
from .handler import CheckoutFullyPaidHandler
from .manifest import checkout_fully_paid_webhook, get_app_manifest
from .models.saleor_models import AuthData
from .models.webhook_models import WebhookRejection
from .verification import API_URL_HEADER, DOMAIN_HEADER, JwksFetcher, process_webhook_request

logger = logging.getLogger("saleor_checkout_app")


class RegisterRequest(BaseModel):
    auth_token: str


def get_webhook_router(
    config: AppConfig,
    apl: BaseAPL,
    handler: CheckoutFullyPaidHandler,
    jwks_fetcher: JwksFetcher = fetch_jwks,
    http_client: Optional[Any] = None,
) -> APIRouter:
    """
    Create a FastAPI router for the app.

    Args:
        config: App configuration
        apl: Credential store for installations
        handler: Checkout fully paid handler
        jwks_fetcher: Coroutine returning the JWKS for a Saleor API URL
        http_client: Optional HTTP client used for registration calls

    Returns:
        APIRouter with manifest, register, webhook and health endpoints
    """
    router = APIRouter(tags=["saleor"])

    @router.get("/api/manifest")
    async def manifest():
        """App manifest, including webhook registration metadata."""
        return get_app_manifest(config)

    @router.post("/api/register")
    async def register(payload: RegisterRequest, request: Request):
        """Store the auth token Saleor hands over when installing the app."""
        saleor_api_url = request.headers.get(API_URL_HEADER)
        if not saleor_api_url:
            raise HTTPException(status_code=400, detail=f"Missing {API_URL_HEADER} header")

        allowed = config.saleor.allowed_api_urls
        if allowed and saleor_api_url not in allowed:
            raise HTTPException(status_code=403, detail="Saleor URL is not allowed to register the app")

        try:
            async with SaleorGraphQLClient(
                saleor_api_url,
                payload.auth_token,
                client=http_client,
                timeout=config.saleor.request_timeout,
            ) as client:
                app_id = await client.fetch_app_id()
            jwks = await jwks_fetcher(saleor_api_url)
        except SaleorClientError as e:
            logger.error("App registration failed", extra={"saleor_api_url": saleor_api_url, "error": str(e)})
            raise HTTPException(status_code=500, detail="Unable to reach Saleor to register the app")

        if not app_id:
            raise HTTPException(status_code=401, detail="Unknown app ID")

        apl.set(
            AuthData(
                saleor_api_url=saleor_api_url,
                token=payload.auth_token,
                app_id=app_id,
                domain=request.headers.get(DOMAIN_HEADER) or urlparse(saleor_api_url).netloc,
                jwks=jwks,
            )
        )
        logger.info("App registered", extra={"saleor_api_url": saleor_api_url, "app_id": app_id})
        return {"success": True}

    @router.post(checkout_fully_paid_webhook.route)
    async def checkout_fully_paid(request: Request):
        """Receive CHECKOUT_FULLY_PAID deliveries; the raw body is kept for signature checks."""
        headers = dict(request.headers)
        if config.saleor.host_url:
            headers[DOMAIN_HEADER] = config.saleor.domain
            headers["x-saleor-domain"] = config.saleor.domain
            headers[API_URL_HEADER] = config.saleor.api_url

        body = await request.body()
        result = await process_webhook_request(
            request.method,
            headers,
            body,
            apl,
            checkout_fully_paid_webhook.event,
            jwks_fetcher=jwks_fetcher,
            webhook_secret=config.saleor.webhook_secret,
        )
        if isinstance(result, WebhookRejection):
            return JSONResponse(status_code=result.status_code, content={"message": result.message})

        response = await handler.handle(result)
        return JSONResponse(status_code=response.status_code, content=response.body())

    @router.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return router
