"""FastAPI application receiving Saleor webhooks."""

from typing import Any, Optional
import logging
from fastapi import FastAPI

from .apl import BaseAPL, create_apl
from .client import fetch_jwks
from .config import AppConfig
from .handler import CheckoutFullyPaidHandler
from .router import get_webhook_router
from .telemetry import get_webhook_duration_histogram
from .verification import JwksFetcher


def configure_logging(config: AppConfig) -> None:
    """Configure root logging from the app configuration."""
    logging.basicConfig(
        filename=config.logging.filename,
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
    )


def create_webhook_app(
    config: AppConfig,
    apl: Optional[BaseAPL] = None,
    http_client: Optional[Any] = None,
    jwks_fetcher: JwksFetcher = fetch_jwks,
) -> FastAPI:
    """
    Create the FastAPI app with manifest, register and webhook endpoints.

    Args:
        config: App configuration
        apl: Credential store (built from config.apl when omitted)
        http_client: Optional HTTP client for Saleor calls (e.g., MockSaleorClient)
        jwks_fetcher: Coroutine returning the JWKS for a Saleor API URL

    Returns:
        FastAPI app ready to run

    Example:
        app = create_webhook_app(config)

        # Run with uvicorn:
        # uvicorn app:app --host 0.0.0.0 --port 8000
    """
    configure_logging(config)

    handler = CheckoutFullyPaidHandler(
        http_client=http_client,
        request_timeout=config.saleor.request_timeout,
        duration_histogram=get_webhook_duration_histogram(),
    )

    app = FastAPI(title=config.app.name, version=config.app.version)
    app.include_router(
        get_webhook_router(
            config,
            apl if apl is not None else create_apl(config.apl),
            handler,
            jwks_fetcher=jwks_fetcher,
            http_client=http_client,
        )
    )
    return app
