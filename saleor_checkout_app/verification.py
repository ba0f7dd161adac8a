"""Verification of incoming Saleor webhook deliveries."""

import hmac
import hashlib
import json
import logging
from typing import Awaitable, Callable, Mapping, Optional, Union

from jose import jwk
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode
from pydantic import ValidationError

from .apl import BaseAPL
from .client import SaleorTransportError, fetch_jwks
from .models.saleor_models import AuthData, CheckoutFullyPaidPayload
from .models.webhook_models import WebhookContext, WebhookRejection

logger = logging.getLogger("saleor_checkout_app")

SIGNATURE_HEADER = "saleor-signature"
EVENT_HEADER = "saleor-event"
API_URL_HEADER = "saleor-api-url"
DOMAIN_HEADER = "saleor-domain"

JwksFetcher = Callable[[str], Awaitable[str]]


def verify_hmac_signature(data: bytes, signature: str, secret: str) -> bool:
    """
    Verify a legacy HMAC-SHA256 webhook signature.

    Args:
        data: Raw request body
        signature: Hex digest from the saleor-signature header
        secret: Shared webhook secret

    Returns:
        True if signature is valid
    """
    computed = hmac.new(
        secret.encode("utf-8"),
        data,
        hashlib.sha256
    ).hexdigest()

    return hmac.compare_digest(computed, signature)


def verify_jws_signature(data: bytes, signature: str, jwks: str) -> bool:
    """
    Verify a detached JWS signature (``<protected>..<signature>``) against a JWKS.

    Saleor signs with RS256 and an unencoded payload (``"b64": false``), so the
    signing input is the protected header, a dot and the raw body.
    """
    parts = signature.split(".")
    if len(parts) != 3 or parts[1]:
        return False
    protected, _, encoded_signature = parts

    try:
        header = json.loads(base64url_decode(protected.encode("ascii")))
        raw_signature = base64url_decode(encoded_signature.encode("ascii"))
        keys = json.loads(jwks).get("keys", [])
    except (ValueError, AttributeError):
        return False

    if not isinstance(header, dict) or header.get("alg") != "RS256":
        return False

    if header.get("b64", True) is False:
        signing_input = protected.encode("ascii") + b"." + data
    else:
        signing_input = protected.encode("ascii") + b"." + base64url_encode(data)

    kid = header.get("kid")
    for key_data in keys:
        if kid is not None and key_data.get("kid") != kid:
            continue
        try:
            key = jwk.construct(key_data, algorithm="RS256")
            if key.verify(signing_input, raw_signature):
                return True
        except JOSEError:
            logger.warning("Skipping unusable JWK", extra={"kid": key_data.get("kid")})
    return False


async def verify_signature(
    data: bytes,
    signature: str,
    auth_data: AuthData,
    apl: BaseAPL,
    jwks_fetcher: JwksFetcher = fetch_jwks,
    webhook_secret: Optional[str] = None,
) -> bool:
    """
    Check a delivery signature for an installation.

    The JWKS cached in auth data is tried first; on a miss the keys are
    fetched again, stored in the APL and the check is repeated once.
    """
    if ".." not in signature:
        if not webhook_secret:
            return False
        return verify_hmac_signature(data, signature, webhook_secret)

    if auth_data.jwks and verify_jws_signature(data, signature, auth_data.jwks):
        return True

    try:
        fresh_jwks = await jwks_fetcher(auth_data.saleor_api_url)
    except SaleorTransportError as e:
        logger.warning("JWKS refresh failed", extra={"saleor_api_url": auth_data.saleor_api_url, "error": str(e)})
        return False

    if fresh_jwks == auth_data.jwks:
        return False

    apl.set(auth_data.model_copy(update={"jwks": fresh_jwks}))
    return verify_jws_signature(data, signature, fresh_jwks)


async def process_webhook_request(
    method: str,
    headers: Mapping[str, str],
    body: bytes,
    apl: BaseAPL,
    expected_event: str,
    jwks_fetcher: JwksFetcher = fetch_jwks,
    webhook_secret: Optional[str] = None,
) -> Union[WebhookContext, WebhookRejection]:
    """
    Verify a webhook delivery and build the authenticated context.

    Args:
        method: HTTP method of the request
        headers: Request headers (any case)
        body: Raw request body
        apl: Credential store holding installations
        expected_event: Event the endpoint is registered for (e.g. 'CHECKOUT_FULLY_PAID')
        jwks_fetcher: Coroutine returning the JWKS for a Saleor API URL
        webhook_secret: Secret for legacy HMAC signatures

    Returns:
        WebhookContext on success, WebhookRejection describing the failure otherwise
    """
    if method.upper() != "POST":
        return WebhookRejection(status_code=405, message="Method not allowed")

    normalized = {key.lower(): value for key, value in headers.items()}
    saleor_api_url = normalized.get(API_URL_HEADER)
    event = normalized.get(EVENT_HEADER)
    signature = normalized.get(SIGNATURE_HEADER)

    if not saleor_api_url:
        return WebhookRejection(status_code=400, message=f"Missing {API_URL_HEADER} header")
    if not event:
        return WebhookRejection(status_code=400, message=f"Missing {EVENT_HEADER} header")
    if not signature:
        return WebhookRejection(status_code=400, message=f"Missing {SIGNATURE_HEADER} header")

    if event.lower() != expected_event.lower():
        return WebhookRejection(status_code=400, message=f"Wrong incoming request event: {event}")

    if not body:
        return WebhookRejection(status_code=400, message="Missing request body")
    try:
        raw_payload = json.loads(body)
    except ValueError:
        return WebhookRejection(status_code=400, message="Request body is not valid JSON")

    try:
        payload = CheckoutFullyPaidPayload.model_validate(raw_payload)
    except ValidationError:
        # Unexpected shapes are treated like a missing checkout id.
        logger.warning("Unexpected webhook payload shape", extra={"saleor_api_url": saleor_api_url})
        payload = CheckoutFullyPaidPayload()

    auth_data = apl.get(saleor_api_url)
    if auth_data is None:
        return WebhookRejection(
            status_code=401,
            message=f"Can't find auth data for {saleor_api_url}. Please register the application",
        )

    if not await verify_signature(body, signature, auth_data, apl, jwks_fetcher, webhook_secret):
        logger.warning("Webhook signature check failed", extra={"saleor_api_url": saleor_api_url})
        return WebhookRejection(status_code=401, message="Request signature check failed")

    return WebhookContext(
        event=event.upper(),
        payload=payload,
        auth_data=auth_data,
    )
