import json

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from jose import jwk
from jose.utils import base64url_encode

from saleor_checkout_app.models.saleor_models import AuthData

SALEOR_API_URL = "https://store.saleor.cloud/graphql/"
KID = "test-key-1"


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(private_key):
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    key = jwk.construct(public_pem, algorithm="RS256").to_dict()
    key["kid"] = KID
    key["use"] = "sig"
    return json.dumps({"keys": [key]})


@pytest.fixture(scope="session")
def sign(private_key):
    """Return a function producing Saleor-style detached JWS signatures."""

    def _sign(body: bytes, kid: str = KID) -> str:
        header = {"alg": "RS256", "kid": kid, "b64": False, "crit": ["b64"]}
        protected = base64url_encode(json.dumps(header).encode("utf-8"))
        signature = private_key.sign(
            protected + b"." + body,
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return f"{protected.decode('ascii')}..{base64url_encode(signature).decode('ascii')}"

    return _sign


@pytest.fixture
def auth_data(jwks):
    return AuthData(
        saleor_api_url=SALEOR_API_URL,
        token="app-token",
        app_id="QXBwOjE=",
        domain="store.saleor.cloud",
        jwks=jwks,
    )
