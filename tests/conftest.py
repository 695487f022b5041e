"""Shared test fixtures for the Okta JWT verifier."""

import base64
import json
import time
from collections.abc import Callable
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

ISSUER = "https://example.okta.com/oauth2/default"
KID = "12345"

TokenFactory = Callable[..., str]


def _int_to_base64url(value: int) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _jwk_dict(key: RSAPrivateKey, kid: str, alg: str | None = "RS256") -> dict[str, str]:
    numbers = key.public_key().public_numbers()
    entry = {
        "kty": "RSA",
        "kid": kid,
        "use": "sig",
        "e": _int_to_base64url(numbers.e),
        "n": _int_to_base64url(numbers.n),
    }
    if alg is not None:
        entry["alg"] = alg
    return entry


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("OKTA_ISSUER", ISSUER)


@pytest.fixture(scope="session")
def signing_key() -> RSAPrivateKey:
    """RSA key whose public half is published under KID."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_key() -> RSAPrivateKey:
    """RSA key the issuer never published."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def jwk_dict() -> Callable[..., dict[str, str]]:
    """Build a JWK dict from an RSA private key."""
    return _jwk_dict


@pytest.fixture
def jwks(signing_key: RSAPrivateKey) -> dict[str, Any]:
    """Key set document publishing the signing key."""
    return {"keys": [_jwk_dict(signing_key, KID)]}


@pytest.fixture
def fetch_calls() -> list[str]:
    """URLs requested through the stub fetch."""
    return []


@pytest.fixture
def fetch(jwks: dict[str, Any], fetch_calls: list[str]) -> Callable[[str], Any]:
    """Stub fetch returning the key set document."""

    async def _fetch(url: str) -> bytes:
        fetch_calls.append(url)
        return json.dumps(jwks).encode()

    return _fetch


@pytest.fixture
def claims() -> dict[str, Any]:
    """Valid access-token claims for ISSUER."""
    now = int(time.time())
    return {
        "iss": ISSUER,
        "sub": "user-1",
        "aud": "api://default",
        "exp": now + 3600,
        "iat": now,
        "scp": ["openid", "profile"],
        "cid": "client-1",
        "uid": "00u1",
    }


@pytest.fixture
def make_token(signing_key: RSAPrivateKey, claims: dict[str, Any]) -> TokenFactory:
    """Sign a token; keyword overrides replace claims, None removes them."""

    def _make(
        *,
        key: RSAPrivateKey | None = None,
        kid: str | None = KID,
        algorithm: str = "RS256",
        headers: dict[str, Any] | None = None,
        **overrides: Any,
    ) -> str:
        payload = {**claims, **overrides}
        payload = {k: v for k, v in payload.items() if v is not None}
        headers = {**({"kid": kid} if kid is not None else {}), **(headers or {})}
        return jwt.encode(
            payload,
            key or signing_key,
            algorithm=algorithm,
            headers=headers,
        )

    return _make
