"""Retrieval of the issuer's published signing keys."""

import logging
from collections.abc import Awaitable, Callable

import httpx
from pydantic import ValidationError

from okta_jwt.core.errors import NetworkError, ParseError
from okta_jwt.core.settings import FETCH_TIMEOUT_DEFAULT
from okta_jwt.crypto.keys import KeyStore
from okta_jwt.crypto.types import DEFAULT_KEYS_ENDPOINT, JWKSResponse

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[bytes]]


class HttpFetcher:
    """GET a URL with httpx and return the response body."""

    def __init__(
        self,
        *,
        timeout: float = FETCH_TIMEOUT_DEFAULT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def __call__(self, url: str) -> bytes:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout), transport=self._transport
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                return resp.content
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"Key endpoint returned HTTP {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Key endpoint unreachable: {exc}", url=url) from exc


def keys_url(issuer: str, keys_endpoint: str = DEFAULT_KEYS_ENDPOINT) -> str:
    """Join issuer and endpoint path verbatim."""
    return f"{issuer}{keys_endpoint}"


def parse_key_set(body: bytes | str) -> KeyStore:
    """Decode a `{"keys": [...]}` document into a key store."""
    try:
        response = JWKSResponse.model_validate_json(body)
    except ValidationError as exc:
        raise ParseError(f"Malformed key set: {exc.error_count()} error(s)") from exc
    return KeyStore.from_keys(response.keys)


async def fetch_keys(
    issuer: str,
    keys_endpoint: str = DEFAULT_KEYS_ENDPOINT,
    *,
    fetch: Fetch | None = None,
) -> KeyStore:
    """Fetch and index the issuer's key set with a single GET."""
    url = keys_url(issuer, keys_endpoint)
    body = await (fetch or HttpFetcher())(url)
    store = parse_key_set(body)
    logger.info("Fetched %d signing key(s) from %s", len(store), url)
    return store
