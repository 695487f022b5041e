"""Okta token verifier bound to one issuer and one fetched key set."""

import logging
from collections.abc import Iterable
from typing import Any, TypeVar, overload

from okta_jwt.core.errors import NoMatchingKey, VerifierError
from okta_jwt.core.settings import VerifierSettings
from okta_jwt.crypto.keys import KeyStore
from okta_jwt.crypto.types import DefaultClaims, TokenData, VerifierConfig
from okta_jwt.oidc.key_source import Fetch, HttpFetcher, fetch_keys
from okta_jwt.oidc.token import decode, key_id

logger = logging.getLogger(__name__)

C = TypeVar("C")


class Verifier:
    """Verifies tokens from a single issuer against a key set fetched once.

    Instances are immutable: the ``with_*`` builders return a new verifier
    sharing the same key set, so a configured verifier can be shared across
    concurrent callers.
    """

    def __init__(
        self,
        issuer: str,
        keys: KeyStore,
        config: VerifierConfig | None = None,
        *,
        fetch: Fetch | None = None,
    ) -> None:
        self._issuer = issuer
        self._keys = keys
        self._config = config or VerifierConfig()
        self._fetch = fetch

    @classmethod
    async def create(
        cls,
        issuer: str,
        config: VerifierConfig | None = None,
        *,
        fetch: Fetch | None = None,
    ) -> "Verifier":
        """Fetch the issuer's keys and build a verifier around them."""
        config = config or VerifierConfig()
        keys = await fetch_keys(issuer, config.keys_endpoint, fetch=fetch)
        return cls(issuer, keys, config, fetch=fetch)

    @classmethod
    async def from_settings(
        cls, settings: VerifierSettings, *, fetch: Fetch | None = None
    ) -> "Verifier":
        """Build a verifier from environment settings."""
        fetch = fetch or HttpFetcher(timeout=settings.fetch_timeout)
        return await cls.create(settings.issuer, settings.to_config(), fetch=fetch)

    @property
    def issuer(self) -> str:
        return self._issuer

    @property
    def keys(self) -> KeyStore:
        return self._keys

    @property
    def config(self) -> VerifierConfig:
        return self._config

    def _replace(self, **changes: Any) -> "Verifier":
        config = VerifierConfig.model_validate({**self._config.model_dump(), **changes})
        return Verifier(self._issuer, self._keys, config, fetch=self._fetch)

    def with_leeway(self, seconds: int) -> "Verifier":
        """Return a verifier allowing ``seconds`` of clock skew."""
        return self._replace(leeway=seconds)

    def with_audience(self, audience: Iterable[str]) -> "Verifier":
        """Return a verifier accepting exactly the given audiences."""
        return self._replace(audience=frozenset(audience))

    def add_audience(self, audience: str) -> "Verifier":
        """Return a verifier that also accepts ``audience``."""
        current = self._config.audience or frozenset()
        return self._replace(audience=current | {audience})

    def with_client_id(self, client_id: str) -> "Verifier":
        """Return a verifier requiring the token's cid to equal ``client_id``."""
        return self._replace(client_id=client_id)

    async def refresh(self) -> "Verifier":
        """Re-fetch the issuer's keys into a new verifier with the same config."""
        keys = await fetch_keys(self._issuer, self._config.keys_endpoint, fetch=self._fetch)
        return Verifier(self._issuer, keys, self._config, fetch=self._fetch)

    @overload
    def verify(self, token: str) -> TokenData[DefaultClaims]: ...

    @overload
    def verify(self, token: str, claims_type: type[C]) -> TokenData[C]: ...

    def verify(self, token: str, claims_type: Any = DefaultClaims) -> TokenData[Any]:
        """Verify a token and return its header and claims.

        Raises a ``VerifierError`` subclass on any failure; claims are never
        returned unless every check passed.
        """
        try:
            kid = key_id(token)
            jwk = self._keys.where_id(kid)
            if jwk is None:
                raise NoMatchingKey(kid)
            return decode(
                token,
                jwk,
                claims_type,
                issuer=self._issuer,
                audience=self._config.audience,
                leeway=self._config.leeway,
                client_id=self._config.client_id,
            )
        except VerifierError as exc:
            logger.debug("Token rejected: %s", type(exc).__name__)
            raise
