"""Key set storage and RSA public-key reconstruction from JWK."""

import base64
import logging
from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from types import MappingProxyType

from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from okta_jwt.core.errors import ParseError
from okta_jwt.crypto.types import JWK

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "RS256"
RSA_ALGORITHMS = frozenset({"RS256", "RS384", "RS512", "PS256", "PS384", "PS512"})


class KeyStore(Mapping[str, JWK]):
    """Read-only mapping of key id to JWK, built once per fetch."""

    def __init__(self, keys: Mapping[str, JWK] | None = None) -> None:
        self._keys = MappingProxyType(dict(keys or {}))

    @classmethod
    def from_keys(cls, keys: Iterable[JWK]) -> "KeyStore":
        """Index keys by kid; a repeated kid replaces the earlier entry."""
        indexed: dict[str, JWK] = {}
        for key in keys:
            if key.kid in indexed:
                logger.warning("Duplicate kid %r in key set, keeping the later key", key.kid)
            indexed[key.kid] = key
        return cls(indexed)

    def where_id(self, kid: str) -> JWK | None:
        """Return the key with the given id, if present."""
        return self._keys.get(kid)

    def __getitem__(self, kid: str) -> JWK:
        return self._keys[kid]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"KeyStore(kids={sorted(self._keys)!r})"


def _base64url_to_int(value: str) -> int:
    """Decode an unpadded base64url big-endian integer."""
    padded = value + "=" * (-len(value) % 4)
    raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    return int.from_bytes(raw, byteorder="big")


def signing_algorithm(jwk: JWK) -> str:
    """Algorithm a key verifies with, RS256 when the key omits it."""
    alg = jwk.alg or DEFAULT_ALGORITHM
    if alg not in RSA_ALGORITHMS:
        raise ParseError(f"Unsupported algorithm {alg!r} for key {jwk.kid!r}")
    return alg


def jwk_to_public_key(jwk: JWK) -> RSAPublicKey:
    """Rebuild the RSA public key described by a JWK."""
    if jwk.kty != "RSA":
        raise ParseError(f"Unsupported key type {jwk.kty!r} for key {jwk.kid!r}")
    try:
        return _public_key(jwk.e, jwk.n)
    except ValueError as exc:
        raise ParseError(f"Invalid RSA key material for key {jwk.kid!r}") from exc


@lru_cache(maxsize=64)
def _public_key(e: str, n: str) -> RSAPublicKey:
    numbers = rsa.RSAPublicNumbers(e=_base64url_to_int(e), n=_base64url_to_int(n))
    return numbers.public_key()
