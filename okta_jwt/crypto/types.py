"""Type definitions for key material, claims, and verification results."""

from typing import Any, Generic, NamedTuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_KEYS_ENDPOINT = "/v1/keys"
DEFAULT_LEEWAY = 120

ClaimsT = TypeVar("ClaimsT")


class JWK(BaseModel):
    """Single signing key as published in the issuer's key set."""

    model_config = ConfigDict(frozen=True)

    kty: str
    alg: str | None = None
    kid: str
    use: str | None = None
    e: str
    n: str


class JWKSResponse(BaseModel):
    """JSON Web Key Set response body."""

    keys: list[JWK]


class VerifierConfig(BaseModel):
    """Validation settings fixed for the lifetime of a verifier."""

    model_config = ConfigDict(frozen=True)

    keys_endpoint: str = DEFAULT_KEYS_ENDPOINT
    client_id: str | None = None
    leeway: int = Field(default=DEFAULT_LEEWAY, ge=0)
    audience: frozenset[str] | None = None


class DefaultClaims(BaseModel):
    """Claims found in an Okta access token."""

    model_config = ConfigDict(extra="allow")

    iss: str
    sub: str
    exp: int
    iat: int
    scp: list[str] | None = None
    cid: str | None = None
    uid: str | None = None


class TokenHeader(BaseModel):
    """JOSE header of a verified token."""

    model_config = ConfigDict(extra="allow", frozen=True)

    alg: str
    kid: str | None = None
    typ: str | None = None


class TokenData(NamedTuple, Generic[ClaimsT]):
    """Verified header and claims, only ever built on full success."""

    header: TokenHeader
    claims: ClaimsT


Payload = dict[str, Any]
