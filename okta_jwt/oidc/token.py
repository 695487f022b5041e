"""Token header inspection, signature verification, and claim validation."""

import time
from collections.abc import Iterable
from functools import lru_cache
from typing import Any, TypeVar

import jwt
from jwt.types import Options
from pydantic import TypeAdapter, ValidationError

from okta_jwt.core.errors import (
    AlgorithmMismatch,
    AudienceMismatch,
    ClaimDeserializeError,
    ClientIdMismatch,
    IssuerMismatch,
    MalformedToken,
    MissingRequiredClaim,
    NoKeyId,
    SignatureInvalid,
    TokenExpired,
    TokenNotYetValid,
    TokenValidationError,
)
from okta_jwt.crypto.keys import jwk_to_public_key, signing_algorithm
from okta_jwt.crypto.types import DEFAULT_LEEWAY, JWK, Payload, TokenData, TokenHeader

C = TypeVar("C")

REQUIRED_CLAIMS = ["exp", "iss"]


def unverified_header(token: str) -> TokenHeader:
    """Read and validate the JOSE header without checking the signature."""
    try:
        return TokenHeader.model_validate(jwt.get_unverified_header(token))
    except jwt.InvalidTokenError as exc:
        raise MalformedToken(str(exc)) from exc
    except ValidationError as exc:
        raise MalformedToken(f"Invalid token header: {exc.error_count()} error(s)") from exc


def key_id(token: str) -> str:
    """Return the kid from the token header."""
    kid = unverified_header(token).kid
    if not kid:
        raise NoKeyId("No key id found in token header")
    return kid


@lru_cache(maxsize=128)
def _adapter(claims_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(claims_type)


def project_claims(payload: Payload, claims_type: type[C]) -> C:
    """Validate a verified payload into the caller's claim type."""
    try:
        return _adapter(claims_type).validate_python(payload)
    except ValidationError as exc:
        raise ClaimDeserializeError(
            f"Claims do not match {getattr(claims_type, '__name__', claims_type)}"
        ) from exc


def check_client_id(payload: Payload, client_id: str) -> None:
    """Require the token's cid to equal the configured client id."""
    if payload.get("cid") != client_id:
        raise ClientIdMismatch("Token cid does not match the configured client id")


def _numeric_claim(payload: Payload, name: str) -> float | None:
    value = payload.get(name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TokenValidationError(f"The {name!r} claim must be a number")
    return value


def _check_times(payload: Payload, leeway: int, now: float | None) -> None:
    """Check exp, nbf and iat against one clock reading."""
    current = time.time() if now is None else now
    exp = _numeric_claim(payload, "exp")
    if exp is not None and exp < current - leeway:
        raise TokenExpired("Token has expired")
    for name in ("nbf", "iat"):
        value = _numeric_claim(payload, name)
        if value is not None and value > current + leeway:
            raise TokenNotYetValid(f"The token is not yet valid ({name})")


def verify_payload(
    token: str,
    jwk: JWK,
    *,
    issuer: str,
    audience: Iterable[str] | None = None,
    leeway: int = DEFAULT_LEEWAY,
    now: float | None = None,
) -> Payload:
    """Verify signature and registered claims, returning the raw payload.

    ``now`` fixes the clock for the exp, nbf and iat checks; wall time is
    used when it is omitted.
    """
    algorithm = signing_algorithm(jwk)
    key = jwk_to_public_key(jwk)
    opts: Options = {
        "verify_exp": False,
        "verify_nbf": False,
        "verify_iat": False,
        "require": REQUIRED_CLAIMS,
    }
    if audience is None:
        opts["verify_aud"] = False
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            issuer=issuer,
            audience=sorted(audience) if audience is not None else None,
            leeway=leeway,
            options=opts,
        )
    except jwt.InvalidSignatureError as exc:
        raise SignatureInvalid(str(exc)) from exc
    except jwt.InvalidAlgorithmError as exc:
        raise AlgorithmMismatch(str(exc)) from exc
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired(str(exc)) from exc
    except jwt.ImmatureSignatureError as exc:
        raise TokenNotYetValid(str(exc)) from exc
    except jwt.InvalidIssuerError as exc:
        raise IssuerMismatch(str(exc)) from exc
    except jwt.InvalidAudienceError as exc:
        raise AudienceMismatch(str(exc)) from exc
    except jwt.MissingRequiredClaimError as exc:
        if exc.claim == "iss":
            raise IssuerMismatch(str(exc)) from exc
        if exc.claim == "aud":
            raise AudienceMismatch(str(exc)) from exc
        raise MissingRequiredClaim(exc.claim) from exc
    except jwt.DecodeError as exc:
        raise MalformedToken(str(exc)) from exc
    except jwt.InvalidTokenError as exc:
        raise TokenValidationError(str(exc)) from exc
    _check_times(payload, leeway, now)
    return payload


def decode(
    token: str,
    jwk: JWK,
    claims_type: type[C],
    *,
    issuer: str,
    audience: Iterable[str] | None = None,
    leeway: int = DEFAULT_LEEWAY,
    client_id: str | None = None,
    now: float | None = None,
) -> TokenData[C]:
    """Verify a token against one key and project its claims.

    The payload is verified once; the client id check and the caller's
    claim type are two projections of that single verified payload.
    """
    header = unverified_header(token)
    payload = verify_payload(
        token, jwk, issuer=issuer, audience=audience, leeway=leeway, now=now
    )
    if client_id is not None:
        check_client_id(payload, client_id)
    claims = project_claims(payload, claims_type)
    return TokenData(header=header, claims=claims)
