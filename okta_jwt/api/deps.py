"""FastAPI dependencies for bearer-token authentication."""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from okta_jwt.core.errors import VerifierError
from okta_jwt.crypto.types import DefaultClaims
from okta_jwt.oidc.verifier import Verifier

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


def _unauthorized(description: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": "invalid_token", "error_description": description},
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_verifier(request: Request) -> Verifier:
    """Return the verifier built during application startup."""
    verifier = getattr(request.app.state, "verifier", None)
    if verifier is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return verifier


def require_claims(
    claims_type: Any = DefaultClaims,
) -> Callable[..., Awaitable[Any]]:
    """Build a dependency that verifies the bearer token into ``claims_type``."""

    async def _verify(
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_security)],
        verifier: Annotated[Verifier, Depends(get_verifier)],
    ) -> Any:
        if credentials is None:
            raise _unauthorized("Authorization header missing")
        try:
            return verifier.verify(credentials.credentials, claims_type).claims
        except VerifierError as exc:
            logger.info("Bearer token rejected: %s", type(exc).__name__)
            raise _unauthorized("Token verification failed") from exc

    return _verify
