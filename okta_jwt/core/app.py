"""FastAPI application factory serving a token-protected route."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI

from okta_jwt.api.deps import require_claims
from okta_jwt.core.settings import VerifierSettings
from okta_jwt.crypto.types import DefaultClaims
from okta_jwt.oidc.key_source import Fetch
from okta_jwt.oidc.verifier import Verifier


def create_app(
    settings: VerifierSettings | None = None, *, fetch: Fetch | None = None
) -> FastAPI:
    """Build the application; the verifier is fetched once at startup."""
    settings = settings or VerifierSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.verifier = await Verifier.from_settings(settings, fetch=fetch)
        yield

    app = FastAPI(
        title="Okta JWT Verifier",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/")
    async def index() -> dict[str, str]:
        return {"message": "Hello World!"}

    @app.get("/protected")
    async def protected(
        claims: Annotated[DefaultClaims, Depends(require_claims(DefaultClaims))],
    ) -> dict[str, str]:
        """Requires a valid bearer token."""
        return {"message": "Here I am!", "sub": claims.sub}

    return app
