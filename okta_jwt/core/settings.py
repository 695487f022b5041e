"""Verifier settings loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from okta_jwt.crypto.types import DEFAULT_KEYS_ENDPOINT, DEFAULT_LEEWAY, VerifierConfig

FETCH_TIMEOUT_DEFAULT = 10.0


class VerifierSettings(BaseSettings):
    """Issuer and validation settings for an Okta token verifier."""

    model_config = SettingsConfigDict(env_prefix="OKTA_")

    issuer: str
    keys_endpoint: str = DEFAULT_KEYS_ENDPOINT
    client_id: str | None = None
    leeway: int = Field(default=DEFAULT_LEEWAY, ge=0)
    audience: str = ""
    fetch_timeout: float = FETCH_TIMEOUT_DEFAULT

    def get_audience_set(self) -> frozenset[str] | None:
        """Parse comma-separated audiences; None disables the audience check."""
        values = frozenset(a.strip() for a in self.audience.split(",") if a.strip())
        return values or None

    def to_config(self) -> VerifierConfig:
        """Build the immutable verifier configuration."""
        return VerifierConfig(
            keys_endpoint=self.keys_endpoint,
            client_id=self.client_id or None,
            leeway=self.leeway,
            audience=self.get_audience_set(),
        )
