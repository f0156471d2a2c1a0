"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the session services and
the environment check script share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from songtracker.core.errors import ConfigurationError

_PRODUCTION_ENVIRONMENTS = frozenset({"production", "prod", "staging"})


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file into the process env."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class SpotifySettings(BaseSettings):
    """Credentials and endpoints for the Spotify accounts and Web API."""

    model_config = SettingsConfigDict(env_prefix="SPOTIFY_", extra="ignore")

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    # Kept as a plain string: the token endpoint compares it byte for byte
    # with the value sent on the authorize redirect.
    redirect_uri: Optional[str] = None
    scopes: str = Field(
        "user-read-private,user-read-email,user-read-recently-played,user-top-read",
        description="Comma-separated OAuth scopes requested on authorization.",
    )
    accounts_base_url: str = "https://accounts.spotify.com"
    api_base_url: str = "https://api.spotify.com/v1"

    @field_validator("client_id", "client_secret", "redirect_uri", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def scope_list(self) -> tuple[str, ...]:
        return tuple(scope.strip() for scope in self.scopes.split(",") if scope.strip())

    @property
    def token_url(self) -> str:
        return f"{self.accounts_base_url.rstrip('/')}/api/token"

    @property
    def authorize_url(self) -> str:
        return f"{self.accounts_base_url.rstrip('/')}/authorize"

    def missing_fields(self) -> list[str]:
        """Names of the environment variables that still need a value."""
        missing = []
        if not self.client_id:
            missing.append("SPOTIFY_CLIENT_ID")
        if not self.client_secret:
            missing.append("SPOTIFY_CLIENT_SECRET")
        if not self.redirect_uri:
            missing.append("SPOTIFY_REDIRECT_URI")
        return missing

    def require_credentials(self) -> tuple[str, str]:
        """Return ``(client_id, client_secret)`` or raise ``ConfigurationError``."""
        missing = [
            name
            for name in self.missing_fields()
            if name in ("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET")
        ]
        if missing:
            raise ConfigurationError(
                "Spotify client credentials are not configured.", missing=missing
            )
        return self.client_id, self.client_secret  # type: ignore[return-value]

    def require_client_id(self) -> str:
        if not self.client_id:
            raise ConfigurationError(
                "Spotify client id is not configured.", missing=["SPOTIFY_CLIENT_ID"]
            )
        return self.client_id

    def require_redirect_uri(self) -> str:
        if not self.redirect_uri:
            raise ConfigurationError(
                "Spotify redirect URI is not configured.",
                missing=["SPOTIFY_REDIRECT_URI"],
            )
        return self.redirect_uri


class OAuthSettings(BaseSettings):
    """Authorization flow settings."""

    model_config = SettingsConfigDict(env_prefix="OAUTH_", extra="ignore", populate_by_name=True)

    state_ttl_seconds: int = Field(
        900,
        gt=0,
        validation_alias="OAUTH_STATE_TTL",
        description="How long an issued OAuth state stays valid for the callback.",
    )


class SessionSettings(BaseSettings):
    """Session cookie configuration."""

    model_config = SettingsConfigDict(env_prefix="SESSION_", extra="ignore")

    cookie_name: str = "session_id"
    cookie_max_age: int = Field(
        7 * 24 * 60 * 60,
        description="Lifetime of the session cookie in seconds (7 days).",
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class HTTPSettings(BaseSettings):
    """Outbound HTTP behaviour for upstream calls."""

    model_config = SettingsConfigDict(env_prefix="HTTP_", extra="ignore")

    timeout_seconds: float = 10.0
    timeout_retries: int = Field(
        1,
        ge=0,
        description="Extra attempts made after an upstream timeout.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_prefix="APP_", extra="ignore", populate_by_name=True
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    frontend_base_url: Optional[str] = Field(
        None,
        validation_alias="FRONTEND_BASE_URL",
        description="Optional URL for redirecting users back to the front-end.",
    )
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    http: HTTPSettings = Field(default_factory=HTTPSettings)

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in _PRODUCTION_ENVIRONMENTS


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "HTTPSettings",
    "OAuthSettings",
    "SecuritySettings",
    "SessionSettings",
    "SpotifySettings",
    "get_settings",
]
