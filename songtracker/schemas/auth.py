"""Schemas related to the OAuth flow and session lifecycle."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from songtracker.schemas.base import APIModel


class TokenExchangeRequest(APIModel):
    """Payload sent to complete the authorization-code exchange."""

    code: str = Field(..., description="Authorization code returned by Spotify.")


class TokenExchangeResponse(APIModel):
    handle: str = Field(..., description="Opaque session handle, also set as a cookie.")
    access_token: str
    refresh_token: Optional[str] = None
    expires_in_seconds: int


class SessionTokenResponse(APIModel):
    access_token: str
    expires_in_remaining_seconds: int


class AuthorizationURLResponse(APIModel):
    authorization_url: str
    state: str


class LogoutResponse(APIModel):
    success: bool = True


class SessionDiagnosticsPayload(APIModel):
    exists: bool
    token_age_seconds: Optional[int] = None
    expires_in: Optional[int] = None
    is_expired: Optional[bool] = None
    has_refresh_token: Optional[bool] = None
    has_access_token: Optional[bool] = None


class SessionDebugResponse(APIModel):
    """Configuration and session state, without any token values."""

    has_session_cookie: bool
    timestamp: datetime
    environment: str
    has_client_id: bool
    has_client_secret: bool
    has_redirect_uri: bool
    session: Optional[SessionDiagnosticsPayload] = None


__all__ = [
    "AuthorizationURLResponse",
    "LogoutResponse",
    "SessionDebugResponse",
    "SessionDiagnosticsPayload",
    "SessionTokenResponse",
    "TokenExchangeRequest",
    "TokenExchangeResponse",
]
