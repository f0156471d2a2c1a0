"""Exception taxonomy shared by the session services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Iterable


class SongTrackerError(Exception):
    """Base class for all application errors."""


class ConfigurationError(SongTrackerError):
    """Raised when required settings (client credentials, redirect URI) are missing."""

    def __init__(self, message: str, *, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class InvalidRequestError(SongTrackerError, ValueError):
    """Raised for malformed caller input such as an empty authorization code."""


class SessionError(SongTrackerError):
    """Base class for failures that require the user to authenticate again."""


class NoSessionError(SessionError):
    """The request carried no session handle."""


class InvalidSessionError(SessionError):
    """The session handle is unknown to the store."""


class ExpiredNoRefreshError(SessionError):
    """The access token expired and no refresh token was ever issued."""


class RefreshFailedError(SessionError):
    """Upstream refused or could not complete the token refresh."""


class UpstreamError(SongTrackerError):
    """Raised when a Spotify endpoint returns a non-success response."""

    def __init__(self, message: str, *, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamPayloadError(UpstreamError):
    """Raised when a Spotify response does not match the expected schema."""


class TokenExchangeError(UpstreamError):
    """Raised when the token endpoint rejects an authorization code."""


class NetworkError(SongTrackerError):
    """Raised when Spotify cannot be reached at the transport level."""


__all__ = [
    "ConfigurationError",
    "ExpiredNoRefreshError",
    "InvalidRequestError",
    "InvalidSessionError",
    "NetworkError",
    "NoSessionError",
    "RefreshFailedError",
    "SessionError",
    "SongTrackerError",
    "TokenExchangeError",
    "UpstreamError",
    "UpstreamPayloadError",
]
