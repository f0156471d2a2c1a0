"""
Resolve session handles into live Spotify access tokens.

Expired tokens are refreshed transparently. A session that cannot be
refreshed is deleted so the client is forced to authenticate again instead of
retrying a grant that will never work.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from songtracker.clients.spotify_auth import SpotifyOAuthClient
from songtracker.core.errors import (
    ExpiredNoRefreshError,
    InvalidSessionError,
    NetworkError,
    NoSessionError,
    RefreshFailedError,
    UpstreamError,
)
from songtracker.core.logging import mask_handle
from songtracker.models.session import SessionRecord
from songtracker.services.session_store import SessionStore
from songtracker.utils.clock import Clock, epoch_millis

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedToken:
    access_token: str
    expires_in_remaining: int


@dataclass(frozen=True, slots=True)
class SessionDiagnostics:
    """Token-free snapshot of a session used by the debug endpoint."""

    has_session_cookie: bool
    exists: bool
    token_age_seconds: Optional[int] = None
    expires_in: Optional[int] = None
    is_expired: Optional[bool] = None
    has_refresh_token: Optional[bool] = None
    has_access_token: Optional[bool] = None


class SessionValidator:
    """Validate, refresh, and expire sessions held in a ``SessionStore``.

    Refreshes are serialized per handle: a caller that waited on the lock
    re-reads the record and reuses the token the previous holder stored, so
    concurrent requests on one expired session trigger a single refresh.
    """

    def __init__(
        self,
        oauth_client: SpotifyOAuthClient,
        store: SessionStore,
        *,
        clock: Clock = epoch_millis,
    ) -> None:
        self._oauth = oauth_client
        self._store = store
        self._clock = clock
        self._refresh_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    async def resolve(self, handle: Optional[str]) -> ResolvedToken:
        """Return a currently valid access token for ``handle``."""
        if not handle:
            raise NoSessionError("No session found.")

        record = self._require(handle)
        now = self._clock()
        if not record.is_expired(now):
            return ResolvedToken(record.access_token, record.remaining_seconds(now))

        lock = self._refresh_locks.setdefault(handle, asyncio.Lock())
        self._lock_users[handle] = self._lock_users.get(handle, 0) + 1
        try:
            async with lock:
                record = self._require(handle)
                now = self._clock()
                if not record.is_expired(now):
                    return ResolvedToken(record.access_token, record.remaining_seconds(now))
                return await self._refresh(handle, record, now)
        finally:
            self._release_lock(handle)

    def logout(self, handle: Optional[str]) -> None:
        """Delete the session behind ``handle``; unknown handles are ignored."""
        if handle:
            self._forget(handle)
            logger.info("Session %s logged out", mask_handle(handle))

    def describe(self, handle: Optional[str]) -> SessionDiagnostics:
        if not handle:
            return SessionDiagnostics(has_session_cookie=False, exists=False)
        record = self._store.get(handle)
        if record is None:
            return SessionDiagnostics(has_session_cookie=True, exists=False)
        now = self._clock()
        return SessionDiagnostics(
            has_session_cookie=True,
            exists=True,
            token_age_seconds=record.token_age_ms(now) // 1000,
            expires_in=record.expires_in,
            is_expired=record.is_expired(now),
            has_refresh_token=bool(record.refresh_token),
            has_access_token=bool(record.access_token),
        )

    def _require(self, handle: str) -> SessionRecord:
        record = self._store.get(handle)
        if record is None:
            raise InvalidSessionError("Invalid session.")
        return record

    async def _refresh(self, handle: str, record: SessionRecord, now: int) -> ResolvedToken:
        if not record.refresh_token:
            self._forget(handle)
            logger.info("Session %s expired without a refresh token", mask_handle(handle))
            raise ExpiredNoRefreshError("Token expired and no refresh token.")

        logger.info("Refreshing access token for session %s", mask_handle(handle))
        try:
            grant = await self._oauth.refresh_access_token(record.refresh_token)
        except (UpstreamError, NetworkError) as exc:
            self._forget(handle)
            logger.warning(
                "Token refresh failed for session %s; session deleted: %s",
                mask_handle(handle),
                exc,
            )
            raise RefreshFailedError("Token refresh failed.") from exc

        fields = {
            "access_token": grant.access_token,
            "expires_in": grant.expires_in,
            "created_at": now,
        }
        if grant.refresh_token:
            fields["refresh_token"] = grant.refresh_token
        if self._store.update(handle, **fields) is None:
            # Logged out while the refresh was in flight.
            raise InvalidSessionError("Invalid session.")

        return ResolvedToken(grant.access_token, grant.expires_in)

    def _release_lock(self, handle: str) -> None:
        # The last request through drops the lock so the map only holds
        # handles with a refresh in flight.
        remaining = self._lock_users[handle] - 1
        if remaining:
            self._lock_users[handle] = remaining
        else:
            del self._lock_users[handle]
            del self._refresh_locks[handle]

    def _forget(self, handle: str) -> None:
        self._store.delete(handle)


__all__ = ["ResolvedToken", "SessionDiagnostics", "SessionValidator"]
