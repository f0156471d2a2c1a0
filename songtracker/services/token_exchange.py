"""Turn an authorization code into a stored session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from songtracker.clients.spotify_auth import SpotifyOAuthClient
from songtracker.core.errors import InvalidRequestError
from songtracker.core.logging import mask_handle
from songtracker.models.session import SessionRecord
from songtracker.services.session_store import SessionStore
from songtracker.utils.clock import Clock, epoch_millis

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExchangeResult:
    """Outcome of a successful code exchange."""

    handle: str
    access_token: str
    refresh_token: Optional[str]
    expires_in: int


class TokenExchanger:
    """Exchange authorization codes and create the matching session record."""

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

    async def exchange(self, authorization_code: str) -> ExchangeResult:
        """Exchange ``authorization_code`` and return the new session handle.

        Raises ``ConfigurationError`` when client credentials are missing and
        ``TokenExchangeError`` when Spotify rejects the code. Nothing is stored
        unless the exchange succeeds.
        """
        code = (authorization_code or "").strip()
        if not code:
            raise InvalidRequestError("Authorization code is required.")

        grant = await self._oauth.exchange_authorization_code(code)

        handle = self._store.new_handle()
        self._store.set(
            handle,
            SessionRecord(
                access_token=grant.access_token,
                refresh_token=grant.refresh_token,
                expires_in=grant.expires_in,
                created_at=self._clock(),
            ),
        )
        logger.info(
            "Created session %s (expires in %ss, refresh token %s)",
            mask_handle(handle),
            grant.expires_in,
            "present" if grant.refresh_token else "absent",
        )

        return ExchangeResult(
            handle=handle,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_in=grant.expires_in,
        )


__all__ = ["ExchangeResult", "TokenExchanger"]
