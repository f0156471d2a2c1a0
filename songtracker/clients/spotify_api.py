"""Bearer-authenticated client for the Spotify Web API resource endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from songtracker.core.config import HTTPSettings, SpotifySettings
from songtracker.core.errors import NetworkError, UpstreamError, UpstreamPayloadError
from songtracker.schemas.spotify import (
    RecentlyPlayedPage,
    RecommendationsResult,
    SeveralArtists,
    SpotifyArtist,
    TopTracksPage,
    TrackSearchResult,
)
from songtracker.utils.http import RetryConfig, request_with_retry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Upper bound Spotify accepts for ``GET /artists?ids=``.
MAX_ARTIST_IDS_PER_REQUEST = 50


class SpotifyAPIClient:
    """Thin wrapper over the handful of Web API endpoints the app consumes."""

    def __init__(
        self,
        spotify_settings: SpotifySettings,
        http_settings: HTTPSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = spotify_settings.api_base_url.rstrip("/")
        self._http = http_settings
        self._transport = transport

    async def recently_played(self, access_token: str, *, limit: int = 20) -> RecentlyPlayedPage:
        return await self._get(
            "/me/player/recently-played",
            access_token,
            params={"limit": limit},
            model=RecentlyPlayedPage,
        )

    async def top_tracks(
        self, access_token: str, *, time_range: str = "short_term", limit: int = 20
    ) -> TopTracksPage:
        return await self._get(
            "/me/top/tracks",
            access_token,
            params={"time_range": time_range, "limit": limit},
            model=TopTracksPage,
        )

    async def artists(self, access_token: str, artist_ids: Sequence[str]) -> List[SpotifyArtist]:
        """Fetch artist objects, skipping ids Spotify could not resolve."""
        resolved: List[SpotifyArtist] = []
        for start in range(0, len(artist_ids), MAX_ARTIST_IDS_PER_REQUEST):
            chunk = artist_ids[start : start + MAX_ARTIST_IDS_PER_REQUEST]
            page = await self._get(
                "/artists",
                access_token,
                params={"ids": ",".join(chunk)},
                model=SeveralArtists,
            )
            resolved.extend(artist for artist in page.artists if artist is not None)
        return resolved

    async def search_tracks(
        self, access_token: str, query: str, *, limit: int = 20
    ) -> TrackSearchResult:
        return await self._get(
            "/search",
            access_token,
            params={"q": query, "type": "track", "limit": limit},
            model=TrackSearchResult,
        )

    async def recommendations(
        self,
        access_token: str,
        *,
        seed_tracks: Sequence[str] = (),
        seed_genres: Sequence[str] = (),
        limit: int = 20,
    ) -> RecommendationsResult:
        params: Dict[str, Any] = {"limit": limit}
        if seed_tracks:
            params["seed_tracks"] = ",".join(seed_tracks)
        if seed_genres:
            params["seed_genres"] = ",".join(seed_genres)
        return await self._get(
            "/recommendations", access_token, params=params, model=RecommendationsResult
        )

    async def _get(
        self,
        path: str,
        access_token: str,
        *,
        params: Dict[str, Any],
        model: Type[ModelT],
    ) -> ModelT:
        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {access_token}"}

        async with httpx.AsyncClient(
            timeout=self._http.timeout_seconds, transport=self._transport
        ) as client:
            try:
                response = await request_with_retry(
                    client.get,
                    url,
                    params=params,
                    headers=headers,
                    retry_config=RetryConfig(timeout_retries=self._http.timeout_retries),
                )
            except httpx.TransportError as exc:
                logger.warning("Spotify request to %s failed: %s", path, exc)
                raise NetworkError(f"Could not reach Spotify ({path}).") from exc

        if not response.is_success:
            try:
                body: Any = response.json()
            except ValueError:
                body = response.text
            logger.warning(
                "Spotify %s returned status %s", path, response.status_code
            )
            raise UpstreamError(
                f"Spotify request to {path} failed.",
                status_code=response.status_code,
                body=body,
            )

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamPayloadError(
                f"Unexpected payload from Spotify ({path}).",
                status_code=response.status_code,
                body=response.text,
            ) from exc


__all__ = ["MAX_ARTIST_IDS_PER_REQUEST", "SpotifyAPIClient"]
