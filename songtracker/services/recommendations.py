"""
Track recommendations with a single, labeled fallback.

The primary source is Spotify's recommendations endpoint, seeded either by the
requested genre or by the user's current top tracks. That endpoint is not
available to every application, so when it answers with an error the service
falls back once to a genre search and marks the result as fallback data.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from songtracker.clients.spotify_api import SpotifyAPIClient
from songtracker.core.errors import UpstreamError
from songtracker.schemas.listening import RecommendationsResponse, RecommendedTrack
from songtracker.schemas.spotify import SpotifyTrack

logger = logging.getLogger(__name__)

MAX_SEED_TRACKS = 5
SPOTIFY_ID_LENGTH = 22
DEFAULT_FALLBACK_GENRE = "pop"


def _to_recommended_track(track: SpotifyTrack) -> RecommendedTrack:
    return RecommendedTrack(
        id=track.id,
        name=track.name,
        artist=track.artists[0].name if track.artists else "Unknown Artist",
        album=track.album.name,
        album_art=track.album.images[0].url if track.album.images else "",
        preview_url=track.preview_url,
        popularity=track.popularity,
        duration_ms=track.duration_ms,
    )


def _seed_ids(tracks: Iterable[SpotifyTrack]) -> List[str]:
    ids = [track.id for track in tracks if track.id and len(track.id) == SPOTIFY_ID_LENGTH]
    return ids[:MAX_SEED_TRACKS]


class RecommendationService:
    """Recommend tracks for a genre or for the user's recent taste."""

    def __init__(self, api_client: SpotifyAPIClient) -> None:
        self._api = api_client

    async def recommend(
        self, access_token: str, *, genre: Optional[str] = None, limit: int = 20
    ) -> RecommendationsResponse:
        genre = (genre or "").strip() or None
        if genre and genre.lower() == "all":
            genre = None

        seed_tracks: List[str] = []
        if genre is None:
            top = await self._api.top_tracks(
                access_token, time_range="short_term", limit=MAX_SEED_TRACKS
            )
            seed_tracks = _seed_ids(top.items)
            if not seed_tracks:
                logger.info("No top tracks to seed recommendations; returning none")
                return RecommendationsResponse(
                    recommendations=[], total=0, source="recommendations"
                )

        try:
            result = await self._api.recommendations(
                access_token,
                seed_tracks=seed_tracks,
                seed_genres=[genre] if genre else (),
                limit=limit,
            )
        except UpstreamError as exc:
            logger.warning(
                "Recommendations endpoint failed (status %s); using genre search",
                exc.status_code,
            )
            return await self._search_fallback(access_token, genre=genre, limit=limit)

        tracks = [_to_recommended_track(track) for track in result.tracks]
        return RecommendationsResponse(
            recommendations=tracks, total=len(tracks), source="recommendations"
        )

    async def _search_fallback(
        self, access_token: str, *, genre: Optional[str], limit: int
    ) -> RecommendationsResponse:
        search_genre = genre or DEFAULT_FALLBACK_GENRE
        result = await self._api.search_tracks(
            access_token, f"genre:{search_genre}", limit=limit
        )
        tracks = [_to_recommended_track(track) for track in result.tracks.items]
        return RecommendationsResponse(
            recommendations=tracks,
            total=len(tracks),
            source="search-fallback",
            is_fallback=True,
            note=(
                f"Recommendations are unavailable; showing search results for "
                f"genre '{search_genre}' instead."
            ),
        )


__all__ = ["RecommendationService"]
