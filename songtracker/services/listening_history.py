"""Recently played and top tracks, reshaped for the client."""

from __future__ import annotations

import logging

from songtracker.clients.spotify_api import SpotifyAPIClient
from songtracker.schemas.listening import (
    HistoryKind,
    HistoryTrack,
    ListeningHistoryResponse,
    TimeRange,
)
from songtracker.schemas.spotify import SpotifyTrack

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20


def format_duration(duration_ms: int) -> str:
    """Render milliseconds as ``m:ss``."""
    minutes, remainder = divmod(duration_ms, 60_000)
    return f"{minutes}:{remainder // 1000:02d}"


def _album_art(track: SpotifyTrack) -> str:
    return track.album.images[0].url if track.album.images else ""


def _to_history_track(track: SpotifyTrack, played_at: str | None) -> HistoryTrack:
    return HistoryTrack(
        id=track.id or track.uri,
        name=track.name,
        artist=", ".join(artist.name for artist in track.artists),
        album=track.album.name,
        album_art=_album_art(track),
        played_at=played_at,
        duration=format_duration(track.duration_ms),
    )


class ListeningHistoryService:
    """Serve the user's recently played or top tracks."""

    def __init__(self, api_client: SpotifyAPIClient) -> None:
        self._api = api_client

    async def fetch(
        self,
        access_token: str,
        *,
        kind: HistoryKind = "recently-played",
        time_range: TimeRange = "short_term",
    ) -> ListeningHistoryResponse:
        if kind == "recently-played":
            page = await self._api.recently_played(access_token, limit=HISTORY_LIMIT)
            tracks = [_to_history_track(item.track, item.played_at) for item in page.items]
        else:
            top = await self._api.top_tracks(
                access_token, time_range=time_range, limit=HISTORY_LIMIT
            )
            # Top tracks have no play time; leave it empty rather than invent one.
            tracks = [_to_history_track(track, None) for track in top.items]

        logger.debug("Fetched %s %s tracks", len(tracks), kind)
        return ListeningHistoryResponse(tracks=tracks, total=len(tracks), type=kind)


__all__ = ["HISTORY_LIMIT", "ListeningHistoryService", "format_duration"]
