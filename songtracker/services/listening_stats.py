"""Aggregate listening statistics derived from the user's top tracks."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Sequence

from songtracker.clients.spotify_api import SpotifyAPIClient
from songtracker.schemas.listening import (
    DayCount,
    GenreCount,
    ListeningStatsResponse,
    StatsTrack,
    TimeRange,
)
from songtracker.schemas.spotify import SpotifyArtist, SpotifyTrack

logger = logging.getLogger(__name__)

TOP_TRACKS_LIMIT = 50
ARTIST_CAP = 50
GENRE_LIMIT = 10
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
WEEKEND_WEIGHT = 1.5

DAY_DISTRIBUTION_NOTE = (
    "Estimated: Spotify does not expose play times for top tracks, so the "
    "track count is spread evenly across the week with extra weight on "
    "Saturday and Sunday."
)


def unique_artist_ids(tracks: Sequence[SpotifyTrack], cap: int = ARTIST_CAP) -> List[str]:
    """Artist ids in first-seen order, capped to keep the upstream call small."""
    seen: Dict[str, None] = {}
    for track in tracks:
        for artist in track.artists:
            if artist.id and artist.id not in seen:
                seen[artist.id] = None
    return list(seen)[:cap]


def rank_genres(artists: Sequence[SpotifyArtist], limit: int = GENRE_LIMIT) -> List[GenreCount]:
    """Count genre tags and keep the ``limit`` most frequent (ties keep first-seen order)."""
    counts = Counter(genre for artist in artists for genre in artist.genres)
    return [GenreCount(name=name, count=count) for name, count in counts.most_common(limit)]


def estimate_day_distribution(total_tracks: int) -> List[DayCount]:
    """Deterministic weekday split of ``total_tracks``; weekends weigh 1.5x."""
    base = total_tracks // 7
    return [
        DayCount(day=day, count=int(base * WEEKEND_WEIGHT) if index >= 5 else base)
        for index, day in enumerate(WEEKDAYS)
    ]


def _to_stats_track(track: SpotifyTrack) -> StatsTrack:
    return StatsTrack(
        id=track.id,
        name=track.name,
        artist=track.artists[0].name if track.artists else "Unknown Artist",
        album=track.album.name,
        album_art=track.album.images[0].url if track.album.images else "",
        preview_url=track.preview_url,
    )


class ListeningStatsService:
    """Build genre and weekday summaries for the stats view."""

    def __init__(self, api_client: SpotifyAPIClient) -> None:
        self._api = api_client

    async def summarize(
        self, access_token: str, *, time_range: TimeRange = "short_term"
    ) -> ListeningStatsResponse:
        top = await self._api.top_tracks(
            access_token, time_range=time_range, limit=TOP_TRACKS_LIMIT
        )
        tracks = top.items

        genre_data: List[GenreCount] = []
        artist_ids = unique_artist_ids(tracks)
        if artist_ids:
            artists = await self._api.artists(access_token, artist_ids)
            genre_data = rank_genres(artists)

        logger.debug(
            "Summarized %s top tracks across %s artists", len(tracks), len(artist_ids)
        )
        return ListeningStatsResponse(
            genre_data=genre_data,
            time_data=estimate_day_distribution(len(tracks)),
            time_data_note=DAY_DISTRIBUTION_NOTE,
            top_tracks=[_to_stats_track(track) for track in tracks],
            total_tracks=len(tracks),
        )


__all__ = [
    "DAY_DISTRIBUTION_NOTE",
    "ListeningStatsService",
    "estimate_day_distribution",
    "rank_genres",
    "unique_artist_ids",
]
