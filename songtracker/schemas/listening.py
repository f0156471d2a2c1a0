"""
Client-facing payloads for listening history, recommendations and stats.
"""

from typing import List, Literal, Optional

from pydantic import Field

from songtracker.schemas.base import APIModel

HistoryKind = Literal["recently-played", "top-tracks"]
TimeRange = Literal["short_term", "medium_term", "long_term"]
RecommendationSource = Literal["recommendations", "search-fallback"]


class HistoryTrack(APIModel):
    id: Optional[str] = None
    name: str
    artist: str = Field(..., description="All credited artists, comma separated.")
    album: str
    album_art: str = ""
    played_at: Optional[str] = Field(
        None,
        description="ISO timestamp of the play; null for top tracks, which carry none.",
    )
    duration: str = Field(..., description="Track length formatted as m:ss.")


class ListeningHistoryResponse(APIModel):
    tracks: List[HistoryTrack]
    total: int
    type: HistoryKind


class RecommendedTrack(APIModel):
    id: Optional[str] = None
    name: str
    artist: str
    album: str
    album_art: str = ""
    preview_url: Optional[str] = None
    popularity: Optional[int] = None
    duration_ms: int


class RecommendationsResponse(APIModel):
    """Recommended tracks plus a marker telling primary and fallback data apart."""

    recommendations: List[RecommendedTrack]
    total: int
    source: RecommendationSource
    is_fallback: bool = False
    note: Optional[str] = None


class GenreCount(APIModel):
    name: str
    count: int


class DayCount(APIModel):
    day: str
    count: int


class StatsTrack(APIModel):
    id: Optional[str] = None
    name: str
    artist: str
    album: str
    album_art: str = ""
    preview_url: Optional[str] = None


class ListeningStatsResponse(APIModel):
    genre_data: List[GenreCount]
    time_data: List[DayCount]
    time_data_is_estimate: bool = Field(
        True,
        description="The day-of-week split is derived from the track count, not play times.",
    )
    time_data_note: str
    top_tracks: List[StatsTrack]
    total_tracks: int


__all__ = [
    "DayCount",
    "GenreCount",
    "HistoryKind",
    "HistoryTrack",
    "ListeningHistoryResponse",
    "ListeningStatsResponse",
    "RecommendationSource",
    "RecommendationsResponse",
    "RecommendedTrack",
    "StatsTrack",
    "TimeRange",
]
