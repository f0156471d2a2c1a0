"""
Pydantic models describing the Spotify payloads consumed by the clients.

Every upstream call site parses into one of these models so malformed
responses fail loudly instead of silently turning into empty data.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class TokenGrant(BaseModel):
    """Response body of the accounts token endpoint."""

    access_token: str = Field(..., min_length=1)
    expires_in: int = Field(..., ge=0)
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None


class SpotifyImage(BaseModel):
    url: str
    height: Optional[int] = None
    width: Optional[int] = None


class SpotifyAlbumRef(BaseModel):
    name: str
    images: List[SpotifyImage] = Field(default_factory=list)


class SpotifyArtistRef(BaseModel):
    id: Optional[str] = None
    name: str


class SpotifyTrack(BaseModel):
    id: Optional[str] = None
    uri: Optional[str] = None
    name: str
    artists: List[SpotifyArtistRef]
    album: SpotifyAlbumRef
    duration_ms: int
    preview_url: Optional[str] = None
    popularity: Optional[int] = None


class PlayHistoryItem(BaseModel):
    track: SpotifyTrack
    played_at: str


class RecentlyPlayedPage(BaseModel):
    items: List[PlayHistoryItem]


class TopTracksPage(BaseModel):
    items: List[SpotifyTrack]


class SpotifyArtist(BaseModel):
    id: str
    name: str
    genres: List[str] = Field(default_factory=list)


class SeveralArtists(BaseModel):
    # Spotify answers ``null`` for ids it cannot resolve.
    artists: List[Optional[SpotifyArtist]]


class TrackSearchPage(BaseModel):
    items: List[SpotifyTrack]


class TrackSearchResult(BaseModel):
    tracks: TrackSearchPage


class RecommendationsResult(BaseModel):
    tracks: List[SpotifyTrack]


__all__ = [
    "PlayHistoryItem",
    "RecentlyPlayedPage",
    "RecommendationsResult",
    "SeveralArtists",
    "SpotifyAlbumRef",
    "SpotifyArtist",
    "SpotifyArtistRef",
    "SpotifyImage",
    "SpotifyTrack",
    "TokenGrant",
    "TopTracksPage",
    "TrackSearchPage",
    "TrackSearchResult",
]
