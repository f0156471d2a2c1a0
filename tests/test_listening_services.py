"""History, recommendation and stats services against a mocked Spotify API."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from songtracker.clients.spotify_api import SpotifyAPIClient
from songtracker.core.config import HTTPSettings, SpotifySettings
from songtracker.core.errors import NetworkError, UpstreamError, UpstreamPayloadError
from songtracker.schemas.spotify import SpotifyArtist, SpotifyTrack
from songtracker.services.listening_history import ListeningHistoryService, format_duration
from songtracker.services.listening_stats import (
    ListeningStatsService,
    estimate_day_distribution,
    rank_genres,
    unique_artist_ids,
)
from songtracker.services.recommendations import RecommendationService

pytestmark = pytest.mark.anyio


def spotify_id(n: int) -> str:
    return f"{n:022d}"


def track(
    track_id: str | None,
    name: str = "Song",
    *,
    artists: list[tuple[str, str]] | None = None,
    album: str = "Album",
    image: str | None = "https://i.scdn.co/image/1",
    duration_ms: int = 215_000,
    uri: str | None = None,
) -> dict[str, Any]:
    return {
        "id": track_id,
        "uri": uri,
        "name": name,
        "artists": [{"id": aid, "name": aname} for aid, aname in (artists or [("a1", "Artist One")])],
        "album": {"name": album, "images": [{"url": image}] if image else []},
        "duration_ms": duration_ms,
        "preview_url": None,
        "popularity": 42,
    }


class FakeSpotify:
    """Route mocked requests by path; each route is a response or a callable."""

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1")
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"error": {"status": 404, "message": "Not found"}})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    def paths(self) -> list[str]:
        return [request.url.path.removeprefix("/v1") for request in self.requests]

    def params(self, path: str) -> httpx.QueryParams:
        for request in self.requests:
            if request.url.path.removeprefix("/v1") == path:
                return request.url.params
        raise AssertionError(f"{path} was not requested")


@pytest.fixture
def spotify() -> FakeSpotify:
    return FakeSpotify()


@pytest.fixture
def api(spotify) -> SpotifyAPIClient:
    return SpotifyAPIClient(
        SpotifySettings(),
        HTTPSettings(timeout_seconds=1.0, timeout_retries=0),
        transport=httpx.MockTransport(spotify),
    )


def ok(payload: dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, json=payload)


# History


async def test_recently_played_is_reshaped(spotify, api) -> None:
    spotify.routes["/me/player/recently-played"] = ok(
        {
            "items": [
                {
                    "played_at": "2024-05-01T10:00:00.000Z",
                    "track": track(
                        "t1",
                        "First",
                        artists=[("a1", "Artist One"), ("a2", "Artist Two")],
                        duration_ms=185_000,
                    ),
                },
                {
                    "played_at": "2024-05-01T09:00:00.000Z",
                    "track": track(None, "Local", image=None, uri="spotify:local:x", duration_ms=59_999),
                },
            ]
        }
    )

    result = await ListeningHistoryService(api).fetch("AT1")

    assert result.type == "recently-played"
    assert result.total == 2
    first, second = result.tracks
    assert first.artist == "Artist One, Artist Two"
    assert first.duration == "3:05"
    assert first.played_at == "2024-05-01T10:00:00.000Z"
    assert first.album_art == "https://i.scdn.co/image/1"
    assert second.id == "spotify:local:x"
    assert second.album_art == ""
    assert second.duration == "0:59"
    assert spotify.params("/me/player/recently-played")["limit"] == "20"
    assert spotify.requests[0].headers["authorization"] == "Bearer AT1"


async def test_top_tracks_history_has_no_play_time(spotify, api) -> None:
    spotify.routes["/me/top/tracks"] = ok({"items": [track("t1"), track("t2")]})

    result = await ListeningHistoryService(api).fetch(
        "AT1", kind="top-tracks", time_range="long_term"
    )

    assert result.type == "top-tracks"
    assert [t.played_at for t in result.tracks] == [None, None]
    params = spotify.params("/me/top/tracks")
    assert params["time_range"] == "long_term"
    assert params["limit"] == "20"


async def test_history_upstream_error_keeps_status(spotify, api) -> None:
    spotify.routes["/me/player/recently-played"] = httpx.Response(
        403, json={"error": {"status": 403, "message": "Insufficient client scope"}}
    )

    with pytest.raises(UpstreamError) as excinfo:
        await ListeningHistoryService(api).fetch("AT1")

    assert excinfo.value.status_code == 403
    assert excinfo.value.body["error"]["message"] == "Insufficient client scope"


async def test_history_fails_closed_on_unexpected_payload(spotify, api) -> None:
    spotify.routes["/me/player/recently-played"] = ok({"tracks": []})

    with pytest.raises(UpstreamPayloadError):
        await ListeningHistoryService(api).fetch("AT1")


async def test_history_transport_failure_is_network_error(spotify, api) -> None:
    spotify.routes["/me/player/recently-played"] = httpx.ConnectError("refused")

    with pytest.raises(NetworkError):
        await ListeningHistoryService(api).fetch("AT1")


def _retrying_api(handler) -> SpotifyAPIClient:
    return SpotifyAPIClient(
        SpotifySettings(),
        HTTPSettings(timeout_seconds=1.0, timeout_retries=1),
        transport=httpx.MockTransport(handler),
    )


async def test_resource_get_retries_a_timeout_once() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return ok({"items": [track("t1")]})

    page = await _retrying_api(handler).top_tracks("AT1")

    assert [t.id for t in page.items] == ["t1"]
    assert len(attempts) == 2


async def test_resource_get_gives_up_after_repeated_timeouts() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(NetworkError):
        await _retrying_api(handler).recently_played("AT1")

    assert len(attempts) == 2


def test_format_duration() -> None:
    assert format_duration(0) == "0:00"
    assert format_duration(61_000) == "1:01"
    assert format_duration(3_599_999) == "59:59"


# Recommendations


async def test_recommendations_seeded_from_valid_top_track_ids(spotify, api) -> None:
    top = [track(spotify_id(n)) for n in range(1, 5)] + [track("short-id")]
    spotify.routes["/me/top/tracks"] = ok({"items": top})
    spotify.routes["/recommendations"] = ok(
        {"tracks": [track("r1", "Rec", artists=[("a9", "Rec Artist"), ("a8", "Other")])]}
    )

    result = await RecommendationService(api).recommend("AT1", limit=10)

    assert result.source == "recommendations"
    assert result.is_fallback is False
    assert result.note is None
    assert result.total == 1
    assert result.recommendations[0].artist == "Rec Artist"
    params = spotify.params("/recommendations")
    assert params["seed_tracks"] == ",".join(spotify_id(n) for n in range(1, 5))
    assert "seed_genres" not in params
    assert params["limit"] == "10"
    assert spotify.params("/me/top/tracks")["time_range"] == "short_term"


async def test_recommendations_for_genre_skip_top_tracks(spotify, api) -> None:
    spotify.routes["/recommendations"] = ok({"tracks": [track("r1")]})

    result = await RecommendationService(api).recommend("AT1", genre="jazz")

    assert spotify.paths() == ["/recommendations"]
    assert spotify.params("/recommendations")["seed_genres"] == "jazz"
    assert result.source == "recommendations"


async def test_genre_all_means_seed_from_top_tracks(spotify, api) -> None:
    spotify.routes["/me/top/tracks"] = ok({"items": [track(spotify_id(1))]})
    spotify.routes["/recommendations"] = ok({"tracks": []})

    await RecommendationService(api).recommend("AT1", genre="all")

    assert spotify.paths() == ["/me/top/tracks", "/recommendations"]


async def test_no_top_tracks_returns_empty_primary_result(spotify, api) -> None:
    spotify.routes["/me/top/tracks"] = ok({"items": []})

    result = await RecommendationService(api).recommend("AT1")

    assert result.total == 0
    assert result.source == "recommendations"
    assert spotify.paths() == ["/me/top/tracks"]


async def test_recommendations_error_falls_back_to_labeled_search(spotify, api) -> None:
    spotify.routes["/me/top/tracks"] = ok({"items": [track(spotify_id(1))]})
    spotify.routes["/search"] = ok({"tracks": {"items": [track("s1", "Found")]}})

    result = await RecommendationService(api).recommend("AT1", limit=5)

    assert result.source == "search-fallback"
    assert result.is_fallback is True
    assert "pop" in result.note
    assert [t.name for t in result.recommendations] == ["Found"]
    params = spotify.params("/search")
    assert params["q"] == "genre:pop"
    assert params["type"] == "track"
    assert params["limit"] == "5"
    assert spotify.paths() == ["/me/top/tracks", "/recommendations", "/search"]


async def test_fallback_search_uses_requested_genre(spotify, api) -> None:
    spotify.routes["/search"] = ok({"tracks": {"items": []}})

    result = await RecommendationService(api).recommend("AT1", genre="metal")

    assert result.is_fallback is True
    assert spotify.params("/search")["q"] == "genre:metal"


async def test_failed_fallback_surfaces_upstream_error(spotify, api) -> None:
    spotify.routes["/search"] = httpx.Response(500, text="boom")

    with pytest.raises(UpstreamError) as excinfo:
        await RecommendationService(api).recommend("AT1", genre="metal")

    assert excinfo.value.status_code == 500
    assert spotify.paths() == ["/recommendations", "/search"]


async def test_network_failure_on_primary_does_not_fall_back(spotify, api) -> None:
    spotify.routes["/recommendations"] = httpx.ConnectError("refused")

    with pytest.raises(NetworkError):
        await RecommendationService(api).recommend("AT1", genre="jazz")

    assert "/search" not in spotify.paths()


# Stats


async def test_stats_summarize_genres_and_estimated_days(spotify, api) -> None:
    tracks = [
        track(spotify_id(n), f"Song {n}", artists=[(f"artist-{n % 3}", f"Artist {n % 3}")])
        for n in range(50)
    ]
    spotify.routes["/me/top/tracks"] = ok({"items": tracks})
    spotify.routes["/artists"] = ok(
        {
            "artists": [
                {"id": "artist-0", "name": "Artist 0", "genres": ["indie", "rock"]},
                {"id": "artist-1", "name": "Artist 1", "genres": ["rock"]},
                None,
            ]
        }
    )

    result = await ListeningStatsService(api).summarize("AT1", time_range="medium_term")

    assert spotify.params("/me/top/tracks")["limit"] == "50"
    assert spotify.params("/me/top/tracks")["time_range"] == "medium_term"
    assert spotify.params("/artists")["ids"] == "artist-0,artist-1,artist-2"
    assert [(g.name, g.count) for g in result.genre_data] == [("rock", 2), ("indie", 1)]
    assert [d.count for d in result.time_data] == [7, 7, 7, 7, 7, 10, 10]
    assert result.time_data_is_estimate is True
    assert "Estimated" in result.time_data_note
    assert result.total_tracks == 50
    assert result.top_tracks[0].name == "Song 0"


async def test_stats_without_top_tracks_are_empty(spotify, api) -> None:
    spotify.routes["/me/top/tracks"] = ok({"items": []})

    result = await ListeningStatsService(api).summarize("AT1")

    assert result.genre_data == []
    assert [d.day for d in result.time_data][0] == "Monday"
    assert all(d.count == 0 for d in result.time_data)
    assert result.top_tracks == []
    assert result.total_tracks == 0
    assert spotify.paths() == ["/me/top/tracks"]


async def test_stats_artist_failure_is_upstream_error(spotify, api) -> None:
    spotify.routes["/me/top/tracks"] = ok({"items": [track("t1")]})
    spotify.routes["/artists"] = httpx.Response(429, json={"error": "rate limited"})

    with pytest.raises(UpstreamError) as excinfo:
        await ListeningStatsService(api).summarize("AT1")

    assert excinfo.value.status_code == 429


def test_unique_artist_ids_keeps_first_seen_order_and_cap() -> None:
    tracks = [
        SpotifyTrack.model_validate(
            track(f"t{n}", artists=[(f"a{n}", "x"), ("shared", "y"), (None, "local")])
        )
        for n in range(60)
    ]

    ids = unique_artist_ids(tracks)

    assert len(ids) == 50
    assert ids[:3] == ["a0", "shared", "a1"]


def test_rank_genres_truncates_and_orders_ties_by_first_seen() -> None:
    artists = [
        SpotifyArtist(id=f"a{n}", name="x", genres=[f"g{n}", "common"]) for n in range(12)
    ]

    ranked = rank_genres(artists, limit=3)

    assert [(g.name, g.count) for g in ranked] == [("common", 12), ("g0", 1), ("g1", 1)]


@pytest.mark.parametrize(
    ("total", "expected"),
    [
        (0, [0, 0, 0, 0, 0, 0, 0]),
        (6, [0, 0, 0, 0, 0, 0, 0]),
        (14, [2, 2, 2, 2, 2, 3, 3]),
        (21, [3, 3, 3, 3, 3, 4, 4]),
    ],
)
def test_estimated_day_distribution_weights_weekends(total, expected) -> None:
    assert [d.count for d in estimate_day_distribution(total)] == expected
