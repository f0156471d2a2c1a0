"""Public schema exports."""

from .auth import (
    AuthorizationURLResponse,
    LogoutResponse,
    SessionDebugResponse,
    SessionDiagnosticsPayload,
    SessionTokenResponse,
    TokenExchangeRequest,
    TokenExchangeResponse,
)
from .listening import (
    DayCount,
    GenreCount,
    HistoryKind,
    HistoryTrack,
    ListeningHistoryResponse,
    ListeningStatsResponse,
    RecommendationsResponse,
    RecommendedTrack,
    StatsTrack,
    TimeRange,
)
from .spotify import TokenGrant

__all__ = [
    "AuthorizationURLResponse",
    "DayCount",
    "GenreCount",
    "HistoryKind",
    "HistoryTrack",
    "ListeningHistoryResponse",
    "ListeningStatsResponse",
    "LogoutResponse",
    "RecommendationsResponse",
    "RecommendedTrack",
    "SessionDebugResponse",
    "SessionDiagnosticsPayload",
    "SessionTokenResponse",
    "StatsTrack",
    "TimeRange",
    "TokenExchangeRequest",
    "TokenExchangeResponse",
    "TokenGrant",
]
