"""Service layer exports."""

from .listening_history import ListeningHistoryService
from .listening_stats import ListeningStatsService
from .recommendations import RecommendationService
from .session_store import SessionStore
from .session_validator import ResolvedToken, SessionDiagnostics, SessionValidator
from .token_cipher import TokenCipherService
from .token_exchange import ExchangeResult, TokenExchanger

__all__ = [
    "ExchangeResult",
    "ListeningHistoryService",
    "ListeningStatsService",
    "RecommendationService",
    "ResolvedToken",
    "SessionDiagnostics",
    "SessionStore",
    "SessionValidator",
    "TokenCipherService",
    "TokenExchanger",
]
