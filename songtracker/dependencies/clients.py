"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Stateful objects (the session store and the validator holding the refresh
locks) are cached so exactly one instance exists per process.
"""

import secrets
from functools import lru_cache

from songtracker.clients import OAuthStateEncoder, SpotifyAPIClient, SpotifyOAuthClient
from songtracker.core.config import get_settings
from songtracker.services import (
    ListeningHistoryService,
    ListeningStatsService,
    RecommendationService,
    SessionStore,
    SessionValidator,
    TokenCipherService,
    TokenExchanger,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.spotify.client_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_session_store() -> SessionStore:
    """Provide the process-wide session store."""
    return SessionStore(cipher=get_token_cipher_service())


@lru_cache()
def get_oauth_state_encoder() -> OAuthStateEncoder:
    """Sign OAuth state with the encryption secret, else the client secret."""
    settings = _settings()
    secret = (
        settings.security.token_encryption_secret
        or settings.spotify.client_secret
        or secrets.token_urlsafe(32)
    )
    return OAuthStateEncoder(secret_key=secret)


@lru_cache()
def get_spotify_oauth_client() -> SpotifyOAuthClient:
    """Create a singleton Spotify OAuth client."""
    settings = _settings()
    return SpotifyOAuthClient(settings.spotify, settings.http)


@lru_cache()
def get_spotify_api_client() -> SpotifyAPIClient:
    """Create a singleton Spotify Web API client."""
    settings = _settings()
    return SpotifyAPIClient(settings.spotify, settings.http)


@lru_cache()
def get_session_validator() -> SessionValidator:
    """Provide the validator that owns token refresh for every session."""
    return SessionValidator(get_spotify_oauth_client(), get_session_store())


def get_token_exchanger() -> TokenExchanger:
    """Build a token exchanger bound to the shared store."""
    return TokenExchanger(get_spotify_oauth_client(), get_session_store())


def get_listening_history_service() -> ListeningHistoryService:
    return ListeningHistoryService(get_spotify_api_client())


def get_recommendation_service() -> RecommendationService:
    return RecommendationService(get_spotify_api_client())


def get_listening_stats_service() -> ListeningStatsService:
    return ListeningStatsService(get_spotify_api_client())


__all__ = [
    "get_listening_history_service",
    "get_listening_stats_service",
    "get_oauth_state_encoder",
    "get_recommendation_service",
    "get_session_store",
    "get_session_validator",
    "get_spotify_api_client",
    "get_spotify_oauth_client",
    "get_token_cipher_service",
    "get_token_exchanger",
]
