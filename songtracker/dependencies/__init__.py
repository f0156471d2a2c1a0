"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_listening_history_service,
    get_listening_stats_service,
    get_oauth_state_encoder,
    get_recommendation_service,
    get_session_store,
    get_session_validator,
    get_spotify_api_client,
    get_spotify_oauth_client,
    get_token_cipher_service,
    get_token_exchanger,
)
from .config import SettingsDep, get_app_settings
from .session import get_session_handle, require_access_token

__all__ = [
    "SettingsDep",
    "get_app_settings",
    "get_listening_history_service",
    "get_listening_stats_service",
    "get_oauth_state_encoder",
    "get_recommendation_service",
    "get_session_handle",
    "get_session_store",
    "get_session_validator",
    "get_spotify_api_client",
    "get_spotify_oauth_client",
    "get_token_cipher_service",
    "get_token_exchanger",
    "require_access_token",
]
