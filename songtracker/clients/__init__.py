"""Expose constructed client wrappers."""

from .spotify_api import SpotifyAPIClient
from .spotify_auth import OAuthStateEncoder, SpotifyOAuthClient

__all__ = [
    "OAuthStateEncoder",
    "SpotifyAPIClient",
    "SpotifyOAuthClient",
]
