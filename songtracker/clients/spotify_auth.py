"""
Spotify OAuth utilities.

These helpers build the authorization URL and talk to the accounts token
endpoint for both the authorization-code and refresh-token grants.
"""

from __future__ import annotations

import base64
import hmac
import json
import logging
from hashlib import sha256
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from songtracker.core.config import HTTPSettings, SpotifySettings
from songtracker.core.errors import (
    InvalidRequestError,
    NetworkError,
    TokenExchangeError,
    UpstreamError,
    UpstreamPayloadError,
)
from songtracker.schemas.spotify import TokenGrant
from songtracker.utils.http import NO_RETRY, RetryConfig, request_with_retry

logger = logging.getLogger(__name__)


class OAuthStateEncoder:
    """Sign OAuth state values so the callback can reject forged ones."""

    _SIGNATURE_SIZE = 32

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
        signature = hmac.new(self._secret_key, serialized, sha256).digest()
        return base64.urlsafe_b64encode(signature + serialized).decode("ascii")

    def decode(self, token: str) -> Dict[str, Any]:
        """Return the signed payload; raise ``InvalidRequestError`` if it was tampered with."""
        try:
            decoded = base64.urlsafe_b64decode(token.encode("ascii"))
        except ValueError as exc:
            raise InvalidRequestError("Malformed OAuth state.") from exc

        signature, serialized = decoded[: self._SIGNATURE_SIZE], decoded[self._SIGNATURE_SIZE :]
        expected = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected):
            raise InvalidRequestError("Invalid OAuth state signature.")

        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise InvalidRequestError("Malformed OAuth state.") from exc
        if not isinstance(payload, dict):
            raise InvalidRequestError("Malformed OAuth state.")
        return payload


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class SpotifyOAuthClient:
    """Build Spotify authorization URLs and exchange or refresh tokens."""

    def __init__(
        self,
        spotify_settings: SpotifySettings,
        http_settings: HTTPSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._spotify = spotify_settings
        self._http = http_settings
        self._transport = transport

    def build_authorization_url(self, state: Optional[str] = None) -> str:
        """Construct the Spotify consent URL."""
        params = {
            "client_id": self._spotify.require_client_id(),
            "response_type": "code",
            "redirect_uri": self._spotify.require_redirect_uri(),
            "scope": " ".join(self._spotify.scope_list),
        }
        if state:
            params["state"] = state
        return f"{self._spotify.authorize_url}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for an access/refresh token pair.

        Authorization codes are single-use, so the call is never retried.
        """
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._spotify.require_redirect_uri(),
        }
        response = await self._post_token(form, retry_config=NO_RETRY)

        if not response.is_success:
            body = _response_body(response)
            logger.warning(
                "Spotify rejected authorization code (status %s): %s",
                response.status_code,
                body,
            )
            raise TokenExchangeError(
                "Failed to exchange authorization code.",
                status_code=response.status_code,
                body=body,
            )

        try:
            return TokenGrant.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TokenExchangeError(
                "Incomplete token payload returned from Spotify.",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Mint a new access token from a stored refresh token."""
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        response = await self._post_token(
            form, retry_config=RetryConfig(timeout_retries=self._http.timeout_retries)
        )

        if not response.is_success:
            raise UpstreamError(
                "Spotify refused the token refresh.",
                status_code=response.status_code,
                body=_response_body(response),
            )

        try:
            return TokenGrant.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamPayloadError(
                "Incomplete refresh payload returned from Spotify.",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    async def _post_token(
        self, form: Dict[str, str], *, retry_config: RetryConfig
    ) -> httpx.Response:
        client_id, client_secret = self._spotify.require_credentials()
        basic = base64.b64encode(f"{client_id}:{client_secret}".encode("utf-8")).decode("ascii")
        headers = {
            "Authorization": f"Basic {basic}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

        async with httpx.AsyncClient(
            timeout=self._http.timeout_seconds, transport=self._transport
        ) as client:
            try:
                return await request_with_retry(
                    client.post,
                    self._spotify.token_url,
                    data=form,
                    headers=headers,
                    retry_config=retry_config,
                )
            except httpx.TransportError as exc:
                logger.warning("Spotify token endpoint unreachable: %s", exc)
                raise NetworkError("Could not reach the Spotify token endpoint.") from exc


__all__ = ["OAuthStateEncoder", "SpotifyOAuthClient"]
