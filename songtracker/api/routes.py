"""
FastAPI routes for the song tracker backend.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from songtracker.core.config import AppSettings
from songtracker.core.errors import InvalidRequestError
from songtracker.dependencies import (
    SettingsDep,
    get_listening_history_service,
    get_listening_stats_service,
    get_oauth_state_encoder,
    get_recommendation_service,
    get_session_handle,
    get_session_validator,
    get_spotify_oauth_client,
    get_token_exchanger,
    require_access_token,
)
from songtracker.schemas import (
    AuthorizationURLResponse,
    HistoryKind,
    ListeningHistoryResponse,
    ListeningStatsResponse,
    LogoutResponse,
    RecommendationsResponse,
    SessionDebugResponse,
    SessionDiagnosticsPayload,
    SessionTokenResponse,
    TimeRange,
    TokenExchangeRequest,
    TokenExchangeResponse,
)
from songtracker.services import ExchangeResult, ResolvedToken

router = APIRouter()
logger = logging.getLogger(__name__)


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


def _issue_state(state_encoder: Any) -> str:
    return state_encoder.encode(
        {
            "nonce": secrets.token_urlsafe(16),
            "issued_at": datetime.now(timezone.utc).isoformat(),
        }
    )


def _verify_state(state_encoder: Any, state: Optional[str], settings: AppSettings) -> None:
    """Reject callbacks whose state was not issued here or has expired."""
    if not state:
        raise InvalidRequestError("Missing OAuth state.")

    payload = state_encoder.decode(state)
    try:
        issued_at = datetime.fromisoformat(payload["issued_at"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidRequestError("Invalid issued_at in OAuth state.") from exc
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=timezone.utc)

    ttl = timedelta(seconds=settings.oauth.state_ttl_seconds)
    if datetime.now(timezone.utc) - issued_at > ttl:
        raise InvalidRequestError("OAuth state has expired.")


def _set_session_cookie(response: Response, handle: str, settings: AppSettings) -> None:
    response.set_cookie(
        key=settings.session.cookie_name,
        value=handle,
        max_age=settings.session.cookie_max_age,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def _exchange_payload(result: ExchangeResult) -> TokenExchangeResponse:
    return TokenExchangeResponse(
        handle=result.handle,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in_seconds=result.expires_in,
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(
    settings: SettingsDep,
) -> dict:
    """Liveness plus a report of missing Spotify configuration."""
    missing = settings.spotify.missing_fields()
    return {"status": "ok", "configured": not missing, "missing": missing}


@router.get("/auth/authorize", response_model=AuthorizationURLResponse)
async def start_spotify_oauth_flow(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_spotify_oauth_client)],
    state_encoder: Annotated[Any, Depends(get_oauth_state_encoder)],
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Spotify consent screen.",
    ),
) -> Any:
    """Build the Spotify authorization URL the browser should visit."""
    state = _issue_state(state_encoder)
    authorization_url = oauth_client.build_authorization_url(state=state)

    if redirect or _wants_html(request):
        return RedirectResponse(url=authorization_url, status_code=HTTPStatus.TEMPORARY_REDIRECT)

    return AuthorizationURLResponse(authorization_url=authorization_url, state=state)


@router.post("/token-exchange", response_model=TokenExchangeResponse)
async def exchange_token(
    payload: TokenExchangeRequest,
    response: Response,
    exchanger: Annotated[Any, Depends(get_token_exchanger)],
    settings: SettingsDep,
) -> TokenExchangeResponse:
    """Exchange an authorization code, create a session and set its cookie."""
    result = await exchanger.exchange(payload.code)
    _set_session_cookie(response, result.handle, settings)
    return _exchange_payload(result)


@router.get("/auth/callback")
async def handle_spotify_callback(
    request: Request,
    exchanger: Annotated[Any, Depends(get_token_exchanger)],
    state_encoder: Annotated[Any, Depends(get_oauth_state_encoder)],
    settings: SettingsDep,
    code: Optional[str] = Query(default=None, description="Authorization code returned by Spotify."),
    error: Optional[str] = Query(default=None, description="Error reported by Spotify."),
    state: Optional[str] = Query(
        default=None, description="State issued by /auth/authorize, echoed back by Spotify."
    ),
    redirect: bool = Query(
        default=False,
        description="When true, redirect browser clients instead of returning JSON.",
    ),
) -> Response:
    """Browser-facing redirect target that completes the exchange in one hop."""
    if error:
        raise InvalidRequestError(f"Authentication failed: {error}")
    if not code:
        raise InvalidRequestError("No authorization code received.")
    _verify_state(state_encoder, state, settings)

    result = await exchanger.exchange(code)

    redirect_target = settings.frontend_base_url
    if redirect_target and (redirect or _wants_html(request)):
        response: Response = RedirectResponse(
            url=redirect_target, status_code=HTTPStatus.TEMPORARY_REDIRECT
        )
    else:
        response = JSONResponse(content=_exchange_payload(result).model_dump(by_alias=True))
    _set_session_cookie(response, result.handle, settings)
    return response


@router.get("/session", response_model=SessionTokenResponse)
async def get_session_token(
    token: Annotated[ResolvedToken, Depends(require_access_token)],
) -> SessionTokenResponse:
    """Return a live access token, refreshing it when it has expired."""
    return SessionTokenResponse(
        access_token=token.access_token,
        expires_in_remaining_seconds=token.expires_in_remaining,
    )


@router.delete("/session", response_model=LogoutResponse)
async def delete_session(
    response: Response,
    handle: Annotated[Optional[str], Depends(get_session_handle)],
    validator: Annotated[Any, Depends(get_session_validator)],
    settings: SettingsDep,
) -> LogoutResponse:
    """Log out: drop the server-side record and clear the cookie."""
    validator.logout(handle)
    response.delete_cookie(settings.session.cookie_name, path="/")
    return LogoutResponse(success=True)


@router.get("/session/debug", response_model=SessionDebugResponse)
async def debug_session(
    handle: Annotated[Optional[str], Depends(get_session_handle)],
    validator: Annotated[Any, Depends(get_session_validator)],
    settings: SettingsDep,
) -> SessionDebugResponse:
    """Describe configuration and session state. Never exposes tokens."""
    if settings.is_production:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Not Found")

    diagnostics = validator.describe(handle)
    session = None
    if diagnostics.has_session_cookie:
        session = SessionDiagnosticsPayload(
            exists=diagnostics.exists,
            token_age_seconds=diagnostics.token_age_seconds,
            expires_in=diagnostics.expires_in,
            is_expired=diagnostics.is_expired,
            has_refresh_token=diagnostics.has_refresh_token,
            has_access_token=diagnostics.has_access_token,
        )

    return SessionDebugResponse(
        has_session_cookie=diagnostics.has_session_cookie,
        timestamp=datetime.now(timezone.utc),
        environment=settings.environment,
        has_client_id=bool(settings.spotify.client_id),
        has_client_secret=bool(settings.spotify.client_secret),
        has_redirect_uri=bool(settings.spotify.redirect_uri),
        session=session,
    )


@router.get("/history", response_model=ListeningHistoryResponse)
async def get_listening_history(
    token: Annotated[ResolvedToken, Depends(require_access_token)],
    service: Annotated[Any, Depends(get_listening_history_service)],
    kind: HistoryKind = Query(
        default="recently-played",
        alias="type",
        description="Either 'recently-played' or 'top-tracks'.",
    ),
    time_range: TimeRange = Query(
        default="short_term",
        alias="timeRange",
        description="Spotify time range, used for top tracks.",
    ),
) -> ListeningHistoryResponse:
    return await service.fetch(token.access_token, kind=kind, time_range=time_range)


@router.get("/recommendations", response_model=RecommendationsResponse)
async def get_recommendations(
    token: Annotated[ResolvedToken, Depends(require_access_token)],
    service: Annotated[Any, Depends(get_recommendation_service)],
    genre: Optional[str] = Query(
        default=None,
        description="Seed genre; omit or pass 'all' to seed from your top tracks.",
    ),
    limit: int = Query(default=20, ge=1, le=50),
) -> RecommendationsResponse:
    return await service.recommend(token.access_token, genre=genre, limit=limit)


@router.get("/stats", response_model=ListeningStatsResponse)
async def get_listening_stats(
    token: Annotated[ResolvedToken, Depends(require_access_token)],
    service: Annotated[Any, Depends(get_listening_stats_service)],
    time_range: TimeRange = Query(
        default="short_term",
        alias="timeRange",
        description="Spotify time range for the top tracks the stats are built from.",
    ),
) -> ListeningStatsResponse:
    """Genre distribution and an estimated day-of-week split of top tracks."""
    return await service.summarize(token.access_token, time_range=time_range)


__all__ = ["router"]
