"""Exception handlers translating domain errors into HTTP responses.

Session errors become 401 and clear the session cookie, upstream and transport
failures become 502, missing configuration becomes 500. Anything unhandled is
logged and reported as a generic 500 without internals.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from songtracker.core.config import AppSettings
from songtracker.core.errors import (
    ConfigurationError,
    InvalidRequestError,
    NetworkError,
    SessionError,
    TokenExchangeError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI, settings: AppSettings) -> None:
    """Attach the domain exception handlers to ``app``."""
    cookie_name = settings.session.cookie_name

    @app.exception_handler(SessionError)
    async def _session_error(request: Request, exc: SessionError) -> JSONResponse:
        response = JSONResponse(
            status_code=HTTPStatus.UNAUTHORIZED,
            content={"detail": str(exc), "reason": type(exc).__name__},
        )
        response.delete_cookie(cookie_name, path="/")
        return response

    @app.exception_handler(InvalidRequestError)
    async def _invalid_request(request: Request, exc: InvalidRequestError) -> JSONResponse:
        return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(TokenExchangeError)
    async def _token_exchange_error(request: Request, exc: TokenExchangeError) -> JSONResponse:
        return JSONResponse(
            status_code=HTTPStatus.BAD_REQUEST,
            content={
                "detail": str(exc),
                "upstreamStatus": exc.status_code,
                "upstreamBody": exc.body,
            },
        )

    @app.exception_handler(UpstreamError)
    async def _upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning(
            "Upstream error on %s: %s (status %s)", request.url.path, exc, exc.status_code
        )
        return JSONResponse(
            status_code=HTTPStatus.BAD_GATEWAY,
            content={
                "detail": str(exc),
                "upstreamStatus": exc.status_code,
                "upstreamBody": exc.body,
            },
        )

    @app.exception_handler(NetworkError)
    async def _network_error(request: Request, exc: NetworkError) -> JSONResponse:
        logger.warning("Network error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=HTTPStatus.BAD_GATEWAY, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Configuration error: %s (missing: %s)", exc, ", ".join(exc.missing))
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "missing": exc.missing},
        )

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


__all__ = ["register_exception_handlers"]
