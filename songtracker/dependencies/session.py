"""Dependencies that read the session cookie and resolve it to a token."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request

from songtracker.dependencies.clients import get_session_validator
from songtracker.dependencies.config import SettingsDep
from songtracker.services import ResolvedToken, SessionValidator


def get_session_handle(
    request: Request,
    settings: SettingsDep,
) -> Optional[str]:
    """Return the session handle carried by the request cookie, if any."""
    return request.cookies.get(settings.session.cookie_name) or None


async def require_access_token(
    handle: Annotated[Optional[str], Depends(get_session_handle)],
    validator: Annotated[SessionValidator, Depends(get_session_validator)],
) -> ResolvedToken:
    """Resolve the caller's session; session errors become 401 responses."""
    return await validator.resolve(handle)


__all__ = ["get_session_handle", "require_access_token"]
