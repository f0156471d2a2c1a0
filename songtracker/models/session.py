"""
Domain model for server-side session records.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionRecord(BaseModel):
    """Tokens held for one session handle."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: Optional[str] = Field(
        None, description="Absent only when Spotify never issued one."
    )
    expires_in: int = Field(
        ..., description="Access token lifetime in seconds, as declared at issuance."
    )
    created_at: int = Field(
        ..., description="Epoch milliseconds when the access token was issued or refreshed."
    )
    user_id: Optional[str] = None

    def token_age_ms(self, now_ms: int) -> int:
        return now_ms - self.created_at

    def is_expired(self, now_ms: int) -> bool:
        return self.token_age_ms(now_ms) >= self.expires_in * 1000

    def remaining_seconds(self, now_ms: int) -> int:
        """Seconds left on the access token; only meaningful while not expired."""
        return self.expires_in - self.token_age_ms(now_ms) // 1000


__all__ = ["SessionRecord"]
