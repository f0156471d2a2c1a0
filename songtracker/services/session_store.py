"""Process-local storage for session records keyed by opaque handles."""

from __future__ import annotations

import secrets
from typing import Any, Dict, Optional

from songtracker.models.session import SessionRecord
from songtracker.services.token_cipher import TokenCipherService

_TOKEN_FIELDS = ("access_token", "refresh_token")


class SessionStore:
    """In-memory map from session handle to ``SessionRecord``.

    Token values are kept encrypted; ``get`` always returns plaintext records.
    Each write replaces the stored entry with a single assignment, so a
    concurrent reader sees either the old record or the new one and never a
    mix of both.
    """

    def __init__(self, cipher: TokenCipherService | None = None) -> None:
        self._cipher = cipher or TokenCipherService()
        self._sessions: Dict[str, SessionRecord] = {}

    @staticmethod
    def new_handle() -> str:
        """Return an unpredictable, URL-safe session handle."""
        return secrets.token_urlsafe(32)

    def get(self, handle: str) -> Optional[SessionRecord]:
        stored = self._sessions.get(handle)
        if stored is None:
            return None
        return self._decrypt(stored)

    def set(self, handle: str, record: SessionRecord) -> None:
        self._sessions[handle] = self._encrypt(record)

    def update(self, handle: str, **fields: Any) -> Optional[SessionRecord]:
        """Merge ``fields`` into an existing record. Unknown handles are ignored."""
        stored = self._sessions.get(handle)
        if stored is None:
            return None
        merged = self._decrypt(stored).model_copy(update=fields)
        # Validate the merged values before they replace the stored record.
        record = SessionRecord.model_validate(merged.model_dump())
        self._sessions[handle] = self._encrypt(record)
        return record

    def delete(self, handle: str) -> None:
        self._sessions.pop(handle, None)

    def __contains__(self, handle: object) -> bool:
        return handle in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def _encrypt(self, record: SessionRecord) -> SessionRecord:
        return record.model_copy(
            update={
                name: self._cipher.encrypt_optional(getattr(record, name))
                for name in _TOKEN_FIELDS
            }
        )

    def _decrypt(self, record: SessionRecord) -> SessionRecord:
        return record.model_copy(
            update={
                name: self._cipher.decrypt_optional(getattr(record, name))
                for name in _TOKEN_FIELDS
            }
        )


__all__ = ["SessionStore"]
