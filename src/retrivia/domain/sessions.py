"""Domain models for persisted photostrip sessions."""

import json
from dataclasses import dataclass
from datetime import datetime

UNKNOWN_SESSION_ID = "unknown"


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted photostrip session."""

    id: str
    created_at: datetime
    photo_urls: tuple[str | None, ...]
    photostrip_url: str
    captions: str
    memory_notes: str
    user_id: str | None

    def is_editable_by(self, identity: str | None) -> bool:
        """Anonymous rows are editable by anyone; owned rows only by their owner."""
        return self.user_id is None or self.user_id == identity


@dataclass(frozen=True)
class NewSession:
    """Row payload written on the first save of a photostrip."""

    created_at: datetime
    photo_urls: list[str | None]
    photostrip_url: str
    captions: str
    memory_notes: str
    user_id: str | None


@dataclass(frozen=True)
class SaveResult:
    """Where a saved strip lives and which row describes it."""

    url: str
    session_id: str

    @property
    def is_tracked(self) -> bool:
        """Whether the metadata row was written."""
        return self.session_id != UNKNOWN_SESSION_ID


def parse_photo_urls(raw: object) -> tuple[str | None, ...]:
    """Read photo URLs stored either as a JSON string or a list."""
    if isinstance(raw, str):
        raw = json.loads(raw) if raw else []
    if not isinstance(raw, list):
        return ()
    return tuple(str(url) if url else None for url in raw)
