"""Supabase-backed photostrip session repository."""

import json
from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from retrivia.domain.sessions import NewSession, SessionRecord, parse_photo_urls
from retrivia.services.persistence import SessionRepository

_COLUMNS = "id, created_at, photo_urls, photostrip_url, captions, memory_notes, user_id"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for photostrip sessions."""

    client: Client
    table_name: str = "sessions"

    def insert_session(self, session: NewSession) -> str:
        """Create a session row and return its id."""
        response = (
            self.client.table(self.table_name)
            .insert(
                {
                    "created_at": session.created_at.isoformat(),
                    "photo_urls": json.dumps(session.photo_urls),
                    "photostrip_url": session.photostrip_url,
                    "captions": session.captions,
                    "memory_notes": session.memory_notes,
                    "user_id": session.user_id,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")
        return str(response.data[0]["id"])

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def update_session(
        self, session_id: str, captions: str, memory_notes: str
    ) -> None:
        """Update the caption and memory notes of a session."""
        response = (
            self.client.table(self.table_name)
            .update({"captions": captions, "memory_notes": memory_notes})
            .eq("id", session_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update session {session_id}")

    def list_sessions(
        self,
        user_id: str | None,
        limit: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[SessionRecord]:
        """Return sessions visible to ``user_id``, newest first."""
        query = self._scoped(
            self.client.table(self.table_name).select(_COLUMNS), user_id
        )
        if start is not None:
            query = query.gte("created_at", start.isoformat())
        if end is not None:
            query = query.lt("created_at", end.isoformat())
        response = query.order("created_at", desc=True).limit(limit).execute()
        return [_parse_row(row) for row in response.data or []]

    def list_session_dates(self, user_id: str | None) -> list[datetime]:
        """Return the creation time of every session visible to ``user_id``."""
        query = self._scoped(
            self.client.table(self.table_name).select("created_at"), user_id
        )
        response = query.order("created_at", desc=True).execute()
        return [
            datetime.fromisoformat(row["created_at"])
            for row in response.data or []
            if row.get("created_at")
        ]

    @staticmethod
    def _scoped(query, user_id: str | None):  # type: ignore[no-untyped-def]
        if user_id is None:
            return query.is_("user_id", "null")
        return query.eq("user_id", user_id)


def _parse_row(row: dict[str, object]) -> SessionRecord:
    user_id = row.get("user_id")
    return SessionRecord(
        id=str(row["id"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        photo_urls=parse_photo_urls(row.get("photo_urls")),
        photostrip_url=str(row.get("photostrip_url") or ""),
        captions=str(row.get("captions") or ""),
        memory_notes=str(row.get("memory_notes") or ""),
        user_id=str(user_id) if user_id else None,
    )
