"""Gallery queries over saved sessions."""

import logging
from dataclasses import dataclass, replace
from zoneinfo import ZoneInfo

from retrivia.domain.gallery import DateFilter, DateOptions
from retrivia.domain.sessions import SessionRecord
from retrivia.errors import SessionAccessDenied
from retrivia.services.persistence import SessionRepository

logger = logging.getLogger(__name__)

NOTE_SEPARATOR = "\n\n"


@dataclass
class GalleryService:
    """Lists, filters and annotates the sessions visible to an identity."""

    repository: SessionRepository
    timezone_name: str = "UTC"
    page_size: int = 100

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    def list_sessions(
        self,
        identity: str | None,
        limit: int | None = None,
        date_filter: DateFilter | None = None,
    ) -> list[SessionRecord]:
        """Return the identity's sessions, newest first.

        Signed-in viewers only see their own rows and anonymous viewers only see
        rows without an owner.
        """
        bounds = date_filter.bounds(self.tz) if date_filter else None
        start, end = bounds if bounds else (None, None)
        return self.repository.list_sessions(
            identity, limit or self.page_size, start=start, end=end
        )

    def date_options(
        self, identity: str | None, year: int | None = None, month: int | None = None
    ) -> DateOptions:
        """Return the years, months and days that hold at least one session."""
        local = [
            created_at.astimezone(self.tz)
            for created_at in self.repository.list_session_dates(identity)
        ]
        years = sorted({moment.year for moment in local}, reverse=True)
        months: list[int] = []
        days: list[int] = []
        if year is not None:
            months = sorted({moment.month for moment in local if moment.year == year})
            if month is not None:
                days = sorted(
                    {
                        moment.day
                        for moment in local
                        if moment.year == year and moment.month == month
                    }
                )
        return DateOptions(years=years, months=months, days=days)

    def update_notes(
        self,
        identity: str | None,
        session_id: str,
        notes: str,
        caption: str | None = None,
    ) -> SessionRecord | None:
        """Replace a session's memory notes, and its caption when given."""
        record = self.repository.get_session(session_id)
        if record is None:
            return None
        if not record.is_editable_by(identity):
            logger.warning("Refusing notes edit of session %s", session_id)
            raise SessionAccessDenied(f"Session {session_id} belongs to another user")
        captions = record.captions if caption is None else caption
        self.repository.update_session(session_id, captions, notes)
        return replace(record, captions=captions, memory_notes=notes)

    def append_note(
        self, identity: str | None, session_id: str, note: str
    ) -> SessionRecord | None:
        """Add a note after the existing memory notes."""
        record = self.repository.get_session(session_id)
        if record is None:
            return None
        existing = record.memory_notes.strip()
        notes = f"{existing}{NOTE_SEPARATOR}{note}" if existing else note
        return self.update_notes(identity, session_id, notes)
