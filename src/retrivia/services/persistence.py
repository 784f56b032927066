"""Session persistence gateway over object storage and the row store."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from retrivia.domain.frames import FrameBuffer
from retrivia.domain.sessions import (
    UNKNOWN_SESSION_ID,
    NewSession,
    SaveResult,
    SessionRecord,
)
from retrivia.errors import SessionAccessDenied

logger = logging.getLogger(__name__)

ANONYMOUS_NAMESPACE = "anonymous"
COMPOSITE_NAME = "photostrip.jpg"


class ObjectStorage(Protocol):
    """Interface for the blob store holding frames and composites."""

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path``, overwriting, and return its public URL."""

    def get_public_url(self, bucket: str, path: str) -> str:
        """Return the public URL of a stored object."""


class SessionRepository(Protocol):
    """Persistence interface for photostrip session rows."""

    def insert_session(self, session: NewSession) -> str:
        """Create a session row and return its id."""

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""

    def update_session(
        self, session_id: str, captions: str, memory_notes: str
    ) -> None:
        """Update the mutable text fields of a session."""

    def list_sessions(
        self,
        user_id: str | None,
        limit: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[SessionRecord]:
        """Return sessions owned by ``user_id`` (ownerless when None), newest first."""

    def list_session_dates(self, user_id: str | None) -> list[datetime]:
        """Return creation times of every session visible to ``user_id``."""


class IdentityProvider(Protocol):
    """Interface for the signed-in user of this kiosk."""

    def current_identity(self) -> str | None:
        """Return the signed-in user id, or None when anonymous."""

    def on_identity_change(
        self, callback: Callable[[str | None], None]
    ) -> Callable[[], None]:
        """Subscribe to sign-in/sign-out; returns an unsubscribe callable."""

    def sign_out(self) -> None:
        """End the current sign-in."""


class OAuthIdentityProvider(IdentityProvider, Protocol):
    """Identity provider that can run a browser OAuth round trip."""

    def sign_in_url(self, redirect_to: str) -> str:
        """Return the provider URL that starts sign-in."""

    def complete_sign_in(self, code: str) -> str | None:
        """Finish sign-in with the callback code; returns the user id."""


def session_prefix(identity: str | None, timestamp_ms: int) -> str:
    """Storage folder for one save: ``sessions/{identity|anonymous}/{timestamp}``."""
    return f"sessions/{identity or ANONYMOUS_NAMESPACE}/{timestamp_ms}"


def storage_path_from_url(url: str, bucket: str) -> str | None:
    """Recover the object path from a public storage URL."""
    marker = f"/object/public/{bucket}/"
    if marker not in url:
        return None
    path = url.split(marker, 1)[1].split("?", 1)[0]
    return path or None


@dataclass
class SessionGateway:
    """Uploads photos and composites and records them as session rows."""

    storage: ObjectStorage
    repository: SessionRepository
    identity: IdentityProvider
    bucket: str
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    async def save(
        self,
        buffers: Sequence[FrameBuffer],
        composite: bytes,
        caption: str,
        notes: str,
    ) -> SaveResult | None:
        """Persist a new session; None when the composite could not be stored."""
        user_id = self.identity.current_identity()
        created_at = self.clock()
        prefix = session_prefix(user_id, int(created_at.timestamp() * 1000))

        photo_urls = await asyncio.gather(
            *(
                self._upload_photo(f"{prefix}/photo_{index}.jpg", buffer)
                for index, buffer in enumerate(buffers)
            )
        )
        try:
            url = await asyncio.to_thread(
                self.storage.upload,
                self.bucket,
                f"{prefix}/{COMPOSITE_NAME}",
                composite,
                "image/jpeg",
            )
        except Exception:
            logger.exception("Failed to upload photostrip to %s", prefix)
            return None

        try:
            session_id = await asyncio.to_thread(
                self.repository.insert_session,
                NewSession(
                    created_at=created_at,
                    photo_urls=list(photo_urls),
                    photostrip_url=url,
                    captions=caption,
                    memory_notes=notes,
                    user_id=user_id,
                ),
            )
        except Exception:
            logger.exception("Photostrip stored but session row insert failed")
            return SaveResult(url=url, session_id=UNKNOWN_SESSION_ID)
        logger.info("Saved session %s", session_id)
        return SaveResult(url=url, session_id=session_id)

    async def update(
        self, session_id: str, composite: bytes, caption: str, notes: str
    ) -> str | None:
        """Overwrite a session's composite in place and update its text fields."""
        record = await asyncio.to_thread(self.repository.get_session, session_id)
        if record is None:
            logger.warning("Session %s not found", session_id)
            return None
        self.ensure_editable(record)

        path = storage_path_from_url(record.photostrip_url, self.bucket)
        if path is None:
            logger.warning(
                "Cannot parse storage path from %s", record.photostrip_url
            )
            return None
        try:
            url = await asyncio.to_thread(
                self.storage.upload, self.bucket, path, composite, "image/jpeg"
            )
            await asyncio.to_thread(
                self.repository.update_session, session_id, caption, notes
            )
        except Exception:
            logger.exception("Failed to update session %s", session_id)
            return None
        return url

    def ensure_editable(self, record: SessionRecord) -> None:
        """Raise ``SessionAccessDenied`` unless the current identity may edit."""
        identity = self.identity.current_identity()
        if not record.is_editable_by(identity):
            logger.warning(
                "Refusing update of session %s for identity %s", record.id, identity
            )
            raise SessionAccessDenied(f"Session {record.id} belongs to another user")

    async def _upload_photo(self, path: str, buffer: FrameBuffer) -> str | None:
        try:
            return await asyncio.to_thread(
                self.storage.upload,
                self.bucket,
                path,
                buffer.pixels,
                buffer.content_type,
            )
        except Exception:
            logger.warning("Failed to upload photo %s", path, exc_info=True)
            return None
