"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

import pytest
from PIL import Image

from retrivia.config import Settings
from retrivia.containers import AppContainer
from retrivia.domain.frames import CameraFacing, FrameBuffer
from retrivia.domain.sessions import NewSession, SessionRecord
from retrivia.errors import CameraUnavailableError, CaptureError
from retrivia.services.booth import BoothService
from retrivia.services.capture import Camera, CaptureService
from retrivia.services.gallery import GalleryService
from retrivia.services.persistence import (
    ObjectStorage,
    OAuthIdentityProvider,
    SessionGateway,
    SessionRepository,
)
from retrivia.services.rendering import PreviewRenderer

PUBLIC_BASE = "https://example.supabase.co/storage/v1/object/public"
FIXED_NOW = datetime(2024, 6, 5, 12, 30, tzinfo=UTC)


def split_image(
    left: str = "red", right: str = "blue", size: tuple[int, int] = (640, 480)
) -> Image.Image:
    """An image whose left and right halves differ, to detect mirroring."""
    image = Image.new("RGB", size, left)
    image.paste(Image.new("RGB", (size[0] // 2, size[1]), right), (size[0] // 2, 0))
    return image


def make_buffer(color: str = "red", frame_id: str | None = None) -> FrameBuffer:
    return FrameBuffer.from_image(
        frame_id or f"photo-{color}", Image.new("RGB", (382, 229), color)
    )


def strip_buffers() -> list[FrameBuffer]:
    return [make_buffer(color) for color in ("red", "green", "blue")]


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[str, SessionRecord] = field(default_factory=dict)
    updates: list[tuple[str, str, str]] = field(default_factory=list)
    fail_insert: bool = False
    fail_update: bool = False

    def insert_session(self, session: NewSession) -> str:
        if self.fail_insert:
            raise RuntimeError("Failed to create session")
        session_id = f"session-{len(self.sessions) + 1}"
        self.sessions[session_id] = SessionRecord(
            id=session_id,
            created_at=session.created_at,
            photo_urls=tuple(session.photo_urls),
            photostrip_url=session.photostrip_url,
            captions=session.captions,
            memory_notes=session.memory_notes,
            user_id=session.user_id,
        )
        return session_id

    def get_session(self, session_id: str) -> SessionRecord | None:
        return self.sessions.get(session_id)

    def update_session(
        self, session_id: str, captions: str, memory_notes: str
    ) -> None:
        if self.fail_update:
            raise RuntimeError("Failed to update session")
        self.updates.append((session_id, captions, memory_notes))
        self.sessions[session_id] = replace(
            self.sessions[session_id], captions=captions, memory_notes=memory_notes
        )

    def list_sessions(
        self,
        user_id: str | None,
        limit: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[SessionRecord]:
        rows = [
            row
            for row in self.sessions.values()
            if row.user_id == user_id
            and (start is None or row.created_at >= start)
            and (end is None or row.created_at < end)
        ]
        rows.sort(key=lambda row: row.created_at, reverse=True)
        return rows[:limit]

    def list_session_dates(self, user_id: str | None) -> list[datetime]:
        return [row.created_at for row in self.list_sessions(user_id, 10_000)]

    def add(
        self, session_id: str, created_at: datetime, user_id: str | None = None
    ) -> SessionRecord:
        record = SessionRecord(
            id=session_id,
            created_at=created_at,
            photo_urls=(None, None, None),
            photostrip_url=f"{PUBLIC_BASE}/photostrips/sessions/x/{session_id}.jpg",
            captions="",
            memory_notes="",
            user_id=user_id,
        )
        self.sessions[session_id] = record
        return record


@dataclass
class InMemoryObjectStorage(ObjectStorage):
    """In-memory blob store; paths ending with a failing suffix raise."""

    objects: dict[str, bytes] = field(default_factory=dict)
    uploads: list[str] = field(default_factory=list)
    failing_suffixes: tuple[str, ...] = ()

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        if path.endswith(self.failing_suffixes):
            raise RuntimeError(f"Upload of {path} failed")
        self.uploads.append(path)
        self.objects[path] = data
        return self.get_public_url(bucket, path)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{PUBLIC_BASE}/{bucket}/{path}"


@dataclass
class FakeIdentityProvider(OAuthIdentityProvider):
    """Identity provider whose user is set directly by tests."""

    identity: str | None = None
    listeners: list[Callable[[str | None], None]] = field(default_factory=list)
    fail_exchange: bool = False

    def current_identity(self) -> str | None:
        return self.identity

    def on_identity_change(
        self, callback: Callable[[str | None], None]
    ) -> Callable[[], None]:
        self.listeners.append(callback)
        return lambda: self.listeners.remove(callback)

    def sign_out(self) -> None:
        self.set_identity(None)

    def sign_in_url(self, redirect_to: str) -> str:
        return f"https://auth.example.com/authorize?redirect_to={redirect_to}"

    def complete_sign_in(self, code: str) -> str | None:
        if self.fail_exchange:
            raise RuntimeError("invalid grant")
        self.set_identity(f"user-{code}")
        return self.identity

    def set_identity(self, identity: str | None) -> None:
        self.identity = identity
        for listener in list(self.listeners):
            listener(identity)


@dataclass
class FakeCamera(Camera):
    """Camera returning a fixed frame; can fail on open or on a given read."""

    frame: Image.Image = field(default_factory=split_image)
    fail_open: bool = False
    fail_on_read: int | None = None
    opened: list[CameraFacing] = field(default_factory=list)
    reads: int = 0
    closed: int = 0

    def open(self, facing: CameraFacing) -> None:
        if self.fail_open:
            raise CameraUnavailableError("Permission denied")
        self.opened.append(facing)

    def read(self) -> Image.Image:
        if self.fail_on_read is not None and self.reads == self.fail_on_read:
            raise CaptureError("Failed to capture photo")
        self.reads += 1
        return self.frame.copy()

    def close(self) -> None:
        self.closed += 1


@dataclass
class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def build_booth(
    camera: FakeCamera | None = None,
    storage: InMemoryObjectStorage | None = None,
    repository: InMemorySessionRepository | None = None,
    identity: FakeIdentityProvider | None = None,
) -> BoothService:
    gateway = SessionGateway(
        storage=storage or InMemoryObjectStorage(),
        repository=repository or InMemorySessionRepository(),
        identity=identity or FakeIdentityProvider(),
        bucket="photostrips",
        clock=lambda: FIXED_NOW,
    )
    return BoothService(
        capture=CaptureService(camera=camera or FakeCamera(), sleep=RecordingSleep()),
        gateway=gateway,
        renderer=PreviewRenderer(),
        composite_scale=1,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="header.payload.signature",
    )


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def object_storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def camera() -> FakeCamera:
    return FakeCamera()


@pytest.fixture
def container(
    settings: Settings,
    session_repository: InMemorySessionRepository,
    object_storage: InMemoryObjectStorage,
    identity: FakeIdentityProvider,
    camera: FakeCamera,
) -> AppContainer:
    booth_service = build_booth(camera, object_storage, session_repository, identity)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity=identity,
        booth_service=booth_service,
        gallery_service=GalleryService(session_repository),
        close_resources=close_resources,
    )
