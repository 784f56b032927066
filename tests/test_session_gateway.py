"""Tests for the session persistence gateway."""

import asyncio

import pytest

from retrivia.domain.sessions import UNKNOWN_SESSION_ID, parse_photo_urls
from retrivia.errors import SessionAccessDenied
from retrivia.services.persistence import SessionGateway, storage_path_from_url
from tests.conftest import (
    FIXED_NOW,
    PUBLIC_BASE,
    FakeIdentityProvider,
    InMemoryObjectStorage,
    InMemorySessionRepository,
    strip_buffers,
)

TIMESTAMP_MS = int(FIXED_NOW.timestamp() * 1000)


def _gateway(
    storage: InMemoryObjectStorage,
    repository: InMemorySessionRepository,
    identity: str | None = "user-a",
) -> SessionGateway:
    return SessionGateway(
        storage=storage,
        repository=repository,
        identity=FakeIdentityProvider(identity=identity),
        bucket="photostrips",
        clock=lambda: FIXED_NOW,
    )


def test_save_uploads_photos_and_composite_then_inserts_row() -> None:
    storage = InMemoryObjectStorage()
    repository = InMemorySessionRepository()

    result = asyncio.run(
        _gateway(storage, repository).save(
            strip_buffers(), b"composite", "Beach day", "sandy"
        )
    )

    prefix = f"sessions/user-a/{TIMESTAMP_MS}"
    assert result is not None
    assert result.is_tracked
    assert result.url == f"{PUBLIC_BASE}/photostrips/{prefix}/photostrip.jpg"
    record = repository.sessions[result.session_id]
    assert record.photo_urls == tuple(
        f"{PUBLIC_BASE}/photostrips/{prefix}/photo_{index}.jpg" for index in range(3)
    )
    assert record.user_id == "user-a"
    assert record.created_at == FIXED_NOW
    assert record.captions == "Beach day"
    assert record.memory_notes == "sandy"
    assert storage.objects[f"{prefix}/photostrip.jpg"] == b"composite"


def test_anonymous_save_uses_anonymous_namespace() -> None:
    storage = InMemoryObjectStorage()
    repository = InMemorySessionRepository()

    result = asyncio.run(
        _gateway(storage, repository, identity=None).save(strip_buffers(), b"c", "", "")
    )

    assert result is not None
    assert all(path.startswith("sessions/anonymous/") for path in storage.uploads)
    assert repository.sessions[result.session_id].user_id is None


def test_single_photo_upload_failure_leaves_a_gap() -> None:
    storage = InMemoryObjectStorage(failing_suffixes=("photo_1.jpg",))
    repository = InMemorySessionRepository()

    result = asyncio.run(
        _gateway(storage, repository).save(strip_buffers(), b"c", "", "")
    )

    assert result is not None
    urls = repository.sessions[result.session_id].photo_urls
    assert urls[0] is not None
    assert urls[1] is None
    assert urls[2] is not None


def test_composite_upload_failure_writes_no_row() -> None:
    storage = InMemoryObjectStorage(failing_suffixes=("photostrip.jpg",))
    repository = InMemorySessionRepository()

    result = asyncio.run(
        _gateway(storage, repository).save(strip_buffers(), b"c", "", "")
    )

    assert result is None
    assert repository.sessions == {}


def test_row_insert_failure_degrades_to_unknown_session() -> None:
    storage = InMemoryObjectStorage()
    repository = InMemorySessionRepository(fail_insert=True)

    result = asyncio.run(
        _gateway(storage, repository).save(strip_buffers(), b"c", "", "")
    )

    assert result is not None
    assert result.session_id == UNKNOWN_SESSION_ID
    assert not result.is_tracked
    assert result.url.endswith("photostrip.jpg")
    assert f"sessions/user-a/{TIMESTAMP_MS}/photostrip.jpg" in storage.objects


def test_repeated_updates_overwrite_the_same_path() -> None:
    storage = InMemoryObjectStorage()
    repository = InMemorySessionRepository()
    gateway = _gateway(storage, repository)
    saved = asyncio.run(gateway.save(strip_buffers(), b"v1", "first", ""))
    assert saved is not None

    first = asyncio.run(gateway.update(saved.session_id, b"v2", "second", "note"))
    second = asyncio.run(gateway.update(saved.session_id, b"v3", "second", "note"))

    composite_path = f"sessions/user-a/{TIMESTAMP_MS}/photostrip.jpg"
    assert first == second == saved.url
    assert storage.uploads.count(composite_path) == 3
    assert storage.objects[composite_path] == b"v3"
    assert len(repository.sessions) == 1
    record = repository.sessions[saved.session_id]
    assert record.captions == "second"
    assert record.memory_notes == "note"


def test_update_by_other_identity_is_refused_without_mutation() -> None:
    storage = InMemoryObjectStorage()
    repository = InMemorySessionRepository()
    repository.add("owned", FIXED_NOW, user_id="user-a")

    for intruder in ("user-b", None):
        gateway = _gateway(storage, repository, identity=intruder)
        with pytest.raises(SessionAccessDenied):
            asyncio.run(gateway.update("owned", b"x", "hacked", "hacked"))

    assert storage.uploads == []
    assert repository.updates == []
    assert repository.sessions["owned"].captions == ""


def test_anonymous_session_is_editable() -> None:
    storage = InMemoryObjectStorage()
    repository = InMemorySessionRepository()
    repository.add("legacy", FIXED_NOW)

    url = asyncio.run(
        _gateway(storage, repository, identity=None).update("legacy", b"x", "c", "n")
    )

    assert url == repository.sessions["legacy"].photostrip_url
    assert storage.uploads == ["sessions/x/legacy.jpg"]


def test_update_missing_session_returns_none() -> None:
    gateway = _gateway(InMemoryObjectStorage(), InMemorySessionRepository())
    assert asyncio.run(gateway.update("nope", b"x", "", "")) is None


def test_update_row_failure_returns_none() -> None:
    storage = InMemoryObjectStorage()
    repository = InMemorySessionRepository(fail_update=True)
    repository.add("legacy", FIXED_NOW)

    url = asyncio.run(
        _gateway(storage, repository, identity=None).update("legacy", b"x", "c", "n")
    )

    assert url is None


def test_storage_path_from_url() -> None:
    url = f"{PUBLIC_BASE}/photostrips/sessions/u/1/photostrip.jpg?t=1"
    assert storage_path_from_url(url, "photostrips") == "sessions/u/1/photostrip.jpg"
    assert storage_path_from_url("https://elsewhere/x.jpg", "photostrips") is None


def test_ownership_rule() -> None:
    owned = InMemorySessionRepository().add("s1", FIXED_NOW, user_id="user-a")
    ownerless = InMemorySessionRepository().add("s2", FIXED_NOW)

    assert owned.is_editable_by("user-a")
    assert not owned.is_editable_by("user-b")
    assert not owned.is_editable_by(None)
    assert ownerless.is_editable_by(None)
    assert ownerless.is_editable_by("user-b")


def test_photo_urls_read_from_json_or_list() -> None:
    assert parse_photo_urls('["a", null, "c"]') == ("a", None, "c")
    assert parse_photo_urls(["a", "", "c"]) == ("a", None, "c")
    assert parse_photo_urls("") == ()
    assert parse_photo_urls(None) == ()
