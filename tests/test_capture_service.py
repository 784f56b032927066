"""Tests for the timed capture sequence."""

import asyncio

import pytest

from retrivia.domain.frames import FRAME_SIZE, CameraFacing
from retrivia.errors import CameraUnavailableError, CaptureError
from retrivia.services.capture import CaptureEvent, CaptureService
from tests.conftest import FakeCamera, RecordingSleep


def test_sequence_counts_down_and_captures_three_shots() -> None:
    camera = FakeCamera()
    sleep = RecordingSleep()
    events: list[CaptureEvent] = []
    service = CaptureService(camera=camera, sleep=sleep)

    buffers = asyncio.run(service.run_sequence(events.append))

    assert len(buffers) == 3
    assert len({buffer.id for buffer in buffers}) == 3
    assert all(buffer.image().size == FRAME_SIZE for buffer in buffers)
    first_shot = [(event.kind, event.remaining) for event in events[:5]]
    assert first_shot == [
        ("countdown", 3),
        ("countdown", 2),
        ("countdown", 1),
        ("flash", 0),
        ("captured", 0),
    ]
    assert events[-1].kind == "complete"
    assert [event.kind for event in events].count("captured") == 3
    assert sleep.delays == [1.0, 1.0, 1.0, 0.3, 1.0] * 2 + [1.0, 1.0, 1.0, 0.3]
    assert camera.opened == [CameraFacing.user]
    assert camera.closed == 1


def test_front_camera_shots_are_mirrored() -> None:
    service = CaptureService(camera=FakeCamera(), sleep=RecordingSleep())
    frame = asyncio.run(service.run_sequence())[0].image()
    y = FRAME_SIZE[1] // 2
    red, _, blue = frame.getpixel((10, y))
    assert blue > red


def test_back_camera_shots_are_not_mirrored() -> None:
    camera = FakeCamera()
    service = CaptureService(camera=camera, sleep=RecordingSleep())
    assert service.toggle_facing() == CameraFacing.environment

    frame = asyncio.run(service.run_sequence())[0].image()

    y = FRAME_SIZE[1] // 2
    red, _, blue = frame.getpixel((10, y))
    assert red > blue
    assert camera.opened == [CameraFacing.environment]


def test_read_failure_aborts_without_partial_results() -> None:
    camera = FakeCamera(fail_on_read=1)
    service = CaptureService(camera=camera, sleep=RecordingSleep())

    with pytest.raises(CaptureError):
        asyncio.run(service.run_sequence())

    assert camera.closed == 1


def test_permission_denied_surfaces_immediately() -> None:
    camera = FakeCamera(fail_open=True)
    sleep = RecordingSleep()
    service = CaptureService(camera=camera, sleep=sleep)

    with pytest.raises(CameraUnavailableError):
        asyncio.run(service.run_sequence())

    assert sleep.delays == []
    assert camera.reads == 0
