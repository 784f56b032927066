"""Timed multi-shot capture sequence."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from PIL import Image

from retrivia.domain.frames import PHOTOS_PER_STRIP, CameraFacing, FrameBuffer
from retrivia.errors import CaptureError
from retrivia.services.framing import center_crop_box, rasterize

logger = logging.getLogger(__name__)


class Camera(Protocol):
    """Interface for a live camera feed."""

    def open(self, facing: CameraFacing) -> None:
        """Start streaming from the camera facing the given way."""

    def read(self) -> Image.Image:
        """Return the current frame as an RGB image."""

    def close(self) -> None:
        """Stop streaming and release the device."""


@dataclass(frozen=True)
class CaptureEvent:
    """Progress notification emitted while a sequence runs."""

    kind: str
    shot: int
    remaining: int = 0


EventCallback = Callable[[CaptureEvent], None]


@dataclass
class CaptureService:
    """Runs the 3-2-1 countdown and still capture for every photo of a strip."""

    camera: Camera
    facing: CameraFacing = CameraFacing.user
    shots: int = PHOTOS_PER_STRIP
    countdown_from: int = 3
    interval_seconds: float = 1.0
    flash_seconds: float = 0.3
    frame_quality: int = 90
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    def toggle_facing(self) -> CameraFacing:
        """Switch between the front and back camera."""
        if self.facing == CameraFacing.user:
            self.facing = CameraFacing.environment
        else:
            self.facing = CameraFacing.user
        return self.facing

    async def run_sequence(
        self, on_event: EventCallback | None = None
    ) -> list[FrameBuffer]:
        """Capture a full strip; raises ``CaptureError`` without partial results."""
        emit = on_event or (lambda _event: None)
        facing = self.facing
        buffers: list[FrameBuffer] = []
        try:
            await asyncio.to_thread(self.camera.open, facing)
            for shot in range(self.shots):
                for remaining in range(self.countdown_from, 0, -1):
                    emit(CaptureEvent(kind="countdown", shot=shot, remaining=remaining))
                    await self.sleep(self.interval_seconds)
                frame = await asyncio.to_thread(self.camera.read)
                buffers.append(self._to_buffer(frame, facing))
                emit(CaptureEvent(kind="flash", shot=shot))
                await self.sleep(self.flash_seconds)
                emit(CaptureEvent(kind="captured", shot=shot))
                if shot + 1 < self.shots:
                    await self.sleep(self.interval_seconds)
        except CaptureError:
            logger.warning("Capture sequence aborted after %d shots", len(buffers))
            raise
        finally:
            await asyncio.to_thread(self.camera.close)
        emit(CaptureEvent(kind="complete", shot=self.shots - 1))
        return buffers

    def _to_buffer(self, frame: Image.Image, facing: CameraFacing) -> FrameBuffer:
        box = center_crop_box(frame.width, frame.height)
        return rasterize(
            frame,
            box,
            mirror=facing == CameraFacing.user,
            quality=self.frame_quality,
        )
