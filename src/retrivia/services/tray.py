"""Ordered holder for the photos of the strip being built."""

from dataclasses import dataclass, field

from retrivia.domain.frames import PHOTOS_PER_STRIP, FrameBuffer
from retrivia.errors import TrayFullError


@dataclass
class PhotoTray:
    """Keeps up to three frame buffers in strip order."""

    capacity: int = PHOTOS_PER_STRIP
    _buffers: list[FrameBuffer] = field(default_factory=list)

    @property
    def buffers(self) -> tuple[FrameBuffer, ...]:
        """Current buffers, top of the strip first."""
        return tuple(self._buffers)

    @property
    def is_complete(self) -> bool:
        """Whether the tray holds a full strip."""
        return len(self._buffers) == self.capacity

    def add(self, buffer: FrameBuffer) -> None:
        """Append a photo to the bottom of the strip."""
        if len(self._buffers) >= self.capacity:
            raise TrayFullError(f"A strip holds {self.capacity} photos")
        self._buffers.append(buffer)

    def remove(self, frame_id: str) -> bool:
        """Drop a photo; returns whether it was present."""
        before = len(self._buffers)
        self._buffers = [buffer for buffer in self._buffers if buffer.id != frame_id]
        return len(self._buffers) != before

    def move(self, frame_id: str, index: int) -> bool:
        """Move a photo to a new position; returns whether it was present."""
        for position, buffer in enumerate(self._buffers):
            if buffer.id == frame_id:
                self._buffers.pop(position)
                target = max(0, min(index, len(self._buffers)))
                self._buffers.insert(target, buffer)
                return True
        return False

    def replace(self, buffers: list[FrameBuffer]) -> None:
        """Swap in a complete set, e.g. from the capture sequence."""
        if len(buffers) > self.capacity:
            raise TrayFullError(f"A strip holds {self.capacity} photos")
        self._buffers = list(buffers)

    def reset(self) -> None:
        """Discard all photos."""
        self._buffers = []
