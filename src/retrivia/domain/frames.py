"""Domain models for captured and imported photos."""

import io
from dataclasses import dataclass
from enum import StrEnum

from PIL import Image, UnidentifiedImageError

from retrivia.errors import ImageDecodeError

# Reference slot of the 450-wide strip canvas: 85% of the width at 1:0.6.
FRAME_SIZE = (382, 229)
FRAME_ASPECT = 1 / 0.6
PHOTOS_PER_STRIP = 3


class CameraFacing(StrEnum):
    """Which camera feeds the capture sequence."""

    user = "user"
    environment = "environment"


@dataclass(frozen=True)
class FrameBuffer:
    """One raw photo rasterized to the strip's frame aspect ratio."""

    id: str
    pixels: bytes
    content_type: str = "image/jpeg"

    @classmethod
    def from_image(
        cls, frame_id: str, image: Image.Image, quality: int = 90
    ) -> "FrameBuffer":
        """Encode a Pillow image as a JPEG frame buffer."""
        buffer = io.BytesIO()
        image.convert("RGB").save(buffer, format="JPEG", quality=quality)
        return cls(id=frame_id, pixels=buffer.getvalue())

    def image(self) -> Image.Image:
        """Decode the frame into an RGB image."""
        try:
            with Image.open(io.BytesIO(self.pixels)) as img:
                img.load()
                return img.convert("RGB")
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageDecodeError(f"Frame {self.id} could not be decoded") from exc
