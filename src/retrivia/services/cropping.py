"""Fixed-aspect crop window for imported photos."""

import io
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from retrivia.domain.frames import FRAME_ASPECT, FrameBuffer
from retrivia.errors import ImageDecodeError
from retrivia.services.framing import rasterize

INITIAL_COVERAGE = 0.9


def load_source(data: bytes) -> Image.Image:
    """Decode an uploaded image, honouring its EXIF orientation."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return ImageOps.exif_transpose(img).convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeError("Uploaded file is not a readable image") from exc


@dataclass
class CropWindow:
    """A draggable window over a source image, locked to the frame aspect ratio."""

    source: Image.Image
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def centered(
        cls, source: Image.Image, coverage: float = INITIAL_COVERAGE
    ) -> "CropWindow":
        """Place a window covering ``coverage`` of the limiting side, centred."""
        if source.width / source.height > FRAME_ASPECT:
            height = source.height * coverage
            width = height * FRAME_ASPECT
        else:
            width = source.width * coverage
            height = width / FRAME_ASPECT
        return cls(
            source=source,
            x=(source.width - width) / 2,
            y=(source.height - height) / 2,
            width=width,
            height=height,
        )

    @property
    def box(self) -> tuple[float, float, float, float]:
        """The window as a Pillow crop box."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def contains(self, px: float, py: float) -> bool:
        """Whether a pointer position starts a drag."""
        inside_x = self.x <= px <= self.x + self.width
        return inside_x and self.y <= py <= self.y + self.height

    def drag(self, dx: float, dy: float) -> None:
        """Move by a pointer delta, clamped to the source bounds."""
        self.move_to(self.x + dx, self.y + dy)

    def move_to(self, x: float, y: float) -> None:
        """Move the window's top-left corner, clamped to the source bounds."""
        self.x = max(0.0, min(self.source.width - self.width, x))
        self.y = max(0.0, min(self.source.height - self.height, y))

    def confirm(self, quality: int = 90) -> FrameBuffer:
        """Rasterize the selection into a frame buffer."""
        return rasterize(self.source, self.box, quality=quality)
