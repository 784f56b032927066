"""Cropping and rasterizing photos into the strip's frame format."""

from uuid import uuid4

from PIL import Image, ImageOps

from retrivia.domain.frames import FRAME_ASPECT, FRAME_SIZE, FrameBuffer

Box = tuple[float, float, float, float]


def new_frame_id() -> str:
    """Return an id unique within a session."""
    return f"photo-{uuid4().hex[:12]}"


def center_crop_box(width: int, height: int, aspect: float = FRAME_ASPECT) -> Box:
    """Largest box of the given aspect ratio, centred in a width x height source."""
    source_aspect = width / height
    if source_aspect > aspect:
        crop_width = height * aspect
        left = (width - crop_width) / 2
        return (left, 0.0, left + crop_width, float(height))
    crop_height = width / aspect
    top = (height - crop_height) / 2
    return (0.0, top, float(width), top + crop_height)


def rasterize(
    image: Image.Image,
    box: Box,
    *,
    mirror: bool = False,
    quality: int = 90,
    frame_id: str | None = None,
) -> FrameBuffer:
    """Resize the boxed region to the frame size and encode it."""
    frame = image.convert("RGB").resize(FRAME_SIZE, Image.Resampling.LANCZOS, box=box)
    if mirror:
        frame = ImageOps.mirror(frame)
    return FrameBuffer.from_image(frame_id or new_frame_id(), frame, quality=quality)
