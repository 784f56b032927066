"""Photostrip compositing.

``render_photostrip`` is a pure function of its inputs (the date stamp is
passed in): three raw frame buffers are filtered, framed and stacked on a 9:16
paper canvas, then the caption and date are drawn on top. All geometry is in
reference units of a 450x800 canvas, multiplied by ``scale``.
"""

import io
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date

from PIL import Image, ImageDraw, ImageFilter

from retrivia.domain.frames import FRAME_ASPECT, PHOTOS_PER_STRIP, FrameBuffer
from retrivia.domain.styles import (
    DATE_COLOR,
    DATE_FONT,
    FONT_SPECS,
    FRAME_STYLES,
    CaptionSpec,
    FilterType,
    FontSpec,
    FontStyle,
    FrameStyle,
    FrameType,
)
from retrivia.errors import ImageDecodeError
from retrivia.services.effects import apply_filter
from retrivia.services.fonts import Font, FontBook

logger = logging.getLogger(__name__)

CANVAS_SIZE = (450, 800)
PAPER_COLOR = "#f9f5e7"
SLOT_WIDTH_RATIO = 0.85
TOP_RESERVE = 30
BOTTOM_RESERVE = 110
# Frames of neighbouring slots must not touch.
MIN_SLOT_GAP = 2 * max(style.border_width for style in FRAME_STYLES.values()) + 6
INNER_MARGIN = 2
HOLE_RADIUS = 6
HOLE_INSET = 8
HOLE_COLOR = "#000000"
CAPTION_WIDTH_RATIO = 0.9
CAPTION_LINE_HEIGHT = 26
CAPTION_BASELINE_FROM_BOTTOM = 55
DATE_BASELINE_FROM_BOTTOM = 20
ERROR_COLOR = "#a52a2a"
ERROR_TITLE_FONT = FontSpec(candidates=FONT_SPECS[FontStyle.modern].candidates, size=24)
ERROR_HINT_FONT = FontSpec(candidates=DATE_FONT.candidates, size=18)

_DEFAULT_FONTS = FontBook()


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in canvas pixels."""

    x: float
    y: float
    width: float
    height: float

    def expanded(self, by: float) -> "Rect":
        """Grow the rectangle by ``by`` on every side."""
        return Rect(self.x - by, self.y - by, self.width + 2 * by, self.height + 2 * by)

    def box(self) -> tuple[int, int, int, int]:
        """Integer (left, top, right, bottom) box for drawing calls."""
        return (
            round(self.x),
            round(self.y),
            round(self.x + self.width),
            round(self.y + self.height),
        )


@dataclass(frozen=True)
class StripLayout:
    """Canvas size and the three photo slots, top to bottom."""

    size: tuple[int, int]
    slots: tuple[Rect, ...]
    scale: int


@dataclass(frozen=True)
class RenderResult:
    """Outcome of a render: the strip, or an error placeholder."""

    image: Image.Image
    ok: bool
    error: str | None = None

    def to_jpeg(self, quality: int = 95) -> bytes:
        """Encode the rendered image for upload or download."""
        return encode_jpeg(self.image, quality)


def compute_layout(scale: int = 1) -> StripLayout:
    """Stack three equal slots evenly above the caption band."""
    width, height = CANVAS_SIZE[0] * scale, CANVAS_SIZE[1] * scale
    slot_width = width * SLOT_WIDTH_RATIO
    slot_height = slot_width / FRAME_ASPECT
    area = height - (TOP_RESERVE + BOTTOM_RESERVE) * scale
    gap = (area - PHOTOS_PER_STRIP * slot_height) / (PHOTOS_PER_STRIP + 1)
    if gap < MIN_SLOT_GAP * scale:
        gap = MIN_SLOT_GAP * scale
        slot_height = (area - (PHOTOS_PER_STRIP + 1) * gap) / PHOTOS_PER_STRIP
        slot_width = slot_height * FRAME_ASPECT
    x = (width - slot_width) / 2
    slots = tuple(
        Rect(
            x=x,
            y=TOP_RESERVE * scale + gap + index * (slot_height + gap),
            width=slot_width,
            height=slot_height,
        )
        for index in range(PHOTOS_PER_STRIP)
    )
    return StripLayout(size=(width, height), slots=slots, scale=scale)


def fit_within(
    source: tuple[int, int], bounds: tuple[float, float]
) -> tuple[int, int, float, float]:
    """Scale ``source`` uniformly into ``bounds``; returns size and centring offset."""
    factor = min(bounds[0] / source[0], bounds[1] / source[1])
    width = max(1, round(source[0] * factor))
    height = max(1, round(source[1] * factor))
    return width, height, (bounds[0] - width) / 2, (bounds[1] - height) / 2


def wrap_text(
    text: str, measure: Callable[[str], float], max_width: float
) -> list[str]:
    """Greedy line breaking at spaces; a word is never split."""
    words = text.split(" ")
    lines: list[str] = []
    line = ""
    for index, word in enumerate(words):
        candidate = f"{line}{word}"
        if index > 0 and measure(candidate) > max_width:
            lines.append(line.rstrip())
            line = f"{word} "
        else:
            line = f"{candidate} "
    lines.append(line.rstrip())
    return lines


def format_date_stamp(day: date) -> str:
    """Long human-readable form, e.g. ``June 5, 2024``."""
    return f"{day:%B} {day.day}, {day.year}"


def render_photostrip(  # noqa: PLR0913
    buffers: Sequence[FrameBuffer],
    filter_type: FilterType,
    frame_type: FrameType,
    caption: CaptionSpec,
    *,
    today: date,
    scale: int = 1,
    fonts: FontBook | None = None,
) -> RenderResult:
    """Composite a full strip, or an error placeholder if any photo is unusable."""
    font_book = fonts or _DEFAULT_FONTS
    if len(buffers) != PHOTOS_PER_STRIP:
        return render_error(
            f"A strip needs {PHOTOS_PER_STRIP} photos, got {len(buffers)}",
            scale=scale,
            fonts=font_book,
        )
    try:
        images = [buffer.image() for buffer in buffers]
    except ImageDecodeError as exc:
        logger.warning("Aborting render: %s", exc)
        return render_error(str(exc), scale=scale, fonts=font_book)

    layout = compute_layout(scale)
    canvas = Image.new("RGB", layout.size, PAPER_COLOR)
    draw = ImageDraw.Draw(canvas)
    style = FRAME_STYLES[FrameType(frame_type)]
    for slot, image in zip(layout.slots, images, strict=True):
        if style.border_color is not None:
            _draw_frame(draw, slot, style, scale)
        _place_photo(canvas, apply_filter(image, filter_type), slot, scale)

    if caption.text.strip():
        canvas = _draw_caption(canvas, caption, layout, font_book)
    _draw_date(canvas, today, font_book, scale)
    return RenderResult(image=canvas, ok=True)


def render_error(
    message: str, *, scale: int = 1, fonts: FontBook | None = None
) -> RenderResult:
    """A blank strip carrying an explicit error message instead of photos."""
    font_book = fonts or _DEFAULT_FONTS
    width, height = CANVAS_SIZE[0] * scale, CANVAS_SIZE[1] * scale
    canvas = Image.new("RGB", (width, height), PAPER_COLOR)
    draw = ImageDraw.Draw(canvas)
    draw.text(
        (width / 2, height / 2 - 20 * scale),
        "Error loading images",
        fill=ERROR_COLOR,
        font=font_book.get(ERROR_TITLE_FONT, scale),
        anchor="ms",
    )
    draw.text(
        (width / 2, height / 2 + 20 * scale),
        "Please try again",
        fill=ERROR_COLOR,
        font=font_book.get(ERROR_HINT_FONT, scale),
        anchor="ms",
    )
    return RenderResult(image=canvas, ok=False, error=message)


def encode_jpeg(image: Image.Image, quality: int = 95) -> bytes:
    """Encode an image as JPEG bytes."""
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def _draw_frame(
    draw: ImageDraw.ImageDraw, slot: Rect, style: FrameStyle, scale: int
) -> None:
    outer = slot.expanded(style.border_width * scale)
    draw.rectangle(outer.box(), fill=style.border_color)
    if not style.punch_holes:
        return
    radius = HOLE_RADIUS * scale
    left_x = outer.x + (HOLE_INSET + HOLE_RADIUS) * scale
    right_x = outer.x + outer.width - (HOLE_INSET + HOLE_RADIUS) * scale
    for center_x in (left_x, right_x):
        for fraction in (0.25, 0.75):
            center_y = slot.y + slot.height * fraction
            draw.ellipse(
                (
                    center_x - radius,
                    center_y - radius,
                    center_x + radius,
                    center_y + radius,
                ),
                fill=HOLE_COLOR,
            )


def _place_photo(
    canvas: Image.Image, photo: Image.Image, slot: Rect, scale: int
) -> None:
    margin = INNER_MARGIN * scale
    width, height, offset_x, offset_y = fit_within(
        photo.size, (slot.width - 2 * margin, slot.height - 2 * margin)
    )
    resized = photo.resize((width, height), Image.Resampling.LANCZOS)
    canvas.paste(
        resized,
        (round(slot.x + margin + offset_x), round(slot.y + margin + offset_y)),
    )


def _draw_caption(
    canvas: Image.Image, caption: CaptionSpec, layout: StripLayout, fonts: FontBook
) -> Image.Image:
    scale = layout.scale
    font = fonts.get(FONT_SPECS[caption.font_style], scale)
    draw = ImageDraw.Draw(canvas)
    max_width = layout.slots[0].width * CAPTION_WIDTH_RATIO
    lines = wrap_text(
        caption.text, lambda text: draw.textlength(text, font=font), max_width
    )
    center_x = canvas.width / 2
    last_baseline = canvas.height - CAPTION_BASELINE_FROM_BOTTOM * scale
    first_baseline = last_baseline - (len(lines) - 1) * CAPTION_LINE_HEIGHT * scale

    plate = Image.new("RGBA", canvas.size, (255, 255, 255, 0))
    plate_draw = ImageDraw.Draw(plate)
    for index, line in enumerate(lines):
        baseline = first_baseline + index * CAPTION_LINE_HEIGHT * scale
        plate_draw.text(
            (center_x, baseline),
            line,
            fill=(255, 255, 255, 128),
            font=font,
            anchor="ms",
            stroke_width=2 * scale,
        )
    plate = plate.filter(ImageFilter.GaussianBlur(radius=2 * scale))
    composed = Image.alpha_composite(canvas.convert("RGBA"), plate).convert("RGB")

    draw = ImageDraw.Draw(composed)
    for index, line in enumerate(lines):
        baseline = first_baseline + index * CAPTION_LINE_HEIGHT * scale
        _draw_centered(draw, line, center_x, baseline, font, caption.color)
    return composed


def _draw_date(canvas: Image.Image, today: date, fonts: FontBook, scale: int) -> None:
    draw = ImageDraw.Draw(canvas)
    _draw_centered(
        draw,
        format_date_stamp(today),
        canvas.width / 2,
        canvas.height - DATE_BASELINE_FROM_BOTTOM * scale,
        fonts.get(DATE_FONT, scale),
        DATE_COLOR,
    )


def _draw_centered(  # noqa: PLR0913
    draw: ImageDraw.ImageDraw,
    text: str,
    center_x: float,
    baseline: float,
    font: Font,
    fill: str,
) -> None:
    draw.text((center_x, baseline), text, fill=fill, font=font, anchor="ms")
