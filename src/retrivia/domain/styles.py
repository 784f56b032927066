"""Catalogs of filters, frames and caption fonts."""

from dataclasses import dataclass
from enum import StrEnum

from PIL import ImageColor

MAX_CAPTION_LENGTH = 50
DEFAULT_TEXT_COLOR = "#5e503f"


class FilterType(StrEnum):
    """Palette transforms applied to every photo of a strip."""

    none = "none"
    sepia = "sepia"
    grayscale = "grayscale"
    vintage_warm = "vintage_warm"
    vintage_cool = "vintage_cool"


class FrameType(StrEnum):
    """Border styles drawn around each photo slot."""

    none = "none"
    classic = "classic"
    polaroid = "polaroid"
    filmstrip = "filmstrip"
    scalloped = "scalloped"


class FontStyle(StrEnum):
    """Caption font families."""

    vintage = "vintage"
    handwritten = "handwritten"
    modern = "modern"
    fancy = "fancy"


@dataclass(frozen=True)
class FrameStyle:
    """Drawing parameters for a frame type."""

    border_width: int
    border_color: str | None
    punch_holes: bool = False


FRAME_STYLES: dict[FrameType, FrameStyle] = {
    FrameType.none: FrameStyle(border_width=0, border_color=None),
    FrameType.classic: FrameStyle(border_width=15, border_color="#d2bd9e"),
    FrameType.polaroid: FrameStyle(border_width=15, border_color="#f5f5f0"),
    FrameType.filmstrip: FrameStyle(
        border_width=15, border_color="#222222", punch_holes=True
    ),
    FrameType.scalloped: FrameStyle(border_width=15, border_color="#e8d8c3"),
}


@dataclass(frozen=True)
class FontSpec:
    """Font file candidates (first found wins) and a point size."""

    candidates: tuple[str, ...]
    size: int


_SERIF_ITALIC = (
    "DejaVuSerif-Italic.ttf",
    "LiberationSerif-Italic.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSerif-Italic.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSerif-Italic.ttf",
    "/System/Library/Fonts/Supplemental/Times New Roman Italic.ttf",
)

FONT_SPECS: dict[FontStyle, FontSpec] = {
    FontStyle.vintage: FontSpec(candidates=_SERIF_ITALIC, size=22),
    FontStyle.handwritten: FontSpec(
        candidates=(
            "Comic Sans MS.ttf",
            "comic.ttf",
            "/usr/share/fonts/truetype/msttcorefonts/Comic_Sans_MS.ttf",
            "DejaVuSans-Oblique.ttf",
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
        ),
        size=22,
    ),
    FontStyle.modern: FontSpec(
        candidates=(
            "DejaVuSans-Bold.ttf",
            "arialbd.ttf",
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
            "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
        ),
        size=22,
    ),
    FontStyle.fancy: FontSpec(
        candidates=(
            "PlayfairDisplay-Regular.ttf",
            "georgia.ttf",
            "DejaVuSerif.ttf",
            "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
        ),
        size=24,
    ),
}

DATE_FONT = FontSpec(candidates=_SERIF_ITALIC, size=20)
DATE_COLOR = "#8b4513"


@dataclass(frozen=True)
class CaptionSpec:
    """Caption text burned into the strip."""

    text: str = ""
    font_style: FontStyle = FontStyle.vintage
    color: str = DEFAULT_TEXT_COLOR

    def __post_init__(self) -> None:
        if len(self.text) > MAX_CAPTION_LENGTH:
            raise ValueError(f"Caption exceeds {MAX_CAPTION_LENGTH} characters")
        # Raises ValueError for anything Pillow cannot draw with.
        ImageColor.getrgb(self.color)
