"""Font resolution for caption and date text."""

import logging
from dataclasses import dataclass, field

from PIL import ImageFont

from retrivia.domain.styles import FontSpec

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass
class FontBook:
    """Loads and caches fonts per font spec and render scale."""

    _fonts: dict[tuple[FontSpec, int], Font] = field(default_factory=dict)

    def get(self, spec: FontSpec, scale: int = 1) -> Font:
        """Return the first available candidate at the scaled size."""
        key = (spec, scale)
        font = self._fonts.get(key)
        if font is None:
            font = _load(spec, spec.size * scale)
            self._fonts[key] = font
        return font


def _load(spec: FontSpec, size: int) -> Font:
    for candidate in spec.candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.info("No font file found for %s, using the default font", spec.candidates[0])
    return ImageFont.load_default(size=size)
