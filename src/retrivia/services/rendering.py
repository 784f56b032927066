"""Preview rendering keyed by a render generation."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date

from retrivia.domain.frames import FrameBuffer
from retrivia.domain.styles import CaptionSpec, FilterType, FrameType
from retrivia.services.compositor import RenderResult, render_photostrip
from retrivia.services.fonts import FontBook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderRequest:
    """Immutable snapshot of everything a render depends on."""

    buffers: tuple[FrameBuffer, ...]
    filter_type: FilterType
    frame_type: FrameType
    caption: CaptionSpec
    today: date


@dataclass
class PreviewRenderer:
    """Renders off the event loop; only the newest request may commit."""

    scale: int = 1
    fonts: FontBook = field(default_factory=FontBook)
    latest: RenderResult | None = None
    _generation: int = 0

    @property
    def generation(self) -> int:
        """Token of the most recently started render."""
        return self._generation

    async def request(self, render: RenderRequest) -> RenderResult | None:
        """Render and commit; ``None`` if a newer request started meanwhile."""
        self._generation += 1
        token = self._generation
        result = await asyncio.to_thread(
            render_photostrip,
            render.buffers,
            render.filter_type,
            render.frame_type,
            render.caption,
            today=render.today,
            scale=self.scale,
            fonts=self.fonts,
        )
        if token != self._generation:
            logger.info(
                "Discarding superseded render %d (latest %d)", token, self._generation
            )
            return None
        self.latest = result
        return result

    def invalidate(self) -> None:
        """Drop the committed preview and supersede anything in flight."""
        self._generation += 1
        self.latest = None
