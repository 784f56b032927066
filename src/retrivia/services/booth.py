"""Booth orchestration: the editing flow of the kiosk's current photostrip."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from retrivia.domain.frames import CameraFacing, FrameBuffer
from retrivia.domain.sessions import SaveResult
from retrivia.domain.styles import CaptionSpec, FilterType, FrameType
from retrivia.errors import NoActiveCropError, TrayFullError
from retrivia.services.capture import CaptureService, EventCallback
from retrivia.services.compositor import RenderResult, render_photostrip
from retrivia.services.coordinator import SaveCoordinator
from retrivia.services.cropping import CropWindow, load_source
from retrivia.services.persistence import SessionGateway
from retrivia.services.rendering import PreviewRenderer, RenderRequest
from retrivia.services.tray import PhotoTray

logger = logging.getLogger(__name__)


@dataclass
class BoothService:
    """Holds the photos and customization of the strip being built."""

    capture: CaptureService
    gateway: SessionGateway
    renderer: PreviewRenderer
    coordinator: SaveCoordinator = field(default_factory=SaveCoordinator)
    tray: PhotoTray = field(default_factory=PhotoTray)
    composite_scale: int = 2
    composite_quality: int = 95
    frame_quality: int = 90
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))
    filter_type: FilterType = FilterType.none
    frame_type: FrameType = FrameType.classic
    caption: CaptionSpec = field(default_factory=CaptionSpec)
    notes: str = ""
    crop: CropWindow | None = None
    customizing: bool = False

    def today(self) -> date:
        """Date stamped on the strip, in the kiosk's timezone."""
        return self.clock().astimezone(ZoneInfo(self.timezone_name)).date()

    async def take_photos(
        self, on_event: EventCallback | None = None
    ) -> SaveResult | None:
        """Run the capture sequence, then enter customization."""
        buffers = await self.capture.run_sequence(on_event)
        self.crop = None
        self.tray.replace(buffers)
        self._photos_changed()
        return await self.enter_customization()

    def toggle_camera(self) -> CameraFacing:
        """Switch between the front and back camera for the next sequence."""
        return self.capture.toggle_facing()

    def import_photo(self, data: bytes) -> CropWindow:
        """Decode an uploaded image and open a crop window over it."""
        if self.tray.is_complete:
            raise TrayFullError(f"A strip holds {self.tray.capacity} photos")
        self.crop = CropWindow.centered(load_source(data))
        return self.crop

    def drag_crop(self, dx: float, dy: float) -> CropWindow:
        """Move the active crop window by a pointer delta."""
        crop = self._active_crop()
        crop.drag(dx, dy)
        return crop

    async def confirm_crop(self) -> FrameBuffer:
        """Add the selection to the strip; the third photo starts customization."""
        crop = self._active_crop()
        buffer = crop.confirm(quality=self.frame_quality)
        self.tray.add(buffer)
        self.crop = None
        self._photos_changed()
        if self.tray.is_complete:
            await self.enter_customization()
        return buffer

    def cancel_crop(self) -> None:
        """Discard the active crop window."""
        self.crop = None

    def remove_photo(self, frame_id: str) -> bool:
        """Drop a photo from the strip."""
        removed = self.tray.remove(frame_id)
        if removed:
            self.customizing = False
            self._photos_changed()
        return removed

    def move_photo(self, frame_id: str, index: int) -> bool:
        """Reorder a photo within the strip."""
        moved = self.tray.move(frame_id, index)
        if moved:
            self._photos_changed()
        return moved

    async def customize(
        self,
        filter_type: FilterType | None = None,
        frame_type: FrameType | None = None,
        caption: CaptionSpec | None = None,
        notes: str | None = None,
    ) -> RenderResult | None:
        """Change any customization parameter and render a fresh preview."""
        if filter_type is not None:
            self.filter_type = filter_type
        if frame_type is not None:
            self.frame_type = frame_type
        if caption is not None:
            self.caption = caption
        if notes is not None:
            self.notes = notes
        return await self.preview()

    async def preview(self) -> RenderResult | None:
        """Render the current state; None when a newer render superseded this one."""
        return await self.renderer.request(self._render_request())

    async def enter_customization(self) -> SaveResult | None:
        """Switch to customization and persist the session once."""
        self.customizing = True
        return await self.coordinator.save(self._save)

    async def save(self) -> SaveResult | None:
        """Persist the session unless it is already saved or saving."""
        return await self.coordinator.save(self._save)

    async def update_session(self) -> str | None:
        """Re-render with the latest state and overwrite the saved session."""
        return await self.coordinator.update(self._update)

    def reset(self) -> None:
        """Discard everything and start a new strip."""
        self.tray.reset()
        self.crop = None
        self.filter_type = FilterType.none
        self.frame_type = FrameType.classic
        self.caption = CaptionSpec()
        self.notes = ""
        self.customizing = False
        self.coordinator.reset()
        self.renderer.invalidate()

    async def _save(self) -> SaveResult | None:
        request, notes = self._render_request(), self.notes
        composite = await self._render_composite(request)
        if composite is None:
            return None
        return await self.gateway.save(
            request.buffers, composite, request.caption.text, notes
        )

    async def _update(self, session_id: str) -> str | None:
        request, notes = self._render_request(), self.notes
        composite = await self._render_composite(request)
        if composite is None:
            return None
        return await self.gateway.update(
            session_id, composite, request.caption.text, notes
        )

    async def _render_composite(self, request: RenderRequest) -> bytes | None:
        result = await asyncio.to_thread(
            render_photostrip,
            request.buffers,
            request.filter_type,
            request.frame_type,
            request.caption,
            today=request.today,
            scale=self.composite_scale,
            fonts=self.renderer.fonts,
        )
        if not result.ok:
            logger.warning("Not persisting failed composite: %s", result.error)
            return None
        return result.to_jpeg(self.composite_quality)

    def _render_request(self) -> RenderRequest:
        return RenderRequest(
            buffers=self.tray.buffers,
            filter_type=self.filter_type,
            frame_type=self.frame_type,
            caption=self.caption,
            today=self.today(),
        )

    def _active_crop(self) -> CropWindow:
        if self.crop is None:
            raise NoActiveCropError("No imported photo is being cropped")
        return self.crop

    def _photos_changed(self) -> None:
        self.renderer.invalidate()
        self.coordinator.reset()
