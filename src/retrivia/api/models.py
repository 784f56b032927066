"""Pydantic models for the booth and gallery API."""

from datetime import datetime

from pydantic import BaseModel, Field

from retrivia.domain.sessions import SessionRecord
from retrivia.domain.styles import (
    DEFAULT_TEXT_COLOR,
    MAX_CAPTION_LENGTH,
    FilterType,
    FontStyle,
    FrameType,
)
from retrivia.services.booth import BoothService
from retrivia.services.cropping import CropWindow


class ImportRequest(BaseModel):
    """An uploaded photo, base64 encoded."""

    image_base64: str


class DragRequest(BaseModel):
    """Pointer delta for the crop window, in source pixels."""

    dx: float
    dy: float


class MoveRequest(BaseModel):
    """Target position of a photo within the strip."""

    index: int = Field(ge=0)


class CustomizationRequest(BaseModel):
    """Partial update of the strip customization."""

    filter: FilterType | None = None
    frame: FrameType | None = None
    caption: str | None = Field(default=None, max_length=MAX_CAPTION_LENGTH)
    font_style: FontStyle | None = None
    text_color: str | None = None
    notes: str | None = None


class NotesRequest(BaseModel):
    """Replacement memory notes, optionally with a new caption."""

    notes: str
    caption: str | None = Field(default=None, max_length=MAX_CAPTION_LENGTH)


class AppendNoteRequest(BaseModel):
    """A note to add after the existing memory notes."""

    note: str = Field(min_length=1)


class CropWindowResponse(BaseModel):
    """Crop window position over its source image."""

    x: float
    y: float
    width: float
    height: float
    source_width: int
    source_height: int

    @classmethod
    def from_window(cls, window: CropWindow) -> "CropWindowResponse":
        return cls(
            x=window.x,
            y=window.y,
            width=window.width,
            height=window.height,
            source_width=window.source.width,
            source_height=window.source.height,
        )


class BoothStateResponse(BaseModel):
    """Snapshot of the strip being edited."""

    photo_ids: list[str]
    filter: FilterType
    frame: FrameType
    caption: str
    font_style: FontStyle
    text_color: str = DEFAULT_TEXT_COLOR
    notes: str
    customizing: bool
    save_status: str
    session_id: str | None = None
    photostrip_url: str | None = None
    message: str | None = None

    @classmethod
    def from_booth(cls, booth: BoothService) -> "BoothStateResponse":
        coordinator = booth.coordinator
        return cls(
            photo_ids=[buffer.id for buffer in booth.tray.buffers],
            filter=booth.filter_type,
            frame=booth.frame_type,
            caption=booth.caption.text,
            font_style=booth.caption.font_style,
            text_color=booth.caption.color,
            notes=booth.notes,
            customizing=booth.customizing,
            save_status=coordinator.status,
            session_id=coordinator.session_id,
            photostrip_url=coordinator.result.url if coordinator.result else None,
            message=coordinator.message,
        )


class SessionResponse(BaseModel):
    """A saved photostrip session."""

    id: str
    created_at: datetime
    photo_urls: list[str | None]
    photostrip_url: str
    captions: str
    memory_notes: str

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionResponse":
        return cls(
            id=record.id,
            created_at=record.created_at,
            photo_urls=list(record.photo_urls),
            photostrip_url=record.photostrip_url,
            captions=record.captions,
            memory_notes=record.memory_notes,
        )


class DateOptionsResponse(BaseModel):
    """Selectable gallery filter values."""

    years: list[int]
    months: list[int]
    days: list[int]
