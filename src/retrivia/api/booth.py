"""Booth endpoints: capture, import, customization and saving."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, Response, status

from retrivia.api.models import (
    BoothStateResponse,
    CropWindowResponse,
    CustomizationRequest,
    DragRequest,
    ImportRequest,
    MoveRequest,
)
from retrivia.domain.frames import PHOTOS_PER_STRIP
from retrivia.domain.styles import CaptionSpec

if TYPE_CHECKING:
    from retrivia.containers import AppContainer
    from retrivia.services.booth import BoothService

router = APIRouter(prefix="/booth", tags=["booth"])


def _booth(request: Request) -> BoothService:
    container: AppContainer = request.app.state.container
    return container.booth_service


@router.get("")
async def booth_state(request: Request) -> BoothStateResponse:
    """Return the strip being edited."""
    return BoothStateResponse.from_booth(_booth(request))


@router.post("/capture")
async def capture(request: Request) -> BoothStateResponse:
    """Run the countdown sequence and fill the strip with three shots."""
    booth = _booth(request)
    await booth.take_photos()
    return BoothStateResponse.from_booth(booth)


@router.post("/camera/toggle")
async def toggle_camera(request: Request) -> dict[str, str]:
    """Switch between the front and back camera."""
    return {"facing": _booth(request).toggle_camera()}


@router.post("/imports")
async def import_photo(payload: ImportRequest, request: Request) -> CropWindowResponse:
    """Open a crop window over an uploaded photo."""
    data = _decode_upload(payload.image_base64)
    window = _booth(request).import_photo(data)
    return CropWindowResponse.from_window(window)


@router.post("/imports/drag")
async def drag_crop(payload: DragRequest, request: Request) -> CropWindowResponse:
    """Move the crop window."""
    window = _booth(request).drag_crop(payload.dx, payload.dy)
    return CropWindowResponse.from_window(window)


@router.post("/imports/confirm")
async def confirm_crop(request: Request) -> BoothStateResponse:
    """Add the cropped selection to the strip."""
    booth = _booth(request)
    await booth.confirm_crop()
    return BoothStateResponse.from_booth(booth)


@router.delete("/imports")
async def cancel_crop(request: Request) -> dict[str, str]:
    """Discard the active crop window."""
    _booth(request).cancel_crop()
    return {"status": "ok"}


@router.delete("/photos/{frame_id}")
async def remove_photo(frame_id: str, request: Request) -> BoothStateResponse:
    """Remove a photo from the strip."""
    booth = _booth(request)
    if not booth.remove_photo(frame_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return BoothStateResponse.from_booth(booth)


@router.post("/photos/{frame_id}/move")
async def move_photo(
    frame_id: str, payload: MoveRequest, request: Request
) -> BoothStateResponse:
    """Reorder a photo within the strip."""
    booth = _booth(request)
    if not booth.move_photo(frame_id, payload.index):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return BoothStateResponse.from_booth(booth)


@router.put("/customization")
async def customize(
    payload: CustomizationRequest, request: Request
) -> BoothStateResponse:
    """Change filter, frame, caption or notes and refresh the preview."""
    booth = _booth(request)
    caption = None
    if (
        payload.caption is not None
        or payload.font_style is not None
        or payload.text_color is not None
    ):
        current = booth.caption
        try:
            caption = CaptionSpec(
                text=current.text if payload.caption is None else payload.caption,
                font_style=payload.font_style or current.font_style,
                color=payload.text_color or current.color,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
    await booth.customize(
        filter_type=payload.filter,
        frame_type=payload.frame,
        caption=caption,
        notes=payload.notes,
    )
    return BoothStateResponse.from_booth(booth)


@router.get("/preview")
async def preview(request: Request) -> Response:
    """Return the current strip preview as JPEG."""
    booth = _booth(request)
    if not booth.tray.is_complete:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A strip needs {PHOTOS_PER_STRIP} photos",
        )
    result = booth.renderer.latest or await booth.preview()
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Preview was superseded"
        )
    return Response(
        content=result.to_jpeg(),
        media_type="image/jpeg",
        headers={"X-Render-Status": "ok" if result.ok else "error"},
    )


@router.post("/save")
async def save(request: Request) -> BoothStateResponse:
    """Save the strip as a new session, unless it is already saved."""
    booth = _booth(request)
    await booth.save()
    return BoothStateResponse.from_booth(booth)


@router.patch("/session")
async def update_session(request: Request) -> BoothStateResponse:
    """Overwrite the saved session with the current caption, notes and look."""
    booth = _booth(request)
    if await booth.update_session() is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=booth.coordinator.message
        )
    return BoothStateResponse.from_booth(booth)


@router.post("/reset")
async def reset(request: Request) -> BoothStateResponse:
    """Discard the strip and start over."""
    booth = _booth(request)
    booth.reset()
    return BoothStateResponse.from_booth(booth)


def _decode_upload(encoded: str) -> bytes:
    """Accept plain base64 or a ``data:`` URL."""
    if encoded.startswith("data:"):
        encoded = encoded.partition(",")[2]
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid base64 image"
        ) from exc
