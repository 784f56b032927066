"""Gallery endpoints over saved sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from retrivia.api.models import (
    AppendNoteRequest,
    DateOptionsResponse,
    NotesRequest,
    SessionResponse,
)
from retrivia.domain.gallery import DateFilter

if TYPE_CHECKING:
    from retrivia.containers import AppContainer

router = APIRouter(prefix="/gallery", tags=["gallery"])


@router.get("")
async def list_sessions(
    request: Request,
    year: int | None = None,
    month: int | None = None,
    day: int | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> dict[str, list[SessionResponse]]:
    """Return the viewer's sessions, newest first, optionally filtered by date."""
    container: AppContainer = request.app.state.container
    try:
        date_filter = DateFilter(year=year, month=month, day=day)
        date_filter.bounds(container.gallery_service.tz)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    records = container.gallery_service.list_sessions(
        container.identity.current_identity(), limit=limit, date_filter=date_filter
    )
    return {"sessions": [SessionResponse.from_record(record) for record in records]}


@router.get("/dates")
async def date_options(
    request: Request, year: int | None = None, month: int | None = None
) -> DateOptionsResponse:
    """Return the years, months and days that hold sessions."""
    container: AppContainer = request.app.state.container
    options = container.gallery_service.date_options(
        container.identity.current_identity(), year=year, month=month
    )
    return DateOptionsResponse(
        years=options.years, months=options.months, days=options.days
    )


@router.patch("/{session_id}/notes")
async def update_notes(
    session_id: str, payload: NotesRequest, request: Request
) -> SessionResponse:
    """Replace a session's memory notes, and its caption when given."""
    container: AppContainer = request.app.state.container
    record = container.gallery_service.update_notes(
        container.identity.current_identity(),
        session_id,
        payload.notes,
        caption=payload.caption,
    )
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return SessionResponse.from_record(record)


@router.post("/{session_id}/notes")
async def append_note(
    session_id: str, payload: AppendNoteRequest, request: Request
) -> SessionResponse:
    """Add a memory note to a session."""
    container: AppContainer = request.app.state.container
    record = container.gallery_service.append_note(
        container.identity.current_identity(), session_id, payload.note
    )
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return SessionResponse.from_record(record)
