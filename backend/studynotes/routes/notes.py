"""
StudyNotes Backend: Notes Route Handlers
==========================================

What:  GET /api/notes (list), GET /api/notes/{id} (detail), DELETE /api/notes/{id}.
How:   Extracts query parameters, delegates to NoteService, returns JSON.
Who:   Called by the frontend dashboard and note detail pages.

Caching Strategy:
    - GET /api/notes: no cache headers (statuses change while summaries run)
    - GET /api/notes/{id}: no-cache, since a retry can replace the summary
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from studynotes.database import get_db_session
from studynotes.schemas.note import (
    NoteResponse,
    NoteListResponse,
    ErrorResponse,
)
from studynotes.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        200: {"description": "Paginated list of notes", "model": NoteListResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List notes with pagination",
    description=(
        "Returns a paginated list of notes. Supports cursor-based pagination, "
        "status and date range filtering, and sort direction. The total count "
        "is also returned in the X-Total-Count header."
    ),
)
async def list_notes(
    response: Response,
    limit: int = Query(
        default=20, ge=1, le=100,
        description="Items per page (max 100)",
    ),
    cursor: str | None = Query(
        default=None,
        description=(
            "Pagination cursor (ISO 8601 datetime of last item from previous page). "
            "Omit for the first page."
        ),
    ),
    status: str | None = Query(
        default=None,
        pattern="^(pending|processing|completed|failed)$",
        description="Filter: only notes in this summary state",
    ),
    from_date: str | None = Query(
        default=None,
        description="Filter: only include notes created on or after this date (ISO 8601)",
    ),
    to_date: str | None = Query(
        default=None,
        description="Filter: only include notes created on or before this date (ISO 8601)",
    ),
    sort: str = Query(
        default="created_at_desc",
        description="Sort order: 'created_at_desc' (newest first) or 'created_at_asc' (oldest first)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> NoteListResponse:
    """
    List notes with cursor-based pagination.

    Example client usage (infinite scroll):
        Page 1: GET /api/notes?limit=20
        Page 2: GET /api/notes?limit=20&cursor=2026-10-15T12:00:00+00:00
        (cursor value comes from next_cursor in previous response)
    """
    result = await note_service.list_notes(
        db=db,
        limit=limit,
        cursor=cursor,
        status=status,
        from_date=from_date,
        to_date=to_date,
        sort=sort,
    )

    response.headers["X-Total-Count"] = str(result.total_count)

    return result


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={
        200: {"description": "Full note details", "model": NoteResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single note by ID",
)
async def get_note(
    note_id: UUID,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    """
    Full note including the complete summary and last error.

    Invalid UUIDs return 422 Unprocessable Entity (FastAPI default).
    """
    result = await note_service.get_note(db=db, note_id=note_id)
    response.headers["Cache-Control"] = "private, no-cache"
    return result


@router.delete(
    "/notes/{note_id}",
    status_code=204,
    responses={
        204: {"description": "Note deleted"},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a note and its stored file",
)
async def delete_note(
    note_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.delete_note(db=db, note_id=note_id)
    return Response(status_code=204)
