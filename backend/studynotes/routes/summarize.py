"""
StudyNotes Backend: Summarize Route Handlers
==============================================

What:  POST /api/summarize (upload + summarize) and POST /api/summarize/retry.
How:   Receives the multipart upload or a note ID, delegates to NoteService.
Who:   Called by the frontend upload component and the note detail "retry" button.

Request Flow (upload):
    1. Client sends multipart/form-data with a 'file' field (.txt or .md)
    2. We read the file content into memory (bounded by size validation)
    3. NoteService handles: validate → store → summarize → persist
    4. Return 201 Created with SummarizeResponse

Errors are raised as StudyNotesError subclasses and formatted by the global
handlers in main.py (400 validation, 404 unknown note, 503 provider failure).
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from studynotes.database import get_db_session
from studynotes.schemas.note import ErrorResponse, RetrySummaryRequest, SummarizeResponse
from studynotes.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Summarize"])


@router.post(
    "/summarize",
    status_code=201,
    response_model=SummarizeResponse,
    responses={
        201: {"description": "Note created and summarized", "model": SummarizeResponse},
        400: {"description": "Invalid file type, size or encoding", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        503: {"description": "LLM provider unavailable or misconfigured", "model": ErrorResponse},
    },
    summary="Upload a study file and summarize it",
    description=(
        "Upload a UTF-8 text or Markdown study file (.txt, .md, max 10MB). "
        "The file is stored, a note is created, and the configured LLM provider "
        "produces a Korean Markdown summary. A failed summary leaves the note "
        "in the 'failed' state so it can be retried."
    ),
)
async def summarize_upload(
    file: UploadFile = File(
        ...,
        description="Study file (.txt or .md, UTF-8, max 10MB)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> SummarizeResponse:
    content = await file.read()

    logger.info(
        "Received summarize request: filename=%s, size=%d bytes",
        file.filename or "unknown",
        len(content),
    )

    try:
        return await note_service.create_and_summarize(
            db=db,
            filename=file.filename or "upload.txt",
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()


@router.post(
    "/summarize/retry",
    response_model=SummarizeResponse,
    responses={
        200: {"description": "Note summarized again", "model": SummarizeResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Stored file could not be read", "model": ErrorResponse},
        503: {"description": "LLM provider unavailable or misconfigured", "model": ErrorResponse},
    },
    summary="Retry the summary of an existing note",
)
async def retry_summary(
    body: RetrySummaryRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SummarizeResponse:
    """
    Re-run summarization for a note, typically one left in 'failed'.

    The stored file is read again and sent to whichever provider LLM_PROVIDER
    names now, so a configuration fix takes effect without re-uploading.
    """
    logger.info("Received retry request for note %s", body.note_id)
    return await note_service.retry_summary(db=db, note_id=body.note_id)
