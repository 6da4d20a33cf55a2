"""
StudyNotes Backend: Note Service (Business Logic Orchestrator)
================================================================

What:  Upload → store → summarize → persist workflow, plus note retrieval.
How:   Composes StorageService, the summarization client and database operations.
Who:   Called by route handlers.

Summarize Flow (POST /api/summarize, POST /api/summarize/retry):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌───────────────┐
    │  Upload  │───▶│  Validate   │───▶│  Read text   │───▶│  Summarizer   │
    │  (Route) │    │  & Store    │    │  (Storage)   │    │  (LLM client) │
    └──────────┘    └─────────────┘    └──────────────┘    └───────────────┘
                                                                   │
                                   status: processing ─▶ completed | failed

Status writes are committed as they happen, so a 'failed' status survives
the rollback that the session dependency performs when the error propagates.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func, desc, asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from studynotes.exceptions import (
    DatabaseError,
    FileStorageError,
    LLMServiceError,
    NotFoundError,
)
from studynotes.models.note import Note
from studynotes.schemas.note import (
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    SummarizeResponse,
)
from studynotes.schemas.summary import SummarizeRequest
from studynotes.services.storage_service import storage_service, title_from_filename
from studynotes.services.summarizer import summarizer

logger = logging.getLogger(__name__)


def _to_response(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        title=note.title,
        status=note.status,
        summary=note.summary,
        error_message=note.error_message,
        file_size=note.file_size,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - create_and_summarize(): upload → store → summarize
        - summarize_note(): one summarization pass over an existing note
        - retry_summary(): summarize_note() for a note looked up by ID
        - get_note() / list_notes() / delete_note()
    """

    async def _commit(self, db: AsyncSession, note: Note) -> None:
        try:
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to persist note %s: %s", note.id, str(e))
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"note_id": str(note.id), "error_type": type(e).__name__},
            )

    async def _record_failure(self, db: AsyncSession, note: Note, message: str) -> None:
        """Mark a note failed. A commit error here is logged; the original error wins."""
        note.status = "failed"
        note.error_message = message
        try:
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to update note %s status to 'failed': %s", note.id, str(e))

    async def _load(self, db: AsyncSession, note_id: UUID) -> Note:
        try:
            result = await db.execute(select(Note).where(Note.id == note_id))
            note = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id)},
            )
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def create_and_summarize(
        self,
        db: AsyncSession,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> SummarizeResponse:
        """
        Store an uploaded study file, create its note, and summarize it.

        Raises:
            ValidationError: Wrong extension, empty, too large, or not UTF-8
            FileStorageError: Disk write or read failed
            LLMServiceError: Summarization failed (note left as 'failed')
            DatabaseError: Note could not be inserted
        """
        relative_path = await storage_service.validate_and_store(
            filename=filename,
            content=content,
            content_length=content_length,
        )

        now = datetime.now(timezone.utc)
        note = Note(
            id=uuid.uuid4(),
            title=title_from_filename(filename) or filename,
            file_path=relative_path,
            file_size=len(content),
            status="pending",
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(note)
            await db.flush()
        except SQLAlchemyError as e:
            await storage_service.delete(relative_path)
            logger.error("Failed to create note for %s: %s", relative_path, str(e))
            raise DatabaseError(
                message="An error occurred while saving your note. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Note record created: %s (status=pending)", note.id)

        return await self.summarize_note(db, note)

    async def summarize_note(self, db: AsyncSession, note: Note) -> SummarizeResponse:
        """
        processing → read file → summarize → completed | failed.

        Raises:
            FileStorageError: File could not be read (note marked 'failed')
            LLMServiceError: Provider failure (note marked 'failed', message stored)
        """
        note.status = "processing"
        note.error_message = None
        await self._commit(db, note)

        try:
            text = await storage_service.read_text(note.file_path)
        except FileStorageError as e:
            await self._record_failure(db, note, e.message)
            raise

        try:
            result = await summarizer.summarize(SummarizeRequest(text=text, title=note.title))
        except LLMServiceError as e:
            logger.warning("Summarization failed for note %s: %s", note.id, e.message)
            await self._record_failure(db, note, e.message)
            raise

        note.summary = result.summary
        note.status = "completed"
        note.error_message = None
        await self._commit(db, note)
        logger.info("Note %s completed: %d chars of summary", note.id, len(result.summary))

        return SummarizeResponse(summary=result.summary, note=_to_response(note))

    async def retry_summary(self, db: AsyncSession, note_id: UUID) -> SummarizeResponse:
        """Run the summarization pass again for an existing note."""
        note = await self._load(db, note_id)
        logger.info("Retrying summary for note %s (previous status=%s)", note.id, note.status)
        return await self.summarize_note(db, note)

    async def get_note(self, db: AsyncSession, note_id: UUID) -> NoteResponse:
        """Raises NotFoundError (→ 404) when the note does not exist."""
        return _to_response(await self._load(db, note_id))

    async def delete_note(self, db: AsyncSession, note_id: UUID) -> None:
        """Remove the stored file (best effort), then the note row."""
        note = await self._load(db, note_id)
        await storage_service.delete(note.file_path)
        try:
            await db.delete(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note_id)},
            )
        logger.info("Note %s deleted", note_id)

    async def list_notes(
        self,
        db: AsyncSession,
        limit: int = 20,
        cursor: Optional[str] = None,
        status: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        sort: str = "created_at_desc",
    ) -> NoteListResponse:
        """
        List notes with cursor-based pagination and optional filters.

        Args:
            limit: Maximum items per page (1-100, default 20)
            cursor: ISO datetime cursor from previous page (None for first page);
                    an unparsable cursor starts from the beginning
            status: Only notes in this state
            from_date / to_date: Inclusive created_at range (ISO 8601); unparsable values are ignored
            sort: 'created_at_desc' or 'created_at_asc'
        """
        filters = []
        if status:
            filters.append(Note.status == status)
        from_dt = _parse_iso(from_date)
        if from_dt:
            filters.append(Note.created_at >= from_dt)
        to_dt = _parse_iso(to_date)
        if to_dt:
            filters.append(Note.created_at <= to_dt)

        query = select(Note).where(*filters)

        cursor_dt = _parse_iso(cursor)
        if cursor_dt:
            if sort == "created_at_asc":
                query = query.where(Note.created_at > cursor_dt)
            else:
                query = query.where(Note.created_at < cursor_dt)

        if sort == "created_at_asc":
            query = query.order_by(asc(Note.created_at))
        else:
            query = query.order_by(desc(Note.created_at))

        # One extra row tells us whether another page exists
        query = query.limit(limit + 1)

        try:
            result = await db.execute(query)
            notes = list(result.scalars().all())

            count_result = await db.execute(select(func.count(Note.id)).where(*filters))
            total_count = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        has_more = len(notes) > limit
        if has_more:
            notes = notes[:limit]

        next_cursor = None
        if has_more and notes:
            next_cursor = notes[-1].created_at.isoformat()

        return NoteListResponse(
            notes=[
                NoteListItem(
                    id=note.id,
                    title=note.title,
                    status=note.status,
                    summary_preview=(note.summary or "")[:200],
                    created_at=note.created_at,
                )
                for note in notes
            ],
            total_count=total_count,
            next_cursor=next_cursor,
            has_more=has_more,
        )


note_service = NoteService()
