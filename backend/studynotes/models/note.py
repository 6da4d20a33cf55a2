"""
StudyNotes Backend: Note SQLAlchemy Model
===========================================

What:  ORM model for the `notes` table in PostgreSQL.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by NoteService and SearchService.

Columns:
    - file_path: Relative path from the storage root to the uploaded .txt/.md file
    - summary: Markdown produced by the summarization client (NULL until completed)
    - status: pending → processing → completed | failed (retry goes back to processing)
    - error_message: Last summarization failure, cleared on success
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from studynotes.database import Base

NOTE_STATUSES = ("pending", "processing", "completed", "failed")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    An uploaded study file and its generated summary.

    Lifecycle:
        1. Created on upload (status = 'pending')
        2. 'processing' while the LLM provider is working
        3. 'completed' with summary, or 'failed' with error_message
        4. A retry moves a note back to 'processing'
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display title, derived from the uploaded filename",
    )

    file_path: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Relative path from storage root to the uploaded study file",
    )

    file_size: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Size of the uploaded file in bytes",
    )

    summary: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Markdown summary returned by the LLM provider",
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="pending",
        server_default=text("'pending'"),
        comment="Summary state: pending, processing, completed, failed",
    )

    error_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Last summarization error, shown to the user on failed notes",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_notes_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, title='{self.title}', status='{self.status}', "
            f"created_at='{self.created_at}')>"
        )
