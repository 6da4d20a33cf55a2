"""
StudyNotes Backend: Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate the OpenAPI documentation.

Schemas are separate from the SQLAlchemy models: file_path is never exposed,
and list items carry a short preview instead of the full summary.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Notes
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Full note as returned by GET /api/notes/{id} and the summarize endpoints."""
    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    title: str = Field(description="Title derived from the uploaded filename")
    status: str = Field(description="pending, processing, completed or failed")
    summary: Optional[str] = Field(default=None, description="Markdown summary (null until completed)")
    error_message: Optional[str] = Field(default=None, description="Last summarization error")
    file_size: Optional[int] = Field(default=None, description="Uploaded file size in bytes")
    created_at: datetime = Field(description="When the note was created (UTC ISO 8601)")
    updated_at: Optional[datetime] = Field(default=None, description="Last status change (UTC)")

    model_config = {"from_attributes": True}


class NoteListItem(BaseModel):
    """Compact note for list views; summary_preview is the first 200 characters."""
    id: uuid.UUID
    title: str
    status: str
    summary_preview: str = Field(description="First 200 characters of the summary")
    created_at: datetime


class NoteListResponse(BaseModel):
    """
    Cursor-paginated list.

    next_cursor is the created_at of the last item; the client sends it back
    as `cursor` to get the following page.
    """
    notes: List[NoteListItem] = Field(description="Array of note summaries")
    total_count: int = Field(description="Total number of notes matching filters")
    next_cursor: Optional[str] = Field(
        default=None,
        description="Cursor for next page (ISO datetime). Null if no more pages."
    )
    has_more: bool = Field(description="Whether more pages are available")


# ══════════════════════════════════════════════════════════════════════════
# Summarization
# ══════════════════════════════════════════════════════════════════════════


class RetrySummaryRequest(BaseModel):
    note_id: uuid.UUID = Field(description="Note to summarize again")


class SummarizeResponse(BaseModel):
    """Returned by POST /api/summarize (201) and POST /api/summarize/retry (200)."""
    success: bool = Field(default=True)
    summary: str = Field(description="Markdown summary produced for the note")
    note: NoteResponse = Field(description="Note after the summary was stored")


# ══════════════════════════════════════════════════════════════════════════
# Search
# ══════════════════════════════════════════════════════════════════════════


class SearchMatch(BaseModel):
    text: str = Field(description="Matched term, or the title for title matches")
    context: str = Field(description="Up to 50 characters around the match on its line")
    line_number: Optional[int] = Field(default=None, description="1-based line; null for title matches")


class SearchResult(BaseModel):
    note_id: uuid.UUID
    title: str
    created_at: datetime
    matches: List[SearchMatch] = Field(description="First 5 matches")
    match_count: int = Field(description="Total number of matches in this note")


class SearchResponse(BaseModel):
    results: List[SearchResult] = Field(description="Notes ordered by match_count, highest first")


# ══════════════════════════════════════════════════════════════════════════
# Errors & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "provider_api_error",
            "message": "groq API error: {\"error\": ...}",
            "details": {"provider": "groq", "status_code": 429},
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    llm_provider: str = Field(description="Value of LLM_PROVIDER at the time of the check")
    llm: str = Field(description="configured, missing_credential or unsupported_provider")
    uptime_seconds: float = Field(description="Seconds since service started")
