"""
StudyNotes Backend: Summarization Client Models
=================================================

What:  Input and output values of the summarization client.
Who:   Built by NoteService, consumed by Summarizer.summarize().

Both are transient: created for one call and discarded afterwards.
"""

from typing import Optional

from pydantic import BaseModel, Field


class SummarizeRequest(BaseModel):
    text: str = Field(description="Full document body; sent without truncation")
    title: Optional[str] = Field(
        default=None,
        description="Note title; carried for logging, not part of the prompt",
    )


class SummarizeResult(BaseModel):
    summary: str = Field(description="Markdown summary exactly as the provider returned it")
