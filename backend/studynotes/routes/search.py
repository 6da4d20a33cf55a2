"""
StudyNotes Backend: Search Route Handler
==========================================

What:  GET /api/search?q=term, full-text search over titles and file contents.
Who:   Called by the frontend search bar.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from studynotes.database import get_db_session
from studynotes.schemas.note import ErrorResponse, SearchResponse
from studynotes.services.search_service import search_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        200: {"description": "Matching notes, most matches first", "model": SearchResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Search notes",
    description=(
        "Case-insensitive substring search over note titles and the contents of "
        "their stored files. Each result lists up to 5 matches with surrounding "
        "context and the total match count. An empty query returns no results."
    ),
)
async def search_notes(
    q: str = Query(default="", description="Search term"),
    db: AsyncSession = Depends(get_db_session),
) -> SearchResponse:
    results = await search_service.search_notes(db=db, query=q)
    return SearchResponse(results=results)
