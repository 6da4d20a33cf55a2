"""
StudyNotes Backend: Full-Text Search over Stored Study Files
=============================================================

What:  Case-insensitive substring search across note titles and file contents.
How:   Loads every note (newest first), reads its file through StorageService,
       and collects per-line matches with a short context window.
Who:   Called by GET /api/search.

There is no index: each search reads every stored file. That is fine for a
personal notes collection and keeps the files as the single source of truth.
"""

import logging
from typing import List

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from studynotes.exceptions import DatabaseError, FileStorageError
from studynotes.models.note import Note
from studynotes.schemas.note import SearchMatch, SearchResult
from studynotes.services.storage_service import storage_service

logger = logging.getLogger(__name__)

CONTEXT_CHARS = 50
MAX_MATCHES_PER_NOTE = 5


def find_matches(title: str, content: str, term: str) -> List[SearchMatch]:
    """
    All matches of an already lower-cased term in a title and file body.

    A title hit comes first; then one match per line containing the term,
    with the text from 50 characters before to 50 after its first occurrence.
    """
    matches: List[SearchMatch] = []

    if term in title.lower():
        matches.append(SearchMatch(text=title, context=title))

    for index, line in enumerate(content.split("\n")):
        position = line.lower().find(term)
        if position == -1:
            continue
        start = max(0, position - CONTEXT_CHARS)
        end = min(len(line), position + len(term) + CONTEXT_CHARS)
        matches.append(
            SearchMatch(
                text=term,
                context=line[start:end].strip(),
                line_number=index + 1,
            )
        )

    return matches


class SearchService:

    async def search_notes(self, db: AsyncSession, query: str) -> List[SearchResult]:
        """
        Search every note for `query`.

        Returns:
            Results ordered by match_count (highest first); ties keep the
            newest-first order of the notes. Empty or blank queries return [].

        Raises:
            DatabaseError: the notes could not be listed.
        """
        term = (query or "").strip().lower()
        if not term:
            return []

        try:
            result = await db.execute(select(Note).order_by(desc(Note.created_at)))
            notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error loading notes for search: %s", str(e))
            raise DatabaseError(
                message="Could not load notes for search.",
                context={"error_type": type(e).__name__},
            )

        results: List[SearchResult] = []
        for note in notes:
            if not note.file_path:
                continue
            try:
                content = await storage_service.read_text(note.file_path)
            except FileStorageError as e:
                logger.warning("Skipping note %s in search: %s", note.id, e.message)
                continue

            matches = find_matches(note.title, content, term)
            if matches:
                results.append(
                    SearchResult(
                        note_id=note.id,
                        title=note.title,
                        created_at=note.created_at,
                        matches=matches[:MAX_MATCHES_PER_NOTE],
                        match_count=len(matches),
                    )
                )

        results.sort(key=lambda r: r.match_count, reverse=True)
        logger.info("Search matched %d of %d notes", len(results), len(notes))
        return results


search_service = SearchService()
