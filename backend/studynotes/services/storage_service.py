"""
StudyNotes Backend: Study File Storage Service
================================================

What:  Validates, stores, reads and deletes uploaded study files (.txt / .md).
How:   Checks extension, size and UTF-8 decodability, then writes the bytes to a
       date-organized directory under a UUID filename.
Who:   Called by NoteService (upload, summarize, delete) and SearchService (read).

Directory Structure:
    storage/
    └── 2026/
        └── 10/
            └── 18/
                ├── 1f0c...e2.md
                └── 9a7b...41.txt

Paths stored in the database are relative to the storage root and are
resolved back through _resolve(), which refuses anything outside the root.
"""

import logging
import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from studynotes.config import settings
from studynotes.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".txt", ".md"}

_TITLE_SUFFIX = re.compile(r"\.(txt|md)$", re.IGNORECASE)


def title_from_filename(filename: str) -> str:
    """'1주차 강의.md' → '1주차 강의'."""
    return _TITLE_SUFFIX.sub("", filename or "").strip()


class StorageService:
    """
    Local-disk blob store for study files.

    Args:
        storage_root: Override the default storage path (used in tests).
                      If None, uses settings.storage_root.
    """

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("StorageService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if the extension is not .txt or .md.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks Content-Length (when the client sent one) and the real byte count.

        Raises:
            ValidationError for empty files and files above settings.max_file_size.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size == 0:
            raise ValidationError(
                message="The uploaded file is empty.",
                field="file",
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_encoding(self, content: bytes) -> str:
        """
        Decode the upload as UTF-8 (a leading BOM is accepted and dropped).

        Returns: The decoded text.
        Raises:  ValidationError for binary or non-UTF-8 content.
        """
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError(
                message="The file must be UTF-8 encoded text or Markdown.",
                field="file",
                context={"position": e.start},
            ) from e

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """YYYY/MM/DD/<uuid><ext>; returns (absolute_path, relative_path)."""
        now = datetime.now(timezone.utc)
        relative_path = f"{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def _resolve(self, relative_path: str) -> Path:
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise FileStorageError(
                message="Invalid file path",
                context={"path": relative_path},
            )
        return full_path

    async def store(self, content: bytes, extension: str) -> str:
        """
        Write validated file content to disk.

        Returns: Relative path for the database.
        Raises:  FileStorageError if directory creation or the write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return relative_path

    async def read_text(self, relative_path: str) -> str:
        """
        Read a stored study file as text.

        Raises:
            FileStorageError: file missing, unreadable, or outside the storage root.
        """
        full_path = self._resolve(relative_path)
        try:
            async with aiofiles.open(full_path, "r", encoding="utf-8-sig") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read file %s: %s", relative_path, str(e))
            raise FileStorageError(
                message="Failed to download file",
                context={"path": relative_path, "error": str(e)},
            )

    async def delete(self, relative_path: str) -> None:
        """
        Remove a stored file. Best effort: missing files and OS errors are
        logged, never raised.
        """
        try:
            path = self._resolve(relative_path)
            if path.exists():
                os.remove(path)
                logger.info("Deleted file: %s", relative_path)
            else:
                logger.debug("Delete: file already gone: %s", relative_path)
        except (OSError, FileStorageError) as e:
            logger.warning("Failed to delete file %s: %s", relative_path, str(e))

    def validate_upload(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Extension → size → encoding. Cheapest checks run first.

        Returns: Normalized extension of the accepted file.
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_encoding(content)
        return ext

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """Returns: Relative path of the stored file."""
        ext = self.validate_upload(filename, content, content_length)
        return await self.store(content, ext)


storage_service = StorageService()
