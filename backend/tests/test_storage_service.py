"""
StudyNotes Backend: Storage Service Unit Tests
================================================

Upload validation (extension, size, encoding) is the boundary between user
input and the LLM providers, so it is tested thoroughly. Storage tests use a
temporary directory per test.

Test Strategy:
    ✅ Allowed extensions (.txt, .md), case-insensitive
    ✅ Rejected extensions (.pdf, .docx, .png, none)
    ✅ Size limits and empty files
    ✅ UTF-8 validation (BOM accepted, binary rejected)
    ✅ Store → read → delete round trip on disk
    ✅ Paths outside the storage root are refused
"""

import re

import pytest

from studynotes.config import settings
from studynotes.exceptions import FileStorageError, ValidationError
from studynotes.services.storage_service import StorageService, title_from_filename


class TestUploadValidation:

    def setup_method(self):
        self.service = StorageService()

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["notes.txt", "lecture.md", "NOTES.TXT", "강의.Md"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename) in {".txt", ".md"}

    @pytest.mark.parametrize("filename", ["slides.pdf", "essay.docx", "scan.png", "noextension", "md"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(None, 1000)

    def test_size_at_limit(self):
        self.service.validate_size(settings.max_file_size, settings.max_file_size)

    def test_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(None, settings.max_file_size + 1)

    def test_reported_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(settings.max_file_size + 1, 10)

    def test_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)

    # ── Encoding Validation ───────────────────────────────────────────────

    def test_utf8_korean(self):
        assert self.service.validate_encoding("운영체제 요약".encode("utf-8")) == "운영체제 요약"

    def test_bom_is_dropped(self):
        assert self.service.validate_encoding(b"\xef\xbb\xbfhello") == "hello"

    @pytest.mark.parametrize(
        "content",
        [
            b"\x89PNG\r\n\x1a\n\x00\x00",
            "한글".encode("cp949"),
        ],
    )
    def test_non_utf8_rejected(self, content):
        with pytest.raises(ValidationError, match="UTF-8"):
            self.service.validate_encoding(content)

    def test_validate_upload_returns_extension(self):
        assert self.service.validate_upload("Week1.MD", b"# title", 7) == ".md"

    def test_validate_upload_checks_extension_first(self):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_upload("empty.pdf", b"", 0)


class TestTitleFromFilename:

    @pytest.mark.parametrize(
        "filename, title",
        [
            ("1주차 강의.md", "1주차 강의"),
            ("notes.TXT", "notes"),
            ("  spaced.md  ", "spaced.md"),
            ("archive.md.txt", "archive.md"),
            ("README", "README"),
            ("", ""),
        ],
    )
    def test_strips_extension(self, filename, title):
        assert title_from_filename(filename) == title


class TestStorage:

    @pytest.fixture(autouse=True)
    def service(self, temp_storage):
        self.service = StorageService(storage_root=temp_storage)

    @pytest.mark.asyncio
    async def test_store_uses_date_directories(self, temp_storage):
        relative_path = await self.service.store("내용".encode("utf-8"), ".md")

        assert re.fullmatch(r"\d{4}/\d{2}/\d{2}/[0-9a-f-]{36}\.md", relative_path)
        assert (self.service.storage_root / relative_path).read_bytes() == "내용".encode("utf-8")

    @pytest.mark.asyncio
    async def test_validate_and_store_then_read(self):
        content = "\ufeff# 운영체제\n\n프로세스와 스레드".encode("utf-8")

        relative_path = await self.service.validate_and_store("os.md", content, len(content))
        text = await self.service.read_text(relative_path)

        assert text == "# 운영체제\n\n프로세스와 스레드"

    @pytest.mark.asyncio
    async def test_validate_and_store_rejects_before_writing(self):
        with pytest.raises(ValidationError):
            await self.service.validate_and_store("bad.txt", b"\xff\xfe\x00", 3)

        assert list(self.service.storage_root.rglob("*.*")) == []

    @pytest.mark.asyncio
    async def test_read_missing_file(self):
        with pytest.raises(FileStorageError, match="Failed to download file"):
            await self.service.read_text("2026/01/01/missing.md")

    @pytest.mark.asyncio
    async def test_read_outside_root_refused(self):
        with pytest.raises(FileStorageError, match="Invalid file path"):
            await self.service.read_text("../../etc/passwd")

    # ── Cleanup ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_delete_removes_file(self):
        relative_path = await self.service.store(b"bye", ".txt")

        await self.service.delete(relative_path)

        assert not (self.service.storage_root / relative_path).exists()

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_quiet(self):
        await self.service.delete("2026/01/01/nonexistent.txt")

    @pytest.mark.asyncio
    async def test_delete_outside_root_is_quiet(self, tmp_path):
        outside = tmp_path / "keep.txt"
        outside.write_text("keep")

        await self.service.delete("../keep.txt")

        assert outside.exists()
