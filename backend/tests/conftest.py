"""
StudyNotes Backend: Test Configuration (conftest.py)
======================================================

Shared pytest fixtures for the whole suite.

Fixtures:
    ├── clean_llm_env (autouse): removes provider env vars so each test sets its own
    ├── mock_db_session: Mock async database session (no real DB needed)
    ├── temp_storage: Temporary directory for file operations
    ├── sample_note_data: Field values for a completed note
    ├── make_note: Builds Note instances with overridable fields
    ├── recording_transport: httpx.MockTransport that records every request
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import os
import tempfile

# Settings are read at import time, so the environment is prepared before
# anything from studynotes is imported.
_TEST_DIR = tempfile.mkdtemp(prefix="studynotes_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "storage")
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone  # noqa: E402
from typing import Callable, List  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402
from uuid import uuid4  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from studynotes.models.note import Note  # noqa: E402

LLM_ENV_VARS = (
    "LLM_PROVIDER",
    "GROQ_API_KEY",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "HUGGINGFACE_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_API_VERSION",
    "LLM_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_llm_env(monkeypatch):
    """Provider configuration comes only from what the test sets."""
    for name in LLM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        async def test_get_note(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
            result = await note_service.get_note(mock_db_session, note_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_note_data():
    now = datetime.now(timezone.utc)
    return {
        "id": uuid4(),
        "title": "1주차 강의",
        "file_path": "2026/10/18/test-uuid.md",
        "file_size": 42,
        "summary": "## 1. 개요\n\n- 핵심 개념",
        "status": "completed",
        "error_message": None,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def make_note(sample_note_data) -> Callable[..., Note]:
    def _make(**overrides) -> Note:
        fields = dict(sample_note_data)
        fields["id"] = uuid4()
        fields.update(overrides)
        return Note(**fields)

    return _make


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served, in order."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


@pytest.fixture
def recording_transport():
    """Factory: recording_transport(handler) → RecordingTransport."""
    return RecordingTransport


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from studynotes.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
