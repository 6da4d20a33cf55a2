"""
StudyNotes Backend: HTTP API Tests
====================================

Route handlers through the full middleware stack (ASGITransport). The
database dependency is replaced by a mock session and the services are
patched, so these tests cover status codes, headers and error bodies.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

from studynotes.database import get_db_session
from studynotes.exceptions import (
    EmptySummaryError,
    MissingCredentialError,
    NotFoundError,
    ProviderAPIError,
    RateLimitExceededError,
    UnsupportedProviderError,
    ValidationError,
)
from studynotes.main import app
from studynotes.middleware.rate_limit import RateLimitMiddleware
from studynotes.schemas.note import (
    NoteListResponse,
    NoteResponse,
    SearchMatch,
    SearchResult,
    SummarizeResponse,
)


@pytest.fixture(autouse=True)
def db_override(mock_db_session):
    async def _session():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _session
    yield mock_db_session
    app.dependency_overrides.clear()


def note_response(status="completed", summary="## 요약"):
    now = datetime.now(timezone.utc)
    return NoteResponse(
        id=uuid4(),
        title="1주차 강의",
        status=status,
        summary=summary,
        file_size=12,
        created_at=now,
        updated_at=now,
    )


def upload(filename="1주차 강의.md", content="# 운영체제".encode("utf-8")):
    return {"file": (filename, content, "text/markdown")}


class TestSummarizeRoutes:

    @pytest.mark.asyncio
    async def test_upload_returns_201(self, test_client):
        note = note_response()
        with patch("studynotes.routes.summarize.note_service") as service:
            service.create_and_summarize = AsyncMock(
                return_value=SummarizeResponse(summary=note.summary, note=note)
            )
            response = await test_client.post("/api/summarize", files=upload())

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["summary"] == "## 요약"
        assert body["note"]["id"] == str(note.id)
        assert "X-Request-ID" in response.headers
        kwargs = service.create_and_summarize.await_args.kwargs
        assert kwargs["filename"] == "1주차 강의.md"
        assert kwargs["content"] == "# 운영체제".encode("utf-8")

    @pytest.mark.asyncio
    async def test_upload_without_file_is_422(self, test_client):
        response = await test_client.post("/api/summarize")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_validation_error_is_400(self, test_client):
        with patch("studynotes.routes.summarize.note_service") as service:
            service.create_and_summarize = AsyncMock(
                side_effect=ValidationError(message="File type '.pdf' is not supported.", field="file")
            )
            response = await test_client.post("/api/summarize", files=upload("slides.pdf"))

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, code",
        [
            (MissingCredentialError(provider="groq", env_var="GROQ_API_KEY"), "missing_credential"),
            (UnsupportedProviderError("claude"), "unsupported_provider"),
            (ProviderAPIError(provider="groq", status_code=429, body="slow down"), "provider_api_error"),
            (EmptySummaryError(provider="gemini"), "empty_summary"),
        ],
    )
    async def test_llm_errors_are_503(self, test_client, error, code):
        with patch("studynotes.routes.summarize.note_service") as service:
            service.create_and_summarize = AsyncMock(side_effect=error)
            response = await test_client.post(
                "/api/summarize", files=upload(), headers={"X-Request-ID": "req12345"}
            )

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == code
        assert body["message"] == error.message
        assert body["request_id"] == "req12345"
        assert "body" not in body["details"]

    @pytest.mark.asyncio
    async def test_retry(self, test_client):
        note = note_response()
        with patch("studynotes.routes.summarize.note_service") as service:
            service.retry_summary = AsyncMock(
                return_value=SummarizeResponse(summary=note.summary, note=note)
            )
            response = await test_client.post(
                "/api/summarize/retry", json={"note_id": str(note.id)}
            )

        assert response.status_code == 200
        assert response.json()["note"]["status"] == "completed"
        assert service.retry_summary.await_args.kwargs["note_id"] == note.id

    @pytest.mark.asyncio
    async def test_retry_unknown_note_is_404(self, test_client):
        note_id = uuid4()
        with patch("studynotes.routes.summarize.note_service") as service:
            service.retry_summary = AsyncMock(
                side_effect=NotFoundError(resource="note", resource_id=str(note_id))
            )
            response = await test_client.post(
                "/api/summarize/retry", json={"note_id": str(note_id)}
            )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_retry_requires_uuid(self, test_client):
        response = await test_client.post("/api/summarize/retry", json={"note_id": "abc"})
        assert response.status_code == 422


class TestNotesRoutes:

    @pytest.mark.asyncio
    async def test_list_sets_total_count_header(self, test_client):
        with patch("studynotes.routes.notes.note_service") as service:
            service.list_notes = AsyncMock(
                return_value=NoteListResponse(notes=[], total_count=42, has_more=False)
            )
            response = await test_client.get("/api/notes?limit=5&status=failed")

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "42"
        kwargs = service.list_notes.await_args.kwargs
        assert kwargs["limit"] == 5
        assert kwargs["status"] == "failed"

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_status(self, test_client):
        response = await test_client.get("/api/notes?status=archived")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_note(self, test_client):
        note = note_response(status="failed", summary=None)
        with patch("studynotes.routes.notes.note_service") as service:
            service.get_note = AsyncMock(return_value=note)
            response = await test_client.get(f"/api/notes/{note.id}")

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert response.json()["summary"] is None

    @pytest.mark.asyncio
    async def test_delete_note(self, test_client):
        note_id = uuid4()
        with patch("studynotes.routes.notes.note_service") as service:
            service.delete_note = AsyncMock(return_value=None)
            response = await test_client.delete(f"/api/notes/{note_id}")

        assert response.status_code == 204
        assert response.content == b""
        assert service.delete_note.await_args.kwargs["note_id"] == note_id


class TestSearchRoute:

    @pytest.mark.asyncio
    async def test_search(self, test_client):
        result = SearchResult(
            note_id=uuid4(),
            title="운영체제",
            created_at=datetime.now(timezone.utc),
            matches=[SearchMatch(text="스레드", context="스레드 동기화", line_number=3)],
            match_count=1,
        )
        with patch("studynotes.routes.search.search_service") as service:
            service.search_notes = AsyncMock(return_value=[result])
            response = await test_client.get("/api/search", params={"q": "스레드"})

        assert response.status_code == 200
        body = response.json()
        assert body["results"][0]["match_count"] == 1
        assert body["results"][0]["matches"][0]["line_number"] == 3
        assert service.search_notes.await_args.kwargs["query"] == "스레드"

    @pytest.mark.asyncio
    async def test_search_without_query(self, test_client):
        with patch("studynotes.routes.search.search_service") as service:
            service.search_notes = AsyncMock(return_value=[])
            response = await test_client.get("/api/search")

        assert response.status_code == 200
        assert response.json() == {"results": []}


class TestHealthRoute:

    @pytest.mark.asyncio
    async def test_missing_credential_is_degraded(self, test_client, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        response = await test_client.get("/health")

        body = response.json()
        assert response.status_code == 200
        assert body["llm_provider"] == "openai"
        assert body["llm"] == "missing_credential"
        assert body["status"] in {"degraded", "unhealthy"}

    @pytest.mark.asyncio
    async def test_configured_provider(self, test_client, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        response = await test_client.get("/health")

        body = response.json()
        assert body["llm_provider"] == "groq"
        assert body["llm"] == "configured"

    @pytest.mark.asyncio
    async def test_empty_provider_reports_groq(self, test_client, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "")
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        response = await test_client.get("/health")

        body = response.json()
        assert body["llm_provider"] == "groq"
        assert body["llm"] == "configured"

    @pytest.mark.asyncio
    async def test_unsupported_provider(self, test_client, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "Claude")
        response = await test_client.get("/health")

        body = response.json()
        assert body["llm_provider"] == "Claude"
        assert body["llm"] == "unsupported_provider"


class TestRateLimit:

    def test_window_fills_then_rejects(self):
        limiter = RateLimitMiddleware(app=MagicMock())
        with patch("studynotes.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 3
            mock_settings.rate_limit_window = 60

            for i in range(3):
                limiter.check("10.0.0.1", 1000.0 + i)
            with pytest.raises(RateLimitExceededError) as exc_info:
                limiter.check("10.0.0.1", 1010.0)

            assert exc_info.value.retry_after == 51
            limiter.check("10.0.0.2", 1010.0)

    def test_old_requests_leave_the_window(self):
        limiter = RateLimitMiddleware(app=MagicMock())
        with patch("studynotes.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 2
            mock_settings.rate_limit_window = 60

            limiter.check("10.0.0.1", 1000.0)
            limiter.check("10.0.0.1", 1001.0)
            limiter.check("10.0.0.1", 1061.0)
