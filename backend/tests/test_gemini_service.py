"""
StudyNotes Backend: Gemini Helper Unit Tests
==============================================

Pure functions behind the Gemini fallback loop: "not found" detection and
response text extraction. The loop itself is covered in test_summarizer.py.
"""

import json

import pytest

from studynotes.config import LLMSettings
from studynotes.exceptions import ProviderAPIError
from studynotes.services.gemini_service import (
    GeminiService,
    extract_candidate_text,
    is_model_not_found,
)


def api_error(status_code, body):
    return ProviderAPIError(provider="gemini", status_code=status_code, body=body, model="m")


class TestIsModelNotFound:

    def test_status_404(self):
        assert is_model_not_found(api_error(404, "Not Found"))

    def test_error_code_404_in_body(self):
        body = json.dumps({"error": {"code": 404, "message": "model not found"}})
        assert is_model_not_found(api_error(400, body))

    @pytest.mark.parametrize(
        "status_code, body",
        [
            (400, json.dumps({"error": {"code": 400, "message": "bad request"}})),
            (401, json.dumps({"error": {"code": 401}})),
            (429, "Resource has been exhausted"),
            (500, "not json at all"),
            (403, json.dumps(["error", 404])),
            (None, "connection reset"),
        ],
    )
    def test_other_failures(self, status_code, body):
        assert not is_model_not_found(api_error(status_code, body))


class TestExtractCandidateText:

    def test_first_part_text(self):
        data = {"candidates": [{"content": {"parts": [{"text": "## 요약"}, {"text": "ignored"}]}}]}
        assert extract_candidate_text(data) == "## 요약"

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"candidates": []},
            {"candidates": [{"finishReason": "SAFETY"}]},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
            None,
            [],
        ],
    )
    def test_missing_text(self, data):
        assert extract_candidate_text(data) == ""


class TestEndpoint:

    def test_default_version(self):
        service = GeminiService(LLMSettings(gemini_api_key="k"))
        assert service.endpoint("gemini-2.0-flash") == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
        )

    def test_blank_version_falls_back_to_v1beta(self):
        service = GeminiService(LLMSettings(gemini_api_key="k", gemini_api_version=" "))
        assert "/v1beta/models/" in service.endpoint("gemini-1.5-pro")
