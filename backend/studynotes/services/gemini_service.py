"""
StudyNotes Backend: Google Gemini Summarization Provider
==========================================================

What:  Summaries through the Gemini generateContent REST API, with model fallback.
How:   httpx POST per candidate model, API key as the `key` query parameter,
       system prompt and document flattened into a single text part.
Who:   Selected by LLM_PROVIDER=gemini.

Model fallback:
    The hosted Gemini catalog changes over time and a configured model can
    disappear without notice. Candidates are tried one at a time:

        GEMINI_MODEL (or the first catalog entry)
          → remaining catalog entries, in declared order, duplicates skipped

    "Not found" (HTTP 404, or an error body with error.code 404)
        → remember it, try the next candidate
    Any other failure (401, 429, 400, empty summary, transport error)
        → raise immediately; no further candidates
    First non-empty summary
        → returned immediately
    Every candidate "not found"
        → ModelsExhaustedError wrapping the last not-found error

Attempts never overlap; exactly one request is in flight at a time.
"""

import json
import logging
import time
from typing import List, Optional

from studynotes.exceptions import (
    EmptySummaryError,
    ModelsExhaustedError,
    ProviderAPIError,
)
from studynotes.services.llm_base import SummarizationProvider
from studynotes.services.prompts import build_flat_prompt

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"

# Declared fallback order; the first entry is the default primary model
GEMINI_MODELS = [
    "gemini-2.5-flash",
    "gemini-1.5-flash",
    "gemini-2.0-flash",
    "gemini-1.5-pro",
]


def candidate_models(primary: Optional[str] = None) -> List[str]:
    """Primary model first, then the catalog in declared order without duplicates."""
    first = (primary or "").strip() or GEMINI_MODELS[0]
    ordered = [first]
    for model in GEMINI_MODELS:
        if model not in ordered:
            ordered.append(model)
    return ordered


def is_model_not_found(error: ProviderAPIError) -> bool:
    """True for Gemini's "model unavailable" answers, detected by status or body code."""
    if error.status_code == 404:
        return True
    try:
        payload = json.loads(error.body)
    except (TypeError, ValueError):
        return False
    if not isinstance(payload, dict):
        return False
    detail = payload.get("error")
    return isinstance(detail, dict) and detail.get("code") == 404


def extract_candidate_text(data) -> str:
    """`candidates[0].content.parts[0].text`, or "" when any level is missing."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


class GeminiService(SummarizationProvider):
    """Gemini generateContent (temperature 0.7, 8192 output tokens) with model fallback."""

    name = "gemini"
    credential_env_var = "GEMINI_API_KEY"

    def endpoint(self, model: str) -> str:
        version = self.llm_settings.gemini_api_version.strip() or "v1beta"
        return f"{GEMINI_BASE_URL}/{version}/models/{model}:generateContent"

    async def summarize(self, text: str) -> str:
        api_key = self.require_credential()
        models = candidate_models(self.llm_settings.gemini_model)
        payload = {
            "contents": [{"parts": [{"text": build_flat_prompt(text)}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": 8192},
        }

        last_error: Optional[ProviderAPIError] = None
        tried: List[str] = []

        async with self.http_client() as client:
            for model in models:
                tried.append(model)
                start_time = time.time()
                try:
                    data = await self.post_json(
                        client,
                        self.endpoint(model),
                        payload=payload,
                        model=model,
                        params={"key": api_key},
                    )
                except ProviderAPIError as e:
                    if not is_model_not_found(e):
                        raise
                    logger.warning("Gemini model %s not found, trying next candidate", model)
                    last_error = e
                    continue

                summary = extract_candidate_text(data)
                if not summary:
                    raise EmptySummaryError(provider=self.name, model=model)

                logger.info(
                    "Gemini summary completed in %.0fms with %s (%d chars, attempt %d/%d)",
                    (time.time() - start_time) * 1000,
                    model,
                    len(summary),
                    len(tried),
                    len(models),
                )
                return summary

        logger.error("Gemini: no candidate model available (tried %s)", ", ".join(tried))
        raise ModelsExhaustedError(provider=self.name, models_tried=tried, last_error=last_error)
