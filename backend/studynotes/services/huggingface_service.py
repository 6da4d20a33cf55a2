"""
StudyNotes Backend: Hugging Face Summarization Provider
=========================================================

What:  Summaries through the hosted Inference API (facebook/bart-large-cnn).
How:   httpx POST with a bearer token. The endpoint takes a single `inputs`
       string, so the system prompt is prepended as plain text.
Note:  The answer is either `[{"summary_text": ...}]` or `{"summary_text": ...}`.
"""

import logging
import time

from studynotes.exceptions import EmptySummaryError
from studynotes.services.llm_base import SummarizationProvider
from studynotes.services.prompts import build_flat_prompt

logger = logging.getLogger(__name__)

HUGGINGFACE_MODEL = "facebook/bart-large-cnn"
HUGGINGFACE_INFERENCE_URL = "https://api-inference.huggingface.co/models"


def extract_summary_text(data) -> str:
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return ""
    text = data.get("summary_text")
    return text if isinstance(text, str) else ""


class HuggingFaceService(SummarizationProvider):
    name = "huggingface"
    credential_env_var = "HUGGINGFACE_API_KEY"

    async def summarize(self, text: str) -> str:
        api_key = self.require_credential()
        start_time = time.time()

        async with self.http_client() as client:
            data = await self.post_json(
                client,
                f"{HUGGINGFACE_INFERENCE_URL}/{HUGGINGFACE_MODEL}",
                payload={
                    "inputs": build_flat_prompt(text),
                    "parameters": {"max_length": 500, "min_length": 100},
                },
                model=HUGGINGFACE_MODEL,
                headers={"Authorization": f"Bearer {api_key}"},
            )

        summary = extract_summary_text(data)
        if not summary:
            raise EmptySummaryError(provider=self.name, model=HUGGINGFACE_MODEL)

        logger.info(
            "Hugging Face summary completed in %.0fms with %s (%d chars)",
            (time.time() - start_time) * 1000,
            HUGGINGFACE_MODEL,
            len(summary),
        )
        return summary
