"""
StudyNotes Backend: Groq Summarization Provider
=================================================

What:  Default provider. One POST to Groq's OpenAI-compatible chat-completions API.
How:   httpx AsyncClient, bearer token from GROQ_API_KEY, fixed model.
"""

import logging
import time

from studynotes.exceptions import EmptySummaryError
from studynotes.services.llm_base import SummarizationProvider
from studynotes.services.prompts import build_messages

logger = logging.getLogger(__name__)

GROQ_CHAT_COMPLETIONS_URL = "https://api.groq.com/openai/v1/chat/completions"
GROQ_MODEL = "llama-3.3-70b-versatile"


class GroqService(SummarizationProvider):
    """Groq chat completions (llama-3.3-70b-versatile, temperature 0.7, 8192 output tokens)."""

    name = "groq"
    credential_env_var = "GROQ_API_KEY"

    async def summarize(self, text: str) -> str:
        api_key = self.require_credential()
        start_time = time.time()

        async with self.http_client() as client:
            data = await self.post_json(
                client,
                GROQ_CHAT_COMPLETIONS_URL,
                payload={
                    "model": GROQ_MODEL,
                    "messages": build_messages(text),
                    "temperature": 0.7,
                    "max_tokens": 8192,
                },
                model=GROQ_MODEL,
                headers={"Authorization": f"Bearer {api_key}"},
            )

        summary = extract_chat_content(data)
        if not summary:
            raise EmptySummaryError(provider=self.name, model=GROQ_MODEL)

        logger.info(
            "Groq summary completed in %.0fms with %s (%d chars)",
            (time.time() - start_time) * 1000,
            GROQ_MODEL,
            len(summary),
        )
        return summary


def extract_chat_content(data) -> str:
    """`choices[0].message.content` of a chat-completions body, or "" when absent."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""
