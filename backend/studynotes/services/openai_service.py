"""
StudyNotes Backend: OpenAI Summarization Provider
===================================================

What:  Summaries through the official `openai` SDK (gpt-4o-mini).
How:   AsyncOpenAI client built per call with SDK retries disabled, so a failed
       call surfaces once as ProviderAPIError like every other provider.
"""

import logging
import time

import httpx
import openai
from openai import AsyncOpenAI

from studynotes.exceptions import EmptySummaryError, ProviderAPIError
from studynotes.services.llm_base import SummarizationProvider
from studynotes.services.prompts import build_messages

logger = logging.getLogger(__name__)

OPENAI_MODEL = "gpt-4o-mini"


class OpenAIService(SummarizationProvider):
    """OpenAI chat completions (gpt-4o-mini, temperature 0.7, 4096 output tokens)."""

    name = "openai"
    credential_env_var = "OPENAI_API_KEY"

    def _client(self, api_key: str) -> AsyncOpenAI:
        http_client = None
        if self.transport is not None:
            http_client = httpx.AsyncClient(transport=self.transport)
        return AsyncOpenAI(
            api_key=api_key,
            max_retries=0,
            timeout=self.llm_settings.llm_timeout_seconds,
            http_client=http_client,
        )

    async def summarize(self, text: str) -> str:
        api_key = self.require_credential()
        start_time = time.time()

        try:
            async with self._client(api_key) as client:
                completion = await client.chat.completions.create(
                    model=OPENAI_MODEL,
                    messages=build_messages(text),
                    temperature=0.7,
                    max_tokens=4096,
                )
        except openai.APIStatusError as e:
            raise ProviderAPIError(
                provider=self.name,
                status_code=e.status_code,
                body=e.response.text,
                model=OPENAI_MODEL,
            ) from e
        except openai.APIConnectionError as e:
            logger.warning("OpenAI request failed: %s", str(e))
            raise ProviderAPIError(
                provider=self.name,
                status_code=None,
                body=str(e),
                model=OPENAI_MODEL,
            ) from e
        except openai.OpenAIError as e:
            logger.warning("OpenAI client error: %s", str(e))
            raise ProviderAPIError(
                provider=self.name,
                status_code=None,
                body=str(e),
                model=OPENAI_MODEL,
            ) from e

        summary = ""
        if completion.choices:
            summary = completion.choices[0].message.content or ""
        if not summary:
            raise EmptySummaryError(provider=self.name, model=OPENAI_MODEL)

        logger.info(
            "OpenAI summary completed in %.0fms with %s (%d chars)",
            (time.time() - start_time) * 1000,
            OPENAI_MODEL,
            len(summary),
        )
        return summary
