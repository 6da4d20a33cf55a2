"""
StudyNotes Backend: Summarization Client (Provider Dispatcher)
================================================================

What:  Turns a study document into a Markdown summary through one of four LLM APIs.
How:   Reads LLM_PROVIDER at call time, picks the matching adapter, delegates once.
Who:   Called by NoteService for uploads and retries.
When:  After the note's file has been read from storage.

Providers:
    groq         GroqService         (default)
    openai       OpenAIService
    gemini       GeminiService       (model fallback on "not found")
    huggingface  HuggingFaceService

Propagation:
    Every failure is an LLMServiceError subclass and reaches the caller as-is.
    Nothing here retries, caches, or fans out to a second provider.
"""

import logging
import uuid
from typing import Dict, Optional, Type

import httpx

from studynotes.config import LLMSettings, get_llm_settings
from studynotes.exceptions import LLMServiceError, UnsupportedProviderError
from studynotes.schemas.summary import SummarizeRequest, SummarizeResult
from studynotes.services.gemini_service import GeminiService
from studynotes.services.groq_service import GroqService
from studynotes.services.huggingface_service import HuggingFaceService
from studynotes.services.llm_base import SummarizationProvider
from studynotes.services.openai_service import OpenAIService

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[SummarizationProvider]] = {
    GroqService.name: GroqService,
    OpenAIService.name: OpenAIService,
    GeminiService.name: GeminiService,
    HuggingFaceService.name: HuggingFaceService,
}


class Summarizer:
    """
    Stateless dispatcher over the provider adapters.

    Args:
        transport: Optional httpx transport handed to every provider.
                   Production leaves it None; tests pass httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    def get_provider(self, llm_settings: Optional[LLMSettings] = None) -> SummarizationProvider:
        """
        Resolve the configured provider adapter.

        Raises:
            UnsupportedProviderError: LLM_PROVIDER names none of the known adapters.
        """
        llm_settings = llm_settings or get_llm_settings()
        provider_cls = PROVIDERS.get(llm_settings.provider_name)
        if provider_cls is None:
            raise UnsupportedProviderError(llm_settings.llm_provider)
        return provider_cls(llm_settings, transport=self.transport)

    async def summarize(self, request: SummarizeRequest) -> SummarizeResult:
        """
        Summarize one document.

        Returns:
            SummarizeResult with the provider's Markdown, unmodified.

        Raises:
            UnsupportedProviderError, MissingCredentialError: before any network call.
            ProviderAPIError, EmptySummaryError: from the provider call.
        """
        request_id = str(uuid.uuid4())[:8]
        provider = self.get_provider()

        logger.info(
            "[%s] Summarizing %d chars with provider=%s",
            request_id,
            len(request.text),
            provider.name,
        )
        try:
            summary = await provider.summarize(request.text)
        except LLMServiceError as e:
            logger.warning("[%s] %s summarization failed: %s", request_id, provider.name, e.message)
            raise

        return SummarizeResult(summary=summary)


async def summarize_text(text: str, title: Optional[str] = None) -> SummarizeResult:
    """Module-level shortcut: summarize with the shared dispatcher."""
    return await summarizer.summarize(SummarizeRequest(text=text, title=title))


summarizer = Summarizer()
