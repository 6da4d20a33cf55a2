"""
StudyNotes Backend: Abstract Summarization Provider
=====================================================

What:  Base class defining the contract every LLM summarization adapter fulfils.
How:   Concrete providers inherit from SummarizationProvider and implement
       summarize(). Shared helpers cover credential checks and the JSON-over-HTTP
       round trip used by the httpx-based providers.
Who:   Instantiated per call by the summarizer dispatcher.
When:  Each time a note is summarized or re-summarized.

Contract:
    - summarize() takes the raw document text and returns non-empty Markdown.
    - A missing credential raises MissingCredentialError before any request.
    - A non-2xx answer or transport failure raises ProviderAPIError with the raw body.
    - A 2xx answer without text raises EmptySummaryError.
    - No retries, no caching, no state kept between calls.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from studynotes.config import LLMSettings
from studynotes.exceptions import MissingCredentialError, ProviderAPIError

logger = logging.getLogger(__name__)


class SummarizationProvider(ABC):
    """
    One hosted LLM API adapted to the `text -> Markdown summary` shape.

    Attributes:
        name:               Value of LLM_PROVIDER that selects this adapter
        credential_env_var: Environment variable holding the provider secret
    """

    name: str = ""
    credential_env_var: str = ""

    def __init__(
        self,
        llm_settings: LLMSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            llm_settings: Provider configuration read for this call.
            transport:    Optional httpx transport override (tests pass a MockTransport).
        """
        self.llm_settings = llm_settings
        self.transport = transport

    def require_credential(self) -> str:
        """Return the configured secret or raise MissingCredentialError."""
        value = getattr(self.llm_settings, self.credential_env_var.lower(), "") or ""
        value = value.strip()
        if not value:
            raise MissingCredentialError(provider=self.name, env_var=self.credential_env_var)
        return value

    def http_client(self) -> httpx.AsyncClient:
        """New AsyncClient for one call; the caller closes it with `async with`."""
        return httpx.AsyncClient(
            transport=self.transport,
            timeout=self.llm_settings.llm_timeout_seconds,
        )

    async def post_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: dict,
        model: str,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        POST a JSON payload and return the decoded JSON body.

        Raises:
            ProviderAPIError: non-2xx status, transport failure, or undecodable body.
        """
        try:
            response = await client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as e:
            logger.warning("%s request for model %s failed: %s", self.name, model, str(e))
            raise ProviderAPIError(
                provider=self.name,
                status_code=None,
                body=str(e) or type(e).__name__,
                model=model,
            ) from e

        if response.is_error:
            raise ProviderAPIError(
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
                model=model,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderAPIError(
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
                model=model,
                message=f"{self.name} API returned a non-JSON response",
            ) from e

    @abstractmethod
    async def summarize(self, text: str) -> str:
        """
        Summarize a full study document into Markdown.

        Args:
            text: Complete document body, sent without truncation.

        Returns:
            The provider's Markdown output, unmodified.
        """
        ...
