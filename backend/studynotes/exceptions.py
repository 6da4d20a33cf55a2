"""
StudyNotes Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right HTTP status codes.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    StudyNotesError (base)
    ├── ValidationError               → 400 Bad Request
    ├── NotFoundError                 → 404 Not Found
    ├── FileStorageError              → 500 Internal Server Error
    ├── DatabaseError                 → 500 Internal Server Error
    ├── RateLimitExceededError        → 429 Too Many Requests
    └── LLMServiceError               → 503 Service Unavailable
        ├── MissingCredentialError    (selected provider has no key configured)
        ├── UnsupportedProviderError  (LLM_PROVIDER names no known adapter)
        ├── ProviderAPIError          (provider answered non-2xx or was unreachable)
        │   └── ModelsExhaustedError  (every Gemini candidate answered "not found")
        └── EmptySummaryError         (2xx answer without usable text)
"""

from typing import Any, Dict, List, Optional


class StudyNotesError(Exception):
    """
    Base exception for all StudyNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StudyNotesError):
    """
    Raised when client input fails validation.

    When:    Wrong file extension, size exceeded, empty or non-UTF-8 upload.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(StudyNotesError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; the service layer converts
    that None into this exception so routes stay free of lookups.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(StudyNotesError):
    """Raised when reading, writing or locating a stored study file fails."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(StudyNotesError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type is kept in context for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(StudyNotesError):
    """Raised when a client exceeds the per-IP request rate limit."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


# ══════════════════════════════════════════════════════════════════════════
# Summarization errors
# ══════════════════════════════════════════════════════════════════════════


class LLMServiceError(StudyNotesError):
    """
    Base for every failure of the summarization client.

    HTTP:    503 Service Unavailable
    Callers that only care whether a summary was produced catch this class;
    the subclasses exist for diagnostics and tests.
    """

    error_code = "llm_service_error"

    def __init__(
        self,
        message: str = "The summarization service is temporarily unavailable",
        provider: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if provider:
            ctx["provider"] = provider
        super().__init__(message=message, context=ctx)
        self.provider = provider


class MissingCredentialError(LLMServiceError):
    """The selected provider's secret is not configured. Raised before any request."""

    error_code = "missing_credential"

    def __init__(self, provider: str, env_var: str):
        super().__init__(
            message=f"{env_var} not configured",
            provider=provider,
            context={"env_var": env_var},
        )
        self.env_var = env_var


class UnsupportedProviderError(LLMServiceError):
    """LLM_PROVIDER matches none of the known adapters."""

    error_code = "unsupported_provider"

    def __init__(self, provider: str):
        super().__init__(
            message=f"Unsupported LLM provider: {provider}",
            context={"requested_provider": provider},
        )
        self.requested_provider = provider


class ProviderAPIError(LLMServiceError):
    """
    The provider answered with a non-success status, or could not be reached.

    Attributes:
        status_code: HTTP status of the provider response (None for transport failures)
        body:        Raw response text, kept verbatim for diagnostics
        model:       Model identifier the request was made for
    """

    error_code = "provider_api_error"

    def __init__(
        self,
        provider: str,
        status_code: Optional[int],
        body: str,
        model: Optional[str] = None,
        message: Optional[str] = None,
    ):
        ctx: Dict[str, Any] = {"status_code": status_code, "body": body}
        if model:
            ctx["model"] = model
        super().__init__(
            message=message or f"{provider} API error: {body}",
            provider=provider,
            context=ctx,
        )
        self.status_code = status_code
        self.body = body
        self.model = model


class ModelsExhaustedError(ProviderAPIError):
    """Every fallback model answered "not found"; wraps the last of those errors."""

    def __init__(self, provider: str, models_tried: List[str], last_error: ProviderAPIError):
        super().__init__(
            provider=provider,
            status_code=last_error.status_code,
            body=last_error.body,
            model=last_error.model,
            message=(
                f"{provider} API error: all models failed ({', '.join(models_tried)}). "
                f"Last error: {last_error.body}"
            ),
        )
        self.context["models_tried"] = list(models_tried)
        self.models_tried = list(models_tried)
        self.last_error = last_error


class EmptySummaryError(LLMServiceError):
    """The provider answered 2xx but the response held no summary text."""

    error_code = "empty_summary"

    def __init__(self, provider: str, model: Optional[str] = None):
        ctx = {"model": model} if model else None
        super().__init__(
            message=f"Failed to generate summary from {provider}",
            provider=provider,
            context=ctx,
        )
        self.model = model
