# Middleware package init
"""
StudyNotes Backend: Middleware Package
========================================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: summarization requests over quota never reach a provider
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: one access line per request, with the request ID and duration

Responses pass back through the chain in reverse, so the logging middleware
sees the final status code and the X-Request-ID header is set on every response.
"""
