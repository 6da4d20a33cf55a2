"""
StudyNotes Backend: Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database and the LLM provider configuration, returns status.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   Database reachable and the selected provider has its credential
    - degraded:  Database reachable but summarization would fail fast
                 (unknown LLM_PROVIDER or missing API key)
    - unhealthy: Database unreachable

The provider check is configuration only. Calling a paid LLM API every
10-30 seconds from a probe would burn quota.
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from studynotes import __version__
from studynotes.config import get_llm_settings
from studynotes.database import engine
from studynotes.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def llm_config_status() -> tuple[str, str]:
    """(provider as configured, configured | missing_credential | unsupported_provider)."""
    llm = get_llm_settings()
    if llm.credential_env_var() is None:
        return llm.llm_provider, "unsupported_provider"
    if not llm.credential():
        return llm.provider_name, "missing_credential"
    return llm.provider_name, "configured"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend service and its dependencies. "
        "Used by Docker health checks and load balancers to determine if the service "
        "can handle traffic."
    ),
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check LLM configuration ───────────────────────────────────────────
    provider, llm_status = llm_config_status()
    if llm_status != "configured" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        llm_provider=provider,
        llm=llm_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
