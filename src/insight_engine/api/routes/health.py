"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from insight_engine.config import settings
from insight_engine.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    database: bool


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check() -> HealthResponse:
    """Is the API up? Also reports whether a real inference provider is configured."""
    from insight_engine import __version__

    return HealthResponse(
        status="healthy",
        version=__version__,
        components={"llm": settings.llm_provider.lower() != "stub"},
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Verifies the task store is reachable.",
)
async def readiness_check() -> ReadinessResponse:
    """Readiness check including the database."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from insight_engine.db.session import engine

    database_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            database_ok = True
    except SQLAlchemyError as e:
        logger.error("database_health_check_failed", error=str(e))

    return ReadinessResponse(ready=database_ok, database=database_ok)


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
    description="Simple liveness check for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    """Is the process alive?"""
    return {"status": "alive"}
