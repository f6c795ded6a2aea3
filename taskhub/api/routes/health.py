"""Health check routes."""

from fastapi import APIRouter
from sqlalchemy import text

from taskhub import __version__
from taskhub.api.dependencies import DbSession

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {
        "status": "healthy",
        "version": __version__,
    }


@router.get("/health/readiness")
async def readiness_check(db: DbSession):
    """Readiness probe: the database answers a trivial query."""
    await db.execute(text("SELECT 1"))
    return {
        "status": "ready",
    }
