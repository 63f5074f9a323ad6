"""Health check endpoints."""
from fastapi import APIRouter
import logging

from ..core.config import settings
from ..core.database import health_check_db
from ..services.chat.connection_manager import connection_manager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])

@router.get("/")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": "Portal Chat API",
        "version": settings.app_version,
        "live_sessions": len(connection_manager.active_connections),
    }

@router.get("/db-health")
async def database_health():
    """Database connectivity check"""
    db_healthy = await health_check_db()
    if not db_healthy:
        logger.warning("Database health check reported unhealthy")
    return {
        "status": "healthy" if db_healthy else "unhealthy",
        "database": "reachable" if db_healthy else "unreachable",
    }
