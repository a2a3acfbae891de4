"""
Health check endpoints for the API gateway.
Reports whether the vault record store is reachable.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from datetime import datetime
import logging

from ...core.vault.routes import get_vault_service

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
async def health_check():
    """
    Health check including the vault record store.
    Used by monitoring systems for comprehensive status.
    """
    health_status = {
        "service": "file_vault_backend",
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": "1.0.0",
        "dependencies": {}
    }

    try:
        service = get_vault_service()
        store = service.store
        # Simple query to test connection
        store.supabase.table(store.table).select("id").limit(1).execute()
        health_status["dependencies"]["supabase"] = {"status": "healthy"}
    except Exception as e:
        logger.warning(f"Record store health check failed: {e}")
        health_status["dependencies"]["supabase"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "degraded"

    return JSONResponse(content=health_status, status_code=200)

@router.get("/health/ready")
async def readiness_check():
    """Kubernetes readiness probe endpoint."""
    return {"status": "ready"}

@router.get("/health/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint."""
    return {"status": "alive"}
