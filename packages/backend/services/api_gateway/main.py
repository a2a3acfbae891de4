"""
Main FastAPI application entry point for the file vault backend.
Serves vault security configuration and unlock endpoints.
"""

from datetime import datetime
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .health import router as health_router
from ...core.config import APIConfig
from ...core.vault.routes import router as vault_router, get_vault_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Connects the vault service to its record store before serving.
    """
    logger.info("Starting file vault backend...")
    try:
        get_vault_service()
        logger.info("Vault access service initialized")
    except ValueError as e:
        logger.error(f"Failed to initialize vault service: {e}")
        raise
    yield
    logger.info("File vault backend shutdown complete")

def create_app(use_lifespan: bool = True) -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="File Vault Backend",
        description="Vault storage with password, geofence and time locks",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan if use_lifespan else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=APIConfig.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(vault_router, prefix="/api")
    app.include_router(health_router)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred",
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    return app

app = create_app()

if __name__ == "__main__":
    # Development server
    uvicorn.run(
        "packages.backend.services.api_gateway.main:app",
        host=APIConfig.HOST,
        port=APIConfig.PORT,
        reload=True,
        log_level="info"
    )
