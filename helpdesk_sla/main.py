"""
Helpdesk SLA Engine - Main Application
======================================

SLA computation service for the helpdesk ticketing system.

Modules:
- SLA: business-hours calendar, status periods, SLA clocks and target resolution

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects and pure SLA logic
- Infrastructure: YAML configuration with hot reload
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from helpdesk_sla.config import settings
from helpdesk_sla.core import ApplicationException

# SLA Module
from helpdesk_sla.sla.application import SLAService
from helpdesk_sla.sla.infrastructure import SLAConfigManager, YAMLConfigProvider
from helpdesk_sla.sla.interfaces import sla_router

# Shared
from helpdesk_sla.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler
)
from helpdesk_sla.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load SLA configuration (unless a service was injected)
    3. Start watching the configuration file

    SHUTDOWN:
    1. Stop config watcher
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment, settings.app_name)
    logger.info("Starting SLA Service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    config_manager = None
    if getattr(app.state, "sla_service", None) is None:
        logger.info("Loading SLA configuration", extra={"path": str(settings.sla_config_path)})
        config_manager = SLAConfigManager(settings)
        config_manager.load(settings.sla_config_path)
        if settings.sla_config_watch:
            config_manager.start_watching()
        app.state.sla_service = SLAService(YAMLConfigProvider(config_manager))

    app.state.sla_config_manager = config_manager
    logger.info("SLA Service started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down SLA Service")
    if config_manager:
        config_manager.stop_watching()
    logger.info("SLA Service shutdown complete")


def create_app(sla_service: Optional[SLAService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        sla_service: Pre-built service; when given, no configuration file is read
    """
    app = FastAPI(
        title="Helpdesk SLA API",
        description="""
    ## SLA Computation for the Helpdesk

    Computes first-response and resolution SLA status for tickets, counting
    only business hours and honouring pause statuses.

    **Endpoints:**
    - `POST /sla/evaluate` - SLA status of one ticket
    - `POST /sla/evaluate/batch` - SLA status of several tickets at one instant
    - `POST /sla/resolve` - SLA target for a company / department / priority
    - `POST /sla/business-time/add` - Project a deadline in business hours
    - `POST /sla/business-time/between` - Business hours between two instants
    - `GET /sla/config` - Active configuration summary

    **Default fallback targets (business hours, response / resolution):**

    | Priority | Response | Resolution |
    |----------|----------|------------|
    | Critical | 1        | 4          |
    | High     | 4        | 8          |
    | Medium   | 8        | 24         |
    | Low      | 24       | 48         |
    """,
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.sla_service = sla_service
    app.state.settings = settings

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Custom Middleware (from shared) ===
    # Added last runs first: the correlation id must exist before logging
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # === Include Module Routers ===
    app.include_router(sla_router)

    # === Health Check Endpoint ===

    @app.get("/health", tags=["Health"], responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "version": "1.0.0",
                        "environment": "development",
                        "checks": {
                            "sla_config": "loaded",
                            "config_watcher": "running"
                        }
                    }
                }
            }
        }
    })
    async def health_check(request: Request):
        """
        Health check endpoint for load balancers and orchestrators.

        Returns service health status including:
        - SLA configuration status
        - Config watcher state
        """
        manager = getattr(request.app.state, "sla_config_manager", None)
        service = getattr(request.app.state, "sla_service", None)
        checks = {
            "sla_config": "loaded" if service is not None else "not_loaded",
            "config_watcher": "running" if manager is not None and manager.is_watching else "stopped",
        }
        return {
            "status": "healthy" if service is not None else "degraded",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": checks
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "Helpdesk SLA Service",
            "version": settings.app_version,
            "architecture": "Clean Architecture / Modular Monolith",
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "sla": {
                    "prefix": "/sla",
                    "endpoints": [
                        "POST /sla/evaluate - Evaluate ticket SLA",
                        "POST /sla/evaluate/batch - Evaluate ticket batch",
                        "POST /sla/resolve - Resolve SLA target",
                        "POST /sla/business-time/add - Add business hours",
                        "POST /sla/business-time/between - Business hours between instants",
                        "GET /sla/config - SLA configuration summary"
                    ]
                }
            }
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "helpdesk_sla.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
