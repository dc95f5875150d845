"""
FastAPI application for the scheduling and availability engine

Customer booking endpoints plus dashboard management of blocks and hours
"""
import logging
from collections import defaultdict
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from fieldbook.config.settings import get_settings
from fieldbook.core.middleware import correlation_id_middleware, request_logging_middleware
from fieldbook.core.monitoring import health_router
from fieldbook.api.v1.router import api_v1_router
from fieldbook.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    logger.info(f"{settings.APP_NAME} starting up")
    logger.info("Public booking API at /api/v1/public/, dashboard at /api/v1/dashboard/")

    routes_by_tag = defaultdict(list)
    for route in app.routes:
        if isinstance(route, APIRoute):
            tag = route.tags[0] if route.tags else "other"
            for method in route.methods:
                routes_by_tag[tag].append((method, route.path))

    for tag, routes in sorted(routes_by_tag.items()):
        for method, path in sorted(routes, key=lambda x: (x[1], x[0])):
            logger.debug(f"[{tag}] {method:8} {path}")

    yield

    # Shutdown
    logger.info(f"{settings.APP_NAME} shutting down")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Fieldbook Scheduling API",
        description="Availability, priority scheduling and booking for field-service businesses",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Add custom middleware (last added runs first)
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "fieldbook.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
