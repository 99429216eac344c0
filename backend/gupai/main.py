"""
GupAI completion provider stub server.

Serves the two endpoints the chat core talks to (``GET /api/health`` and
``POST /api/chat``) in either echo or LLM-forwarding mode.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings
from .api import chat_router, health_router
from .core.logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build the stub server application from ``config`` (module settings by default)."""
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config)
        logger.info(f"Starting {config.app_name} backend v{config.app_version} in {config.backend_mode} mode")
        yield
        logger.info(f"Shutting down {config.app_name} backend")

    app = FastAPI(
        title=f"{config.app_name} Backend",
        version=config.app_version,
        description=f"Completion provider for the {config.assistant_name} chat assistant",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if config.log_api_requests:
        app.add_middleware(RequestLoggingMiddleware)

    app.include_router(chat_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        return {
            "app": config.app_name,
            "version": config.app_version,
            # Routers read the module settings; report the mode they serve
            "mode": settings.backend_mode,
            "status": "running",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("gupai.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
