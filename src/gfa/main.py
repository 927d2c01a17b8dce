"""FastAPI application entry point."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import allocation, health
from .config import settings
from .services.allocation.gravity import ALLOCATION_MODES


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "optimizer": "gravity",
            "modes": list(ALLOCATION_MODES),
            "default_mode": settings.allocation_mode,
            "remote_offload": bool(settings.remote_base_url),
            "optimize": f"{settings.api_prefix}/optimize-gfa",
            "health": f"{settings.api_prefix}/health",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(allocation.router, prefix=settings.api_prefix)
    return app


app = create_app()
