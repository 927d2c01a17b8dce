"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/remote", status_code=status.HTTP_200_OK)
def health_remote() -> dict:
    """Report whether optimization is offloaded to a remote service."""
    return {
        "service": "remote-gfa",
        "configured": bool(settings.remote_base_url),
        "base_url": settings.remote_base_url,
    }
