"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...services.context import Integrations
from ..deps import get_integrations

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/integrations", status_code=status.HTTP_200_OK)
def health_integrations(ctx: Integrations = Depends(get_integrations)) -> dict:
    """Report which external integrations have credentials configured."""
    return {"status": "ok", "integrations": ctx.status()}
