"""Dashboard metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...schemas.metrics import MetricsResponse
from ...services.context import Integrations
from ...services.metrics import compute_metrics
from ..deps import get_integrations

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_model=MetricsResponse, status_code=status.HTTP_200_OK)
def get_metrics(ctx: Integrations = Depends(get_integrations)) -> MetricsResponse:
    return MetricsResponse.model_validate(compute_metrics(ctx))
