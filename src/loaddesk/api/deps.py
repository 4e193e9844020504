"""Request-scoped dependencies."""

from __future__ import annotations

from fastapi import Request

from ..services.context import Integrations
from ..services.ingestion import IngestionPipeline


def get_integrations(request: Request) -> Integrations:
    return request.app.state.integrations


def get_pipeline(request: Request) -> IngestionPipeline:
    return IngestionPipeline(get_integrations(request))
