"""Call log listing."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ...schemas.call_logs import CallLogModel
from ...services.context import Integrations
from ..deps import get_integrations

router = APIRouter(prefix="/call-logs", tags=["call-logs"])


@router.get("", response_model=List[CallLogModel], status_code=status.HTTP_200_OK)
def list_call_logs(ctx: Integrations = Depends(get_integrations)) -> List[CallLogModel]:
    return [CallLogModel.model_validate(call) for call in ctx.store.list_call_logs()]
