"""Load request listing and owner decisions."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import InvalidStatusTransition
from ...models.domain import LoadStatus
from ...schemas.load_requests import LoadRequestModel
from ...services.context import Integrations
from ...services.load_requests import decide_load_request
from ..deps import get_integrations

router = APIRouter(prefix="/load-requests", tags=["load-requests"])


@router.get("", response_model=List[LoadRequestModel], status_code=status.HTTP_200_OK)
def list_load_requests(ctx: Integrations = Depends(get_integrations)) -> List[LoadRequestModel]:
    return [LoadRequestModel.model_validate(load) for load in ctx.store.list_load_requests()]


@router.get("/{load_request_id}", response_model=LoadRequestModel, status_code=status.HTTP_200_OK)
def get_load_request(load_request_id: int, ctx: Integrations = Depends(get_integrations)) -> LoadRequestModel:
    load = ctx.store.get_load_request(load_request_id)
    if load is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Load request not found")
    return LoadRequestModel.model_validate(load)


def _decide(ctx: Integrations, load_request_id: int, decision: LoadStatus, message: str) -> dict:
    try:
        load = decide_load_request(ctx, load_request_id, decision)
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if load is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Load request not found")
    return {
        "message": message,
        "loadRequest": LoadRequestModel.model_validate(load).model_dump(mode="json", by_alias=True),
    }


@router.post("/{load_request_id}/approve", status_code=status.HTTP_200_OK)
def approve_load_request(load_request_id: int, ctx: Integrations = Depends(get_integrations)) -> dict:
    return _decide(ctx, load_request_id, LoadStatus.APPROVED, "Load request approved successfully")


@router.post("/{load_request_id}/reject", status_code=status.HTTP_200_OK)
def reject_load_request(load_request_id: int, ctx: Integrations = Depends(get_integrations)) -> dict:
    return _decide(ctx, load_request_id, LoadStatus.REJECTED, "Load request rejected")
