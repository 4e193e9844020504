"""Owner decisions on load requests."""

from __future__ import annotations

import logging

from ..models.domain import DECISION_STATUSES, LoadRequest, LoadStatus
from ..persistence.base import utcnow
from .context import Integrations

logger = logging.getLogger(__name__)


def decide_load_request(ctx: Integrations, load_request_id: int, status: LoadStatus) -> LoadRequest | None:
    """Approve or reject a load request and stamp the decision time.

    Returns ``None`` when the request does not exist. Repeating the same decision
    re-stamps ``approved_at``; switching an approved request to rejected (or the
    reverse) raises :class:`InvalidStatusTransition`.
    """
    if status not in DECISION_STATUSES:
        raise ValueError(f"Unsupported decision status: {status}")

    updated = ctx.store.transition_load_request_status(load_request_id, status, approved_at=utcnow())
    if updated is None:
        return None
    logger.info(f"Load request {updated.load_id} {status.value}")

    try:
        ctx.sheets.update_status(updated.load_id, status.value, updated.approved_at)
    except Exception:
        logger.exception(f"Failed to sync status of {updated.load_id} to spreadsheet")
    return updated
