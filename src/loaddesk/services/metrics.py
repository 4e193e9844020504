"""Dashboard counters derived from the record store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timezone

from ..models.domain import LoadStatus
from ..persistence.base import utcnow
from .context import Integrations


@dataclass(slots=True)
class DashboardMetrics:
    calls_today: int
    loads_processed: int
    pending_approval: int
    revenue: int
    total_loads: int
    total_calls: int


def _start_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def compute_metrics(ctx: Integrations, now: datetime | None = None) -> DashboardMetrics:
    """Counts for the current UTC day plus all-time totals.

    Revenue is a display figure: approved loads times a flat configured rate.
    """
    day_start = _start_of_day(now or utcnow())
    loads = ctx.store.list_load_requests()
    calls = ctx.store.list_call_logs()

    approved = sum(1 for load in loads if load.status == LoadStatus.APPROVED)
    return DashboardMetrics(
        calls_today=sum(1 for call in calls if _as_utc(call.created_at) >= day_start),
        loads_processed=sum(1 for load in loads if _as_utc(load.created_at) >= day_start),
        pending_approval=sum(1 for load in loads if load.status == LoadStatus.PENDING),
        revenue=approved * ctx.settings.revenue_per_approved_load,
        total_loads=len(loads),
        total_calls=len(calls),
    )
