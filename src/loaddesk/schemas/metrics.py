"""Dashboard metrics schema."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MetricsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    calls_today: int = Field(..., alias="callsToday")
    loads_processed: int = Field(..., alias="loadsProcessed")
    pending_approval: int = Field(..., alias="pendingApproval")
    revenue: int
    total_loads: int = Field(..., alias="totalLoads")
    total_calls: int = Field(..., alias="totalCalls")
