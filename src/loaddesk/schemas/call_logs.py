"""Call log API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CallLogModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    phone_number: str = Field(..., alias="phoneNumber")
    duration: int
    status: str
    transcription: Optional[str] = None
    audio_file_url: Optional[str] = Field(None, alias="audioFileUrl")
    call_sid: Optional[str] = Field(None, alias="callSid")
    load_request_id: Optional[int] = Field(None, alias="loadRequestId")
    created_at: datetime = Field(..., alias="createdAt")
