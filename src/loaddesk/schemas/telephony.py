"""Schemas for the recording diagnostic endpoint."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RecordingTestRequest(BaseModel):
    """Same field names Twilio posts to the recording webhook."""

    model_config = ConfigDict(populate_by_name=True)

    recording_url: Optional[str] = Field(None, alias="RecordingUrl")
    recording_sid: Optional[str] = Field(None, alias="RecordingSid")
    call_sid: Optional[str] = Field(None, alias="CallSid")
    recording_duration: Optional[str] = Field(None, alias="RecordingDuration")
