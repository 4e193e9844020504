"""Load request API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import LoadStatus


class LoadRequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    load_id: str = Field(..., alias="loadId")
    customer_name: str = Field(..., alias="customerName")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")
    pickup_location: str = Field(..., alias="pickupLocation")
    pickup_address: Optional[str] = Field(None, alias="pickupAddress")
    delivery_location: str = Field(..., alias="deliveryLocation")
    delivery_address: Optional[str] = Field(None, alias="deliveryAddress")
    cargo_type: str = Field(..., alias="cargoType")
    weight: str
    truck_type: str = Field(..., alias="truckType")
    pickup_time: Optional[str] = Field(None, alias="pickupTime")
    delivery_time: Optional[str] = Field(None, alias="deliveryTime")
    deadline: Optional[str] = None
    transcription: Optional[str] = None
    extracted_data: Optional[str] = Field(None, alias="extractedData")
    status: LoadStatus
    created_at: datetime = Field(..., alias="createdAt")
    approved_at: Optional[datetime] = Field(None, alias="approvedAt")
    notification_sent: bool = Field(False, alias="notificationSent")


class UploadAudioResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    load_request: LoadRequestModel = Field(..., alias="loadRequest")
    transcription: str
    extracted_data: dict = Field(..., alias="extractedData")
    message: str


class SimulateCallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    customer_name: Optional[str] = Field(None, alias="customerName")


class SimulateCallResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    call_id: int = Field(..., alias="callId")
    status: str
