"""Structured load fields returned by the extraction service."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_FIELDS: tuple[str, ...] = (
    "customerName",
    "pickupLocation",
    "deliveryLocation",
    "cargoType",
    "weight",
    "truckType",
)
OPTIONAL_FIELDS: tuple[str, ...] = (
    "customerPhone",
    "pickupAddress",
    "deliveryAddress",
    "pickupTime",
    "deliveryTime",
    "deadline",
)


class ExtractedLoad(BaseModel):
    """Load fields as opaque strings; only presence of the required ones is guaranteed."""

    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(..., alias="customerName")
    pickup_location: str = Field(..., alias="pickupLocation")
    delivery_location: str = Field(..., alias="deliveryLocation")
    cargo_type: str = Field(..., alias="cargoType")
    weight: str
    truck_type: str = Field(..., alias="truckType")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")
    pickup_address: Optional[str] = Field(None, alias="pickupAddress")
    delivery_address: Optional[str] = Field(None, alias="deliveryAddress")
    pickup_time: Optional[str] = Field(None, alias="pickupTime")
    delivery_time: Optional[str] = Field(None, alias="deliveryTime")
    deadline: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def route(self) -> str:
        return f"{self.pickup_location} → {self.delivery_location}"

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
