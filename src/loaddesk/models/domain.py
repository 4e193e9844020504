"""Domain models for load requests, call logs and users."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class LoadStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    # Shown by the dashboard but not reachable through any operation yet.
    IN_TRANSIT = "in_transit"


DECISION_STATUSES = frozenset({LoadStatus.APPROVED, LoadStatus.REJECTED})


class CallStatus:
    """Call log status values. Free text in storage, these are the ones the service writes."""

    SIMULATED = "simulated"
    IN_PROGRESS = "in_progress"
    SMS_RECEIVED = "sms_received"
    PROCESSED = "processed"
    FAILED = "failed"


@dataclass(slots=True)
class User:
    id: int
    username: str
    password: str


@dataclass(slots=True)
class LoadRequest:
    """A shipment request extracted from a call or message."""

    id: int
    load_id: str
    customer_name: str
    customer_phone: Optional[str]
    pickup_location: str
    pickup_address: Optional[str]
    delivery_location: str
    delivery_address: Optional[str]
    cargo_type: str
    weight: str
    truck_type: str
    pickup_time: Optional[str]
    delivery_time: Optional[str]
    deadline: Optional[str]
    transcription: Optional[str]
    extracted_data: Optional[str]
    created_at: datetime
    status: LoadStatus = LoadStatus.PENDING
    approved_at: Optional[datetime] = None
    notification_sent: bool = False

    @property
    def route(self) -> str:
        return f"{self.pickup_location} → {self.delivery_location}"


@dataclass(slots=True)
class CallLog:
    """One telephony or messaging interaction, whether or not it produced a load."""

    id: int
    phone_number: str
    duration: int
    status: str
    created_at: datetime
    transcription: Optional[str] = None
    audio_file_url: Optional[str] = None
    call_sid: Optional[str] = None
    load_request_id: Optional[int] = None
