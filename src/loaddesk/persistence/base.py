"""Repository contract shared by the record store engines."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from ..errors import RecordStoreError
from ..models.domain import DECISION_STATUSES, CallLog, LoadRequest, LoadStatus, User

LOAD_CODE_ALPHABET = string.ascii_uppercase + string.digits
LOAD_CODE_SUFFIX_LENGTH = 4
MAX_LOAD_CODE_ATTEMPTS = 100


@dataclass(slots=True)
class NewLoadRequest:
    """Fields supplied by the caller when creating a load request."""

    customer_name: str
    pickup_location: str
    delivery_location: str
    cargo_type: str
    weight: str
    truck_type: str
    customer_phone: Optional[str] = None
    pickup_address: Optional[str] = None
    delivery_address: Optional[str] = None
    pickup_time: Optional[str] = None
    delivery_time: Optional[str] = None
    deadline: Optional[str] = None
    transcription: Optional[str] = None
    extracted_data: Optional[str] = None


@dataclass(slots=True)
class NewCallLog:
    phone_number: str
    status: str
    duration: int = 0
    transcription: Optional[str] = None
    audio_file_url: Optional[str] = None
    call_sid: Optional[str] = None
    load_request_id: Optional[int] = None


class RecordStore(Protocol):
    """Storage-agnostic repository for users, load requests and call logs.

    Lookups return ``None`` when a record does not exist; engine failures raise.
    """

    def create_user(self, username: str, password: str) -> User: ...

    def get_user(self, user_id: int) -> User | None: ...

    def get_user_by_username(self, username: str) -> User | None: ...

    def create_load_request(self, fields: NewLoadRequest) -> LoadRequest: ...

    def get_load_request(self, load_request_id: int) -> LoadRequest | None: ...

    def get_load_request_by_load_id(self, load_id: str) -> LoadRequest | None: ...

    def list_load_requests(self) -> list[LoadRequest]: ...

    def update_load_request_status(
        self, load_request_id: int, status: LoadStatus, approved_at: datetime | None
    ) -> LoadRequest | None: ...

    def transition_load_request_status(
        self, load_request_id: int, status: LoadStatus, approved_at: datetime | None
    ) -> LoadRequest | None:
        """Apply an owner decision atomically.

        Returns ``None`` for an unknown id and raises
        :class:`~loaddesk.errors.InvalidStatusTransition` when the load already
        carries the opposite decision.
        """
        ...

    def mark_load_request_notified(self, load_request_id: int) -> LoadRequest | None: ...

    def create_call_log(self, fields: NewCallLog) -> CallLog: ...

    def get_call_log(self, call_log_id: int) -> CallLog | None: ...

    def get_call_log_by_call_sid(self, call_sid: str) -> CallLog | None: ...

    def list_call_logs(self) -> list[CallLog]: ...

    def update_call_log_transcription(self, call_log_id: int, transcription: str) -> CallLog | None: ...

    def complete_call_log(
        self,
        call_log_id: int,
        *,
        status: str,
        load_request_id: int | None = None,
        duration: int | None = None,
        transcription: str | None = None,
        audio_file_url: str | None = None,
        phone_number: str | None = None,
    ) -> CallLog | None: ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def random_load_code(prefix: str, now: datetime | None = None) -> str:
    year = (now or utcnow()).year
    suffix = "".join(secrets.choice(LOAD_CODE_ALPHABET) for _ in range(LOAD_CODE_SUFFIX_LENGTH))
    return f"{prefix}-{year}-{suffix}"


def generate_load_code(prefix: str, exists: Callable[[str], bool], now: datetime | None = None) -> str:
    """Generate a load code that ``exists`` reports as unused."""
    for _ in range(MAX_LOAD_CODE_ATTEMPTS):
        candidate = random_load_code(prefix, now)
        if not exists(candidate):
            return candidate
    raise RecordStoreError(f"Could not generate a unique load code with prefix '{prefix}'.")


def statuses_open_to(decision: LoadStatus) -> frozenset[LoadStatus]:
    """Statuses from which ``decision`` may be applied: anything but the opposite decision."""
    return frozenset(status for status in LoadStatus if status not in DECISION_STATUSES or status == decision)
