"""Supabase-backed record store."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter

from ..errors import InvalidStatusTransition, RecordStoreError
from ..models.domain import CallLog, LoadRequest, LoadStatus, User
from .base import NewCallLog, NewLoadRequest, generate_load_code, statuses_open_to, utcnow

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
LOAD_REQUESTS_TABLE = "load_requests"
CALL_LOGS_TABLE = "call_logs"


_TIMESTAMP = TypeAdapter(datetime)


def _parse_timestamp(value: Any) -> datetime | None:
    """PostgREST timestamps may trim trailing zeros from the fraction or end in ``Z``."""
    if value is None:
        return None
    return _TIMESTAMP.validate_python(value)


def _row_to_load_request(row: dict[str, Any]) -> LoadRequest:
    return LoadRequest(
        id=int(row["id"]),
        load_id=row["load_id"],
        customer_name=row["customer_name"],
        customer_phone=row.get("customer_phone"),
        pickup_location=row["pickup_location"],
        pickup_address=row.get("pickup_address"),
        delivery_location=row["delivery_location"],
        delivery_address=row.get("delivery_address"),
        cargo_type=row["cargo_type"],
        weight=str(row["weight"]),
        truck_type=row["truck_type"],
        pickup_time=row.get("pickup_time"),
        delivery_time=row.get("delivery_time"),
        deadline=row.get("deadline"),
        transcription=row.get("transcription"),
        extracted_data=row.get("extracted_data"),
        created_at=_parse_timestamp(row["created_at"]),
        status=LoadStatus(row.get("status") or LoadStatus.PENDING.value),
        approved_at=_parse_timestamp(row.get("approved_at")),
        notification_sent=bool(row.get("notification_sent")),
    )


def _row_to_call_log(row: dict[str, Any]) -> CallLog:
    return CallLog(
        id=int(row["id"]),
        phone_number=row["phone_number"],
        duration=int(row.get("duration") or 0),
        status=row["status"],
        created_at=_parse_timestamp(row["created_at"]),
        transcription=row.get("transcription"),
        audio_file_url=row.get("audio_file_url"),
        call_sid=row.get("call_sid"),
        load_request_id=row.get("load_request_id"),
    )


def _row_to_user(row: dict[str, Any]) -> User:
    return User(id=int(row["id"]), username=row["username"], password=row["password"])


class SupabaseRecordStore:
    """Record store that persists to Supabase tables.

    Each operation is a single PostgREST call, so operations are atomic on their
    own but there is no transaction spanning two of them.
    """

    def __init__(self, client: Any, load_code_prefix: str = "EXT") -> None:
        self.client = client
        self.load_code_prefix = load_code_prefix

    def _first(self, table: str, column: str, value: Any) -> dict[str, Any] | None:
        response = self.client.table(table).select("*").eq(column, value).limit(1).execute()
        rows = response.data or []
        return rows[0] if rows else None

    def _insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        response = self.client.table(table).insert(row).execute()
        rows = response.data or []
        if not rows:
            raise RecordStoreError(f"Supabase insert into '{table}' returned no rows.")
        return rows[0]

    def _update(self, table: str, record_id: int, changes: dict[str, Any]) -> dict[str, Any] | None:
        response = self.client.table(table).update(changes).eq("id", record_id).execute()
        rows = response.data or []
        return rows[0] if rows else None

    # Users

    def create_user(self, username: str, password: str) -> User:
        if self._first(USERS_TABLE, "username", username) is not None:
            raise ValueError(f"Username '{username}' is already taken.")
        return _row_to_user(self._insert(USERS_TABLE, {"username": username, "password": password}))

    def get_user(self, user_id: int) -> User | None:
        row = self._first(USERS_TABLE, "id", user_id)
        return _row_to_user(row) if row else None

    def get_user_by_username(self, username: str) -> User | None:
        row = self._first(USERS_TABLE, "username", username)
        return _row_to_user(row) if row else None

    # Load requests

    def _load_id_exists(self, load_id: str) -> bool:
        return self._first(LOAD_REQUESTS_TABLE, "load_id", load_id) is not None

    def create_load_request(self, fields: NewLoadRequest) -> LoadRequest:
        load_id = generate_load_code(self.load_code_prefix, self._load_id_exists)
        row = asdict(fields)
        row.update(
            {
                "load_id": load_id,
                "status": LoadStatus.PENDING.value,
                "created_at": utcnow().isoformat(),
                "approved_at": None,
                "notification_sent": False,
            }
        )
        created = _row_to_load_request(self._insert(LOAD_REQUESTS_TABLE, row))
        logger.info(f"Stored load request {created.load_id} in Supabase (id={created.id})")
        return created

    def get_load_request(self, load_request_id: int) -> LoadRequest | None:
        row = self._first(LOAD_REQUESTS_TABLE, "id", load_request_id)
        return _row_to_load_request(row) if row else None

    def get_load_request_by_load_id(self, load_id: str) -> LoadRequest | None:
        row = self._first(LOAD_REQUESTS_TABLE, "load_id", load_id)
        return _row_to_load_request(row) if row else None

    def list_load_requests(self) -> list[LoadRequest]:
        response = (
            self.client.table(LOAD_REQUESTS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .order("id", desc=True)
            .execute()
        )
        return [_row_to_load_request(row) for row in (response.data or [])]

    def update_load_request_status(
        self, load_request_id: int, status: LoadStatus, approved_at: datetime | None
    ) -> LoadRequest | None:
        row = self._update(
            LOAD_REQUESTS_TABLE,
            load_request_id,
            {
                "status": LoadStatus(status).value,
                "approved_at": approved_at.isoformat() if approved_at else None,
            },
        )
        return _row_to_load_request(row) if row else None

    def transition_load_request_status(
        self, load_request_id: int, status: LoadStatus, approved_at: datetime | None
    ) -> LoadRequest | None:
        status = LoadStatus(status)
        # Conditional update: the status filter makes check-and-set a single statement
        response = (
            self.client.table(LOAD_REQUESTS_TABLE)
            .update({"status": status.value, "approved_at": approved_at.isoformat() if approved_at else None})
            .eq("id", load_request_id)
            .in_("status", sorted(allowed.value for allowed in statuses_open_to(status)))
            .execute()
        )
        rows = response.data or []
        if rows:
            return _row_to_load_request(rows[0])
        current = self.get_load_request(load_request_id)
        if current is None:
            return None
        raise InvalidStatusTransition(f"Load request {current.load_id} is already {current.status.value}")

    def mark_load_request_notified(self, load_request_id: int) -> LoadRequest | None:
        row = self._update(LOAD_REQUESTS_TABLE, load_request_id, {"notification_sent": True})
        return _row_to_load_request(row) if row else None

    # Call logs

    def create_call_log(self, fields: NewCallLog) -> CallLog:
        row = asdict(fields)
        row["created_at"] = utcnow().isoformat()
        return _row_to_call_log(self._insert(CALL_LOGS_TABLE, row))

    def get_call_log(self, call_log_id: int) -> CallLog | None:
        row = self._first(CALL_LOGS_TABLE, "id", call_log_id)
        return _row_to_call_log(row) if row else None

    def get_call_log_by_call_sid(self, call_sid: str) -> CallLog | None:
        response = (
            self.client.table(CALL_LOGS_TABLE)
            .select("*")
            .eq("call_sid", call_sid)
            .order("id", desc=True)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return _row_to_call_log(rows[0]) if rows else None

    def list_call_logs(self) -> list[CallLog]:
        response = (
            self.client.table(CALL_LOGS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .order("id", desc=True)
            .execute()
        )
        return [_row_to_call_log(row) for row in (response.data or [])]

    def update_call_log_transcription(self, call_log_id: int, transcription: str) -> CallLog | None:
        row = self._update(CALL_LOGS_TABLE, call_log_id, {"transcription": transcription})
        return _row_to_call_log(row) if row else None

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
    ) -> CallLog | None:
        changes: dict[str, Any] = {"status": status}
        if load_request_id is not None:
            changes["load_request_id"] = load_request_id
        if duration is not None:
            changes["duration"] = duration
        if transcription is not None:
            changes["transcription"] = transcription
        if audio_file_url is not None:
            changes["audio_file_url"] = audio_file_url
        if phone_number:
            changes["phone_number"] = phone_number
        row = self._update(CALL_LOGS_TABLE, call_log_id, changes)
        return _row_to_call_log(row) if row else None
