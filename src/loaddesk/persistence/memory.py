"""In-process record store used when no database is configured."""

from __future__ import annotations

import threading
from dataclasses import asdict, replace
from datetime import datetime

from ..errors import InvalidStatusTransition
from ..models.domain import CallLog, LoadRequest, LoadStatus, User
from .base import NewCallLog, NewLoadRequest, generate_load_code, statuses_open_to, utcnow


class InMemoryRecordStore:
    """Dictionary-backed repository; contents are lost on restart.

    Records are stored as immutable snapshots: every update swaps in a new
    instance, so objects handed to callers never change underneath them.
    """

    def __init__(self, load_code_prefix: str = "EXT") -> None:
        self.load_code_prefix = load_code_prefix
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._load_requests: dict[int, LoadRequest] = {}
        self._call_logs: dict[int, CallLog] = {}
        self._next_user_id = 1
        self._next_load_request_id = 1
        self._next_call_log_id = 1

    # Users

    def create_user(self, username: str, password: str) -> User:
        with self._lock:
            if self._find_user(username) is not None:
                raise ValueError(f"Username '{username}' is already taken.")
            user = User(id=self._next_user_id, username=username, password=password)
            self._next_user_id += 1
            self._users[user.id] = user
            return user

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            return self._find_user(username)

    def _find_user(self, username: str) -> User | None:
        return next((user for user in self._users.values() if user.username == username), None)

    # Load requests

    def create_load_request(self, fields: NewLoadRequest) -> LoadRequest:
        with self._lock:
            existing_codes = {load.load_id for load in self._load_requests.values()}
            load_id = generate_load_code(self.load_code_prefix, existing_codes.__contains__)
            load_request = LoadRequest(
                id=self._next_load_request_id,
                load_id=load_id,
                created_at=utcnow(),
                **asdict(fields),
            )
            self._next_load_request_id += 1
            self._load_requests[load_request.id] = load_request
            return load_request

    def get_load_request(self, load_request_id: int) -> LoadRequest | None:
        with self._lock:
            return self._load_requests.get(load_request_id)

    def get_load_request_by_load_id(self, load_id: str) -> LoadRequest | None:
        with self._lock:
            return next((load for load in self._load_requests.values() if load.load_id == load_id), None)

    def list_load_requests(self) -> list[LoadRequest]:
        with self._lock:
            return sorted(self._load_requests.values(), key=lambda load: (load.created_at, load.id), reverse=True)

    def update_load_request_status(
        self, load_request_id: int, status: LoadStatus, approved_at: datetime | None
    ) -> LoadRequest | None:
        with self._lock:
            current = self._load_requests.get(load_request_id)
            if current is None:
                return None
            updated = replace(current, status=LoadStatus(status), approved_at=approved_at)
            self._load_requests[load_request_id] = updated
            return updated

    def transition_load_request_status(
        self, load_request_id: int, status: LoadStatus, approved_at: datetime | None
    ) -> LoadRequest | None:
        status = LoadStatus(status)
        with self._lock:
            current = self._load_requests.get(load_request_id)
            if current is None:
                return None
            if current.status not in statuses_open_to(status):
                raise InvalidStatusTransition(
                    f"Load request {current.load_id} is already {current.status.value}"
                )
            updated = replace(current, status=status, approved_at=approved_at)
            self._load_requests[load_request_id] = updated
            return updated

    def mark_load_request_notified(self, load_request_id: int) -> LoadRequest | None:
        with self._lock:
            current = self._load_requests.get(load_request_id)
            if current is None:
                return None
            updated = replace(current, notification_sent=True)
            self._load_requests[load_request_id] = updated
            return updated

    # Call logs

    def create_call_log(self, fields: NewCallLog) -> CallLog:
        with self._lock:
            call_log = CallLog(id=self._next_call_log_id, created_at=utcnow(), **asdict(fields))
            self._next_call_log_id += 1
            self._call_logs[call_log.id] = call_log
            return call_log

    def get_call_log(self, call_log_id: int) -> CallLog | None:
        with self._lock:
            return self._call_logs.get(call_log_id)

    def get_call_log_by_call_sid(self, call_sid: str) -> CallLog | None:
        with self._lock:
            matches = [log for log in self._call_logs.values() if log.call_sid == call_sid]
            return max(matches, key=lambda log: log.id) if matches else None

    def list_call_logs(self) -> list[CallLog]:
        with self._lock:
            return sorted(self._call_logs.values(), key=lambda log: (log.created_at, log.id), reverse=True)

    def update_call_log_transcription(self, call_log_id: int, transcription: str) -> CallLog | None:
        with self._lock:
            current = self._call_logs.get(call_log_id)
            if current is None:
                return None
            updated = replace(current, transcription=transcription)
            self._call_logs[call_log_id] = updated
            return updated

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
        with self._lock:
            current = self._call_logs.get(call_log_id)
            if current is None:
                return None
            changes: dict[str, object] = {"status": status}
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
            updated = replace(current, **changes)
            self._call_logs[call_log_id] = updated
            return updated
