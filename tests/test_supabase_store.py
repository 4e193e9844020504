from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

import pytest

from loaddesk.errors import InvalidStatusTransition
from loaddesk.models.domain import CallStatus, LoadStatus
from loaddesk.persistence import NewCallLog, NewLoadRequest, SupabaseRecordStore
from loaddesk.persistence.base import utcnow


class FakeQuery:
    def __init__(self, tables: dict[str, list[dict[str, Any]]], name: str) -> None:
        self.rows = tables.setdefault(name, [])
        self.operation = "select"
        self.payload: dict[str, Any] | None = None
        self.filters: list[tuple[str, Any]] = []
        self.memberships: list[tuple[str, list[Any]]] = []
        self.orders: list[tuple[str, bool]] = []
        self.row_limit: int | None = None

    def select(self, *_columns):
        self.operation = "select"
        return self

    def insert(self, row):
        self.operation, self.payload = "insert", row
        return self

    def update(self, changes):
        self.operation, self.payload = "update", changes
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def in_(self, column, values):
        self.memberships.append((column, list(values)))
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def execute(self):
        if self.operation == "insert":
            row = dict(self.payload, id=len(self.rows) + 1)
            self.rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        matched = [
            row
            for row in self.rows
            if all(row.get(col) == value for col, value in self.filters)
            and all(row.get(col) in values for col, values in self.memberships)
        ]
        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(row) for row in matched])

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda row: row.get(column), reverse=desc)
        if self.row_limit is not None:
            matched = matched[: self.row_limit]
        return SimpleNamespace(data=[dict(row) for row in matched])


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.tables, name)


@pytest.fixture
def client() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def store(client: FakeSupabase) -> SupabaseRecordStore:
    return SupabaseRecordStore(client)


def _new_load(name: str) -> NewLoadRequest:
    return NewLoadRequest(
        customer_name=name,
        pickup_location="Memphis, TN",
        delivery_location="Atlanta, GA",
        cargo_type="Paper rolls",
        weight="38000 lbs",
        truck_type="Dry Van",
        extracted_data='{"customerName": "%s"}' % name,
    )


def test_create_and_fetch_load_request(store: SupabaseRecordStore) -> None:
    created = store.create_load_request(_new_load("Riverbend Mills"))

    assert created.status == LoadStatus.PENDING
    assert created.load_id.startswith("EXT-")
    assert store.get_load_request(created.id) == created
    assert store.get_load_request_by_load_id(created.load_id) == created


def test_list_load_requests_newest_first(store: SupabaseRecordStore) -> None:
    first = store.create_load_request(_new_load("First"))
    second = store.create_load_request(_new_load("Second"))

    assert [load.id for load in store.list_load_requests()] == [second.id, first.id]


def test_status_update_round_trips_timestamp(store: SupabaseRecordStore) -> None:
    created = store.create_load_request(_new_load("Riverbend Mills"))
    decided_at = utcnow()

    updated = store.update_load_request_status(created.id, LoadStatus.REJECTED, approved_at=decided_at)

    assert updated.status == LoadStatus.REJECTED
    assert updated.approved_at == decided_at
    assert store.mark_load_request_notified(created.id).notification_sent is True


def test_unknown_ids_return_none(store: SupabaseRecordStore) -> None:
    assert store.get_load_request(404) is None
    assert store.update_load_request_status(404, LoadStatus.APPROVED, approved_at=None) is None
    assert store.get_call_log_by_call_sid("CA-missing") is None


def test_call_log_lifecycle(store: SupabaseRecordStore) -> None:
    call = store.create_call_log(NewCallLog(phone_number="+15550100", status=CallStatus.IN_PROGRESS, call_sid="CA9"))
    load = store.create_load_request(_new_load("Riverbend Mills"))

    store.update_call_log_transcription(call.id, "Need a dry van")
    completed = store.complete_call_log(call.id, status=CallStatus.PROCESSED, load_request_id=load.id, duration=30)

    assert completed.transcription == "Need a dry van"
    assert completed.load_request_id == load.id
    assert store.get_call_log_by_call_sid("CA9").status == CallStatus.PROCESSED
    assert store.list_call_logs() == [completed]


def test_duplicate_username_is_rejected(store: SupabaseRecordStore) -> None:
    store.create_user("owner", "secret")

    with pytest.raises(ValueError):
        store.create_user("owner", "again")


def test_transition_is_conditional_on_current_status(store: SupabaseRecordStore) -> None:
    created = store.create_load_request(_new_load("Riverbend Mills"))
    decided_at = utcnow()

    approved = store.transition_load_request_status(created.id, LoadStatus.APPROVED, approved_at=decided_at)
    repeated = store.transition_load_request_status(created.id, LoadStatus.APPROVED, approved_at=decided_at)

    assert approved.status == repeated.status == LoadStatus.APPROVED
    with pytest.raises(InvalidStatusTransition, match="already approved"):
        store.transition_load_request_status(created.id, LoadStatus.REJECTED, approved_at=decided_at)
    assert store.get_load_request(created.id).status == LoadStatus.APPROVED
    assert store.transition_load_request_status(404, LoadStatus.REJECTED, approved_at=decided_at) is None


@pytest.mark.parametrize(
    "created_at",
    ["2025-06-01T12:00:00.12345+00:00", "2025-06-01T12:00:00.12345Z"],
)
def test_trimmed_fractional_timestamps_are_parsed(
    client: FakeSupabase, store: SupabaseRecordStore, created_at: str
) -> None:
    client.tables["load_requests"] = [
        {
            "id": 1,
            "load_id": "EXT-2025-AB12",
            "customer_name": "Riverbend Mills",
            "pickup_location": "Memphis, TN",
            "delivery_location": "Atlanta, GA",
            "cargo_type": "Paper rolls",
            "weight": "38000 lbs",
            "truck_type": "Dry Van",
            "status": "pending",
            "notification_sent": False,
            "created_at": created_at,
            "approved_at": None,
        }
    ]

    load = store.get_load_request(1)

    assert load.created_at == datetime(2025, 6, 1, 12, 0, 0, 123450, tzinfo=timezone.utc)
    assert store.list_load_requests() == [load]
