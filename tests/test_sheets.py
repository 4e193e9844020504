from datetime import datetime, timezone

import pytest

from loaddesk.errors import SheetsSyncError
from loaddesk.models.domain import LoadStatus
from loaddesk.persistence import InMemoryRecordStore, NewLoadRequest
from loaddesk.services.sheets import APPROVED_AT_COLUMN, SHEET_HEADERS, STATUS_COLUMN, SheetsSync, load_to_row

from fakes import FakeWorksheet


def _load():
    return InMemoryRecordStore().create_load_request(
        NewLoadRequest(
            customer_name="Maria Lopez",
            pickup_location="Dallas, TX",
            delivery_location="Denver, CO",
            cargo_type="Strawberries",
            weight="40000 lbs",
            truck_type="Reefer",
        )
    )


def test_row_matches_header_layout() -> None:
    load = _load()
    row = load_to_row(load)

    assert len(row) == len(SHEET_HEADERS) == 16
    assert row[0] == load.load_id
    assert row[STATUS_COLUMN - 1] == "pending"
    assert row[APPROVED_AT_COLUMN - 1] == ""
    assert row[4] == ""


def test_initialize_and_append() -> None:
    worksheet = FakeWorksheet()
    sync = SheetsSync(None, None, None, worksheet=worksheet)
    load = _load()

    sync.initialize_sheet()
    sync.append_load_row(load)

    assert worksheet.header == list(SHEET_HEADERS)
    assert worksheet.rows[0][0] == load.load_id


def test_update_status_finds_row_by_load_id() -> None:
    worksheet = FakeWorksheet()
    sync = SheetsSync(None, None, None, worksheet=worksheet)
    load = _load()
    sync.append_load_row(load)
    decided_at = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    sync.update_status(load.load_id, LoadStatus.APPROVED.value, decided_at)

    assert worksheet.rows[0][STATUS_COLUMN - 1] == "approved"
    assert worksheet.rows[0][APPROVED_AT_COLUMN - 1] == decided_at.isoformat()


def test_update_status_for_unknown_load_is_a_no_op() -> None:
    worksheet = FakeWorksheet()

    SheetsSync(None, None, None, worksheet=worksheet).update_status("EXT-2025-NONE", "approved")

    assert worksheet.cell_updates == []


def test_failures_raise_sheets_sync_error() -> None:
    sync = SheetsSync(None, None, None, worksheet=FakeWorksheet(fail=True))

    with pytest.raises(SheetsSyncError):
        sync.append_load_row(_load())
    with pytest.raises(SheetsSyncError):
        sync.initialize_sheet()


def test_unconfigured_sync_is_skipped() -> None:
    sync = SheetsSync(None, None, None)

    assert sync.enabled is False
    sync.append_load_row(_load())
    sync.update_status("EXT-2025-AB12", "approved")
