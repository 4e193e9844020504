"""Mirror of load requests into a Google Sheets worksheet."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import gspread
from gspread.utils import rowcol_to_a1

from ..config import Settings
from ..errors import SheetsSyncError
from ..models.domain import LoadRequest

logger = logging.getLogger(__name__)

SHEET_HEADERS: tuple[str, ...] = (
    "Load ID",
    "Customer Name",
    "Customer Phone",
    "Pickup Location",
    "Pickup Address",
    "Delivery Location",
    "Delivery Address",
    "Cargo Type",
    "Weight",
    "Truck Type",
    "Pickup Time",
    "Delivery Time",
    "Deadline",
    "Status",
    "Created At",
    "Approved At",
)
LOAD_ID_COLUMN = 1
STATUS_COLUMN = SHEET_HEADERS.index("Status") + 1
APPROVED_AT_COLUMN = SHEET_HEADERS.index("Approved At") + 1
TOKEN_URI = "https://oauth2.googleapis.com/token"


def _timestamp(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def load_to_row(load: LoadRequest) -> list[str]:
    return [
        load.load_id,
        load.customer_name,
        load.customer_phone or "",
        load.pickup_location,
        load.pickup_address or "",
        load.delivery_location,
        load.delivery_address or "",
        load.cargo_type,
        load.weight,
        load.truck_type,
        load.pickup_time or "",
        load.delivery_time or "",
        load.deadline or "",
        load.status.value,
        _timestamp(load.created_at),
        _timestamp(load.approved_at),
    ]


class SheetsSync:
    """Appends and updates load rows. Every public method raises :class:`SheetsSyncError`
    on failure; callers treat the sync as best-effort and only log."""

    def __init__(
        self,
        spreadsheet_id: str | None,
        client_email: str | None,
        private_key: str | None,
        sheet_name: str = "Load_Requests",
        worksheet: Any | None = None,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.client_email = client_email
        self.private_key = private_key
        self.sheet_name = sheet_name
        self._worksheet = worksheet

    @classmethod
    def from_settings(cls, config: Settings) -> "SheetsSync":
        if not config.sheets_configured:
            logger.warning("Google Sheets credentials not found - spreadsheet integration is disabled")
        return cls(
            spreadsheet_id=config.google_sheets_id,
            client_email=config.google_sheets_client_email,
            private_key=config.google_sheets_private_key,
            sheet_name=config.google_sheets_sheet_name,
        )

    @property
    def enabled(self) -> bool:
        return self._worksheet is not None or bool(self.spreadsheet_id and self.client_email and self.private_key)

    def _get_worksheet(self) -> Any:
        if self._worksheet is None:
            client = gspread.service_account_from_dict(
                {
                    "type": "service_account",
                    "client_email": self.client_email,
                    "private_key": self.private_key,
                    "token_uri": TOKEN_URI,
                }
            )
            self._worksheet = client.open_by_key(self.spreadsheet_id).worksheet(self.sheet_name)
        return self._worksheet

    def initialize_sheet(self) -> None:
        if not self.enabled:
            return
        try:
            self._get_worksheet().update(
                values=[list(SHEET_HEADERS)],
                range_name=f"A1:{rowcol_to_a1(1, len(SHEET_HEADERS))}",
            )
        except Exception as exc:
            raise SheetsSyncError(f"Failed to initialize Google Sheets: {exc}") from exc
        logger.info("Google Sheets initialized with headers")

    def append_load_row(self, load: LoadRequest) -> None:
        if not self.enabled:
            logger.info(f"Google Sheets not configured, skipping append for {load.load_id}")
            return
        try:
            self._get_worksheet().append_row(load_to_row(load), value_input_option="RAW")
        except Exception as exc:
            raise SheetsSyncError(f"Failed to save to Google Sheets: {exc}") from exc
        logger.info(f"Load {load.load_id} saved to Google Sheets")

    def update_status(self, load_id: str, status: str, approved_at: datetime | None = None) -> None:
        if not self.enabled:
            logger.info(f"Google Sheets not configured, skipping status update for {load_id}")
            return
        try:
            worksheet = self._get_worksheet()
            cell = worksheet.find(load_id, in_column=LOAD_ID_COLUMN)
            if cell is None:
                logger.warning(f"Load {load_id} not found in Google Sheets; status not updated")
                return
            worksheet.update_cell(cell.row, STATUS_COLUMN, status)
            worksheet.update_cell(cell.row, APPROVED_AT_COLUMN, _timestamp(approved_at))
        except Exception as exc:
            raise SheetsSyncError(f"Failed to update Google Sheets: {exc}") from exc
        logger.info(f"Google Sheets: Load {load_id} status updated to {status}")
