"""Exception hierarchy shared by adapters, the pipeline and the API layer."""

from __future__ import annotations


class LoadDeskError(Exception):
    """Base class for service errors."""


class TranscriptionError(LoadDeskError):
    pass


class ExtractionError(LoadDeskError):
    def __init__(self, message: str, missing_field: str | None = None) -> None:
        super().__init__(message)
        self.missing_field = missing_field


class TelephonyError(LoadDeskError):
    pass


class NotificationError(LoadDeskError):
    pass


class SheetsSyncError(LoadDeskError):
    pass


class RecordStoreError(LoadDeskError):
    """Raised when the record store cannot complete a write."""


class InvalidStatusTransition(LoadDeskError):
    """Raised when a decided load is asked to switch to the opposite decision."""
