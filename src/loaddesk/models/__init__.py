"""Domain models."""

from .domain import CallLog, CallStatus, DECISION_STATUSES, LoadRequest, LoadStatus, User

__all__ = ["CallLog", "CallStatus", "DECISION_STATUSES", "LoadRequest", "LoadStatus", "User"]
