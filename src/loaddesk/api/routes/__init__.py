"""Route group exports."""

from . import call_logs, diagnostics, health, intake, load_requests, metrics, telephony

__all__ = ["call_logs", "diagnostics", "health", "intake", "load_requests", "metrics", "telephony"]
