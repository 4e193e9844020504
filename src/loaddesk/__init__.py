"""Dispatcher-assist service for turning shipper calls and texts into load requests."""

__version__ = "0.1.0"
