"""Record store engines and scratch file storage."""

from .base import NewCallLog, NewLoadRequest, RecordStore, generate_load_code
from .database import SupabaseRecordStore
from .filesystem import AudioStorage, UploadTooLarge
from .memory import InMemoryRecordStore

__all__ = [
    "AudioStorage",
    "InMemoryRecordStore",
    "NewCallLog",
    "NewLoadRequest",
    "RecordStore",
    "SupabaseRecordStore",
    "UploadTooLarge",
    "generate_load_code",
]
