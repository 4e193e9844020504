"""Scratch storage for audio files that only live for one pipeline run."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from ..config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadTooLarge(ValueError):
    def __init__(self, limit_bytes: int) -> None:
        super().__init__(f"Audio file exceeds the {limit_bytes // (1024 * 1024)}MB limit.")
        self.limit_bytes = limit_bytes


class AudioStorage:
    """Thin wrapper around the upload directory for temporary audio files."""

    def __init__(self, root: Path | None = None) -> None:
        # Directory is created on first write
        self.root = (root or settings.upload_dir).resolve()

    def make_path(self, prefix: str = "audio", suffix: str = "") -> Path:
        return self.root / f"{prefix}_{uuid.uuid4().hex}{suffix}"

    def write_bytes(self, path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            handle.write(payload)

    def write_stream(self, path: Path, stream: BinaryIO, *, max_bytes: int) -> int:
        """Copy ``stream`` to ``path`` chunk by chunk, refusing more than ``max_bytes``."""
        written = 0
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLarge(max_bytes)
                handle.write(chunk)
        return written

    def discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error(f"Error deleting temporary audio file {path}: {exc}")

    @contextmanager
    def temporary_file(self, prefix: str = "audio", suffix: str = "") -> Iterator[Path]:
        """Yield a fresh path in the upload directory and always delete it afterwards."""
        path = self.make_path(prefix, suffix)
        try:
            yield path
        finally:
            self.discard(path)
