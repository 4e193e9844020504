"""Speech-to-text adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..errors import TranscriptionError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Transcript:
    text: str
    duration: float = 0.0


class WhisperTranscriber:
    """Single request/response call to the OpenAI transcription endpoint. No retries."""

    def __init__(self, client: Any | None, model: str = "whisper-1") -> None:
        self.client = client
        self.model = model

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def transcribe(self, audio_path: Path) -> Transcript:
        if self.client is None:
            raise TranscriptionError("Failed to transcribe audio: transcription service is not configured")
        audio_path = Path(audio_path)
        try:
            with audio_path.open("rb") as handle:
                result = self.client.audio.transcriptions.create(
                    file=handle,
                    model=self.model,
                    response_format="verbose_json",
                )
        except Exception as exc:
            logger.error(f"Error transcribing audio {audio_path}: {exc}")
            raise TranscriptionError(f"Failed to transcribe audio: {exc}") from exc

        text = (getattr(result, "text", None) or "").strip()
        duration = getattr(result, "duration", None) or 0.0
        logger.info(f"Transcribed {audio_path.name} ({duration:.0f}s)")
        return Transcript(text=text, duration=float(duration))
