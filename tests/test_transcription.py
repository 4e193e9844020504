from pathlib import Path

import pytest

from loaddesk.errors import TranscriptionError
from loaddesk.services.transcription import WhisperTranscriber

from fakes import FakeOpenAI


def test_transcribe_returns_text_and_duration(tmp_path: Path) -> None:
    audio = tmp_path / "call.mp3"
    audio.write_bytes(b"ID3")
    client = FakeOpenAI(transcript="  Need a flatbed out of Tulsa.  ")

    transcript = WhisperTranscriber(client).transcribe(audio)

    assert transcript.text == "Need a flatbed out of Tulsa."
    assert transcript.duration == pytest.approx(42.4)
    assert client.transcribed_files == [str(audio)]


def test_service_error_is_wrapped(tmp_path: Path) -> None:
    audio = tmp_path / "call.mp3"
    audio.write_bytes(b"ID3")
    transcriber = WhisperTranscriber(FakeOpenAI(transcription_error=ConnectionError("connection reset")))

    with pytest.raises(TranscriptionError, match="Failed to transcribe audio: connection reset"):
        transcriber.transcribe(audio)


def test_missing_file_is_a_transcription_error(tmp_path: Path) -> None:
    with pytest.raises(TranscriptionError):
        WhisperTranscriber(FakeOpenAI()).transcribe(tmp_path / "gone.mp3")


def test_unconfigured_transcriber_is_disabled(tmp_path: Path) -> None:
    transcriber = WhisperTranscriber(None)

    assert transcriber.enabled is False
    with pytest.raises(TranscriptionError):
        transcriber.transcribe(tmp_path / "call.mp3")
