"""Ingestion pipeline: audio or text in, pending load request and owner notifications out.

Every trigger walks the same stages::

    received -> transcribing -> extracting -> recorded -> notifying -> done
                                                   (any stage) -> failed

Transcription, extraction and record creation are fatal to the run. Spreadsheet
sync, summary generation and notifications are best-effort: once the load
request exists it is never lost because a downstream channel is degraded.
Stages are only logged; nothing about an in-flight run is persisted.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator, Optional, TypeVar

from ...errors import TelephonyError
from ...models.domain import CallLog, CallStatus, LoadRequest
from ...persistence import NewCallLog, NewLoadRequest
from ...schemas.extraction import ExtractedLoad
from ..context import Integrations
from ..extraction import fallback_summary
from ..notifications import LoadNotification, NotificationResult
from ..transcription import Transcript

logger = logging.getLogger(__name__)

DEFAULT_SIMULATED_PHONE = "+1 (555) 123-4567"
DEFAULT_SIMULATED_CUSTOMER = "Demo Customer"
UNKNOWN_PHONE = "unknown"

T = TypeVar("T")


class PipelineStage(str, Enum):
    RECEIVED = "received"
    TRANSCRIBING = "transcribing"
    EXTRACTING = "extracting"
    RECORDED = "recorded"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


class PipelineRun:
    """Tracks the current stage of one request for logging."""

    def __init__(self, trigger: str, reference: str | None = None) -> None:
        self.trigger = trigger
        self.reference = reference
        self.stage = PipelineStage.RECEIVED
        logger.info(f"[{self.label}] {self.stage.value}")

    @property
    def label(self) -> str:
        return f"{self.trigger}:{self.reference}" if self.reference else self.trigger

    def advance(self, stage: PipelineStage) -> None:
        self.stage = stage
        logger.info(f"[{self.label}] {stage.value}")

    def fail(self, exc: BaseException) -> None:
        logger.error(f"[{self.label}] failed during {self.stage.value}: {exc}")
        self.stage = PipelineStage.FAILED


@dataclass
class IngestionOutcome:
    load_request: LoadRequest
    transcription: str
    extracted: ExtractedLoad
    call_log: Optional[CallLog] = None
    notifications: dict[str, bool] = field(default_factory=dict)


class IngestionPipeline:
    def __init__(self, integrations: Integrations) -> None:
        self.integrations = integrations
        self.settings = integrations.settings
        self.store = integrations.store

    # Entry points

    def simulate_call(self, phone_number: str | None = None, customer_name: str | None = None) -> CallLog:
        """Record a simulated call. Audio processing is left to the recording webhook."""
        call_log = self.store.create_call_log(
            NewCallLog(phone_number=phone_number or DEFAULT_SIMULATED_PHONE, status=CallStatus.SIMULATED)
        )
        logger.info(
            f"Simulated call {call_log.id} created for {customer_name or DEFAULT_SIMULATED_CUSTOMER}; "
            "waiting for recording webhook to process actual audio"
        )
        return call_log

    def handle_incoming_call(self, phone_number: str | None, call_sid: str | None) -> CallLog:
        call_log = self.store.create_call_log(
            NewCallLog(phone_number=phone_number or UNKNOWN_PHONE, status=CallStatus.IN_PROGRESS, call_sid=call_sid)
        )
        logger.info(f"Incoming call from {phone_number}, Call SID: {call_sid} (call log {call_log.id})")
        return call_log

    def process_upload(self, stream: BinaryIO, *, filename: str | None = None) -> IngestionOutcome:
        """Store an uploaded audio stream temporarily and run the full pipeline on it."""
        run = PipelineRun("upload", filename)
        storage = self.integrations.audio_storage
        call_log = self.store.create_call_log(
            NewCallLog(phone_number=UNKNOWN_PHONE, status=CallStatus.IN_PROGRESS, audio_file_url=filename)
        )
        with self._failure_boundary(run, call_log.id):
            suffix = Path(filename).suffix if filename else ""
            with storage.temporary_file("upload", suffix) as audio_path:
                storage.write_stream(audio_path, stream, max_bytes=self.settings.max_upload_bytes)
                run.advance(PipelineStage.TRANSCRIBING)
                transcript = self.integrations.transcriber.transcribe(audio_path)
            return self._ingest_transcript(
                run,
                transcript.text,
                caller_phone=None,
                call_log_id=call_log.id,
                duration=round(transcript.duration),
            )

    def process_recording(
        self,
        *,
        recording_sid: str | None,
        call_sid: str | None,
        recording_url: str | None = None,
        duration: int | None = None,
        call_log_id: int | None = None,
    ) -> IngestionOutcome:
        """Fetch a finished call recording from the provider and run the full pipeline on it."""
        run = PipelineRun("recording", recording_sid or call_sid)
        call_log = self._resolve_call_log(call_log_id, call_sid)
        with self._failure_boundary(run, call_log.id):
            caller_phone = self._caller_phone(call_sid, call_log)
            audio = self.integrations.telephony.download_recording(recording_sid, recording_url)

            run.advance(PipelineStage.TRANSCRIBING)
            transcript = self._transcribe_bytes(audio, prefix=f"recording_{recording_sid or 'call'}")
            self.store.update_call_log_transcription(call_log.id, transcript.text)

            return self._ingest_transcript(
                run,
                transcript.text,
                caller_phone=caller_phone,
                call_log_id=call_log.id,
                duration=duration if duration else round(transcript.duration),
                audio_locator=recording_url,
            )

    def process_sms(self, phone_number: str | None, body: str, message_sid: str | None = None) -> IngestionOutcome:
        """Run extraction directly on an inbound text message."""
        run = PipelineRun("sms", message_sid)
        call_log = self.store.create_call_log(
            NewCallLog(
                phone_number=phone_number or UNKNOWN_PHONE,
                status=CallStatus.SMS_RECEIVED,
                transcription=body,
                call_sid=message_sid,
            )
        )
        with self._failure_boundary(run, call_log.id):
            return self._ingest_transcript(run, body, caller_phone=phone_number, call_log_id=call_log.id, duration=0)

    # Shared downstream sequence

    def _ingest_transcript(
        self,
        run: PipelineRun,
        transcription: str,
        *,
        caller_phone: str | None,
        call_log_id: int | None,
        duration: int,
        audio_locator: str | None = None,
    ) -> IngestionOutcome:
        run.advance(PipelineStage.EXTRACTING)
        extracted = self.integrations.extractor.extract(transcription).unwrap()
        customer_phone = extracted.customer_phone or caller_phone

        load_request = self.store.create_load_request(
            NewLoadRequest(
                customer_name=extracted.customer_name,
                customer_phone=customer_phone,
                pickup_location=extracted.pickup_location,
                pickup_address=extracted.pickup_address,
                delivery_location=extracted.delivery_location,
                delivery_address=extracted.delivery_address,
                cargo_type=extracted.cargo_type,
                weight=extracted.weight,
                truck_type=extracted.truck_type,
                pickup_time=extracted.pickup_time,
                delivery_time=extracted.delivery_time,
                deadline=extracted.deadline,
                transcription=transcription,
                extracted_data=extracted.to_json(),
            )
        )
        run.reference = run.reference or load_request.load_id
        run.advance(PipelineStage.RECORDED)

        call_log = None
        if call_log_id is not None:
            call_log = self.store.complete_call_log(
                call_log_id,
                status=CallStatus.PROCESSED,
                load_request_id=load_request.id,
                duration=duration,
                transcription=transcription,
                audio_file_url=audio_locator,
                phone_number=customer_phone,
            )

        self._best_effort("spreadsheet sync", lambda: self.integrations.sheets.append_load_row(load_request))

        run.advance(PipelineStage.NOTIFYING)
        load_request, notifications = self._notify_owner(load_request, extracted)

        run.advance(PipelineStage.DONE)
        logger.info(f"Load request {load_request.load_id} created from {run.trigger}")
        return IngestionOutcome(
            load_request=load_request,
            transcription=transcription,
            extracted=extracted,
            call_log=call_log,
            notifications=notifications,
        )

    def _notify_owner(self, load_request: LoadRequest, extracted: ExtractedLoad) -> tuple[LoadRequest, dict[str, bool]]:
        summary = self._best_effort("summary generation", lambda: self.integrations.extractor.summarize(extracted))
        notification = LoadNotification(
            load_id=load_request.load_id,
            customer_name=load_request.customer_name,
            customer_phone=load_request.customer_phone,
            route=load_request.route,
            cargo_type=load_request.cargo_type,
            weight=load_request.weight,
            truck_type=load_request.truck_type,
            deadline=load_request.deadline,
            summary=summary or fallback_summary(extracted),
        )
        notifier = self.integrations.notifier
        email_result = self._best_effort(
            "owner email",
            lambda: notifier.send_owner_notification(
                self.settings.owner_email,
                notification,
                self.decision_url(load_request.id, "approve"),
                self.decision_url(load_request.id, "reject"),
            ),
        )
        sms_result = self._best_effort(
            "owner SMS",
            lambda: notifier.send_owner_sms(
                self.settings.owner_phone,
                load_request.load_id,
                load_request.customer_name,
                load_request.route,
            ),
        )
        delivered = {"email": _delivered(email_result), "sms": _delivered(sms_result)}
        if any(delivered.values()):
            load_request = self.store.mark_load_request_notified(load_request.id) or load_request
        return load_request, delivered

    # Helpers

    def decision_url(self, load_request_id: int, action: str) -> str:
        base = self.settings.base_url.rstrip("/")
        return f"{base}{self.settings.api_prefix}/load-requests/{load_request_id}/{action}"

    def _resolve_call_log(self, call_log_id: int | None, call_sid: str | None) -> CallLog:
        if call_log_id is not None:
            call_log = self.store.get_call_log(call_log_id)
            if call_log is not None:
                return call_log
            logger.warning(f"Call log {call_log_id} not found; looking up call {call_sid}")
        if call_sid:
            call_log = self.store.get_call_log_by_call_sid(call_sid)
            if call_log is not None:
                return call_log
        return self.store.create_call_log(
            NewCallLog(phone_number=UNKNOWN_PHONE, status=CallStatus.IN_PROGRESS, call_sid=call_sid)
        )

    def _caller_phone(self, call_sid: str | None, call_log: CallLog) -> str | None:
        known = call_log.phone_number if call_log.phone_number != UNKNOWN_PHONE else None
        if not call_sid:
            return known
        try:
            return self.integrations.telephony.caller_number(call_sid)
        except TelephonyError as exc:
            logger.warning(f"Could not fetch caller number for call {call_sid}: {exc}")
            return known

    def _transcribe_bytes(self, audio: bytes, *, prefix: str) -> Transcript:
        storage = self.integrations.audio_storage
        with storage.temporary_file(prefix, ".mp3") as audio_path:
            storage.write_bytes(audio_path, audio)
            logger.info(f"Transcribing audio file: {audio_path}")
            return self.integrations.transcriber.transcribe(audio_path)

    @contextmanager
    def _failure_boundary(self, run: PipelineRun, call_log_id: int) -> Iterator[None]:
        try:
            yield
        except Exception as exc:
            run.fail(exc)
            self._best_effort(
                "call log failure update",
                lambda: self.store.complete_call_log(call_log_id, status=CallStatus.FAILED),
            )
            raise

    @staticmethod
    def _best_effort(label: str, func: Callable[[], T]) -> T | None:
        try:
            return func()
        except Exception:
            logger.exception(f"{label} failed; continuing")
            return None


def _delivered(result: Any) -> bool:
    return isinstance(result, NotificationResult) and result.success
