"""Twilio webhooks. Every response is TwiML, even when processing fails."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Response

from ...config import Settings
from ...services.context import Integrations
from ...services.ingestion import IngestionPipeline, submit_job
from ...services.telephony import error_response, greeting_response, recording_ack_response, sms_ack_response
from ..deps import get_integrations, get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telephony", tags=["telephony"])

TWIML_MEDIA_TYPE = "text/xml"


def _twiml(body: str) -> Response:
    return Response(content=body, media_type=TWIML_MEDIA_TYPE)


def _recording_action_url(config: Settings, call_log_id: int) -> str:
    base = config.base_url.rstrip("/")
    return f"{base}{config.api_prefix}/telephony/recording?call_log_id={call_log_id}"


def _parse_duration(value: str | None) -> int:
    try:
        return int(value) if value else 0
    except ValueError:
        return 0


@router.post("/voice")
def incoming_call(
    phone_number: str | None = Form(default=None, alias="From"),
    call_sid: str | None = Form(default=None, alias="CallSid"),
    ctx: Integrations = Depends(get_integrations),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> Response:
    config = ctx.settings
    try:
        call_log = pipeline.handle_incoming_call(phone_number, call_sid)
    except Exception:
        logger.exception(f"Error handling voice webhook for call {call_sid}")
        return _twiml(error_response(config.company_name, voice=config.twilio_voice))
    return _twiml(
        greeting_response(
            config.company_name,
            _recording_action_url(config, call_log.id),
            voice=config.twilio_voice,
            max_length=config.max_recording_seconds,
        )
    )


@router.post("/recording")
def recording_complete(
    background_tasks: BackgroundTasks,
    call_log_id: int | None = None,
    recording_url: str | None = Form(default=None, alias="RecordingUrl"),
    recording_sid: str | None = Form(default=None, alias="RecordingSid"),
    call_sid: str | None = Form(default=None, alias="CallSid"),
    recording_duration: str | None = Form(default=None, alias="RecordingDuration"),
    ctx: Integrations = Depends(get_integrations),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> Response:
    logger.info(f"Recording received: sid={recording_sid} call={call_sid} duration={recording_duration}")
    submit_job(
        background_tasks,
        f"recording:{recording_sid or call_sid}",
        pipeline.process_recording,
        recording_sid=recording_sid,
        call_sid=call_sid,
        recording_url=recording_url,
        duration=_parse_duration(recording_duration),
        call_log_id=call_log_id,
    )
    return _twiml(recording_ack_response(ctx.settings.company_name, voice=ctx.settings.twilio_voice))


@router.post("/sms")
def incoming_sms(
    background_tasks: BackgroundTasks,
    phone_number: str | None = Form(default=None, alias="From"),
    body: str = Form(default="", alias="Body"),
    message_sid: str | None = Form(default=None, alias="MessageSid"),
    ctx: Integrations = Depends(get_integrations),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> Response:
    logger.info(f"SMS received from {phone_number} (sid={message_sid})")
    submit_job(background_tasks, f"sms:{message_sid}", pipeline.process_sms, phone_number, body, message_sid)
    return _twiml(sms_ack_response(ctx.settings.company_name))
