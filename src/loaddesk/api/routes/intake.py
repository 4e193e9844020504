"""Manual intake endpoints: simulated calls and direct audio uploads."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile, status

from ...errors import LoadDeskError
from ...persistence import UploadTooLarge
from ...schemas.load_requests import (
    LoadRequestModel,
    SimulateCallRequest,
    SimulateCallResponse,
    UploadAudioResponse,
)
from ...services.context import Integrations
from ...services.ingestion import IngestionPipeline
from ..deps import get_integrations, get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["intake"])


@router.post("/simulate-call", response_model=SimulateCallResponse, status_code=status.HTTP_200_OK)
def simulate_call(
    payload: SimulateCallRequest | None = Body(default=None),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> SimulateCallResponse:
    payload = payload or SimulateCallRequest()
    call_log = pipeline.simulate_call(payload.phone_number, payload.customer_name)
    return SimulateCallResponse(call_id=call_log.id, status="Call simulation started")


@router.post("/upload-audio", response_model=UploadAudioResponse, status_code=status.HTTP_200_OK)
def upload_audio(
    audio: UploadFile | None = File(default=None),
    ctx: Integrations = Depends(get_integrations),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> UploadAudioResponse:
    """Transcribe an uploaded recording, create the load request and notify the owner."""
    if audio is None or not audio.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No audio file uploaded")
    if audio.content_type not in ctx.settings.allowed_audio_types:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Invalid file type. Only audio files are allowed.",
        )

    try:
        outcome = pipeline.process_upload(audio.file, filename=audio.filename)
    except UploadTooLarge as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    except LoadDeskError as exc:
        logger.error(f"Error processing audio: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process audio file: {exc}",
        ) from exc
    except Exception as exc:
        logger.exception("Unexpected error processing audio upload")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process audio file: {exc}",
        ) from exc
    finally:
        audio.file.close()

    return UploadAudioResponse(
        load_request=LoadRequestModel.model_validate(outcome.load_request),
        transcription=outcome.transcription,
        extracted_data=outcome.extracted.model_dump(by_alias=True, exclude_none=True),
        message="Audio processed successfully and notifications sent",
    )
