"""Diagnostic endpoints for exercising integrations by hand."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ...errors import LoadDeskError
from ...persistence import NewLoadRequest
from ...schemas.load_requests import LoadRequestModel
from ...schemas.telephony import RecordingTestRequest
from ...services.context import Integrations
from ...services.ingestion import IngestionPipeline
from ..deps import get_integrations, get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/test", tags=["diagnostics"])

SAMPLE_EXTRACTED = {
    "customerName": "John Smith",
    "customerPhone": "+1-555-123-4567",
    "pickupLocation": "Los Angeles, CA",
    "deliveryLocation": "Phoenix, AZ",
}


@router.post("/recording", status_code=status.HTTP_200_OK)
def test_recording(
    payload: RecordingTestRequest = Body(...),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> dict:
    """Run the recording pipeline synchronously with webhook-shaped input."""
    if not (payload.recording_url and payload.recording_sid and payload.call_sid and payload.recording_duration):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required parameters")
    try:
        duration = int(payload.recording_duration)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid RecordingDuration") from exc

    try:
        outcome = pipeline.process_recording(
            recording_sid=payload.recording_sid,
            call_sid=payload.call_sid,
            recording_url=payload.recording_url,
            duration=duration,
        )
    except LoadDeskError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    logger.info(f"Test recording processed successfully: {outcome.load_request.load_id}")
    return {
        "success": True,
        "result": {
            "loadRequest": LoadRequestModel.model_validate(outcome.load_request).model_dump(mode="json", by_alias=True),
            "transcription": outcome.transcription,
        },
    }


@router.post("/google-sheets", status_code=status.HTTP_200_OK)
def test_google_sheets(ctx: Integrations = Depends(get_integrations)) -> dict:
    """Create a sample load request and append it to the spreadsheet."""
    load = ctx.store.create_load_request(
        NewLoadRequest(
            customer_name="John Smith",
            customer_phone="+1-555-123-4567",
            pickup_location="Los Angeles, CA",
            pickup_address="123 Main St, Los Angeles, CA 90210",
            delivery_location="Phoenix, AZ",
            delivery_address="456 Oak Ave, Phoenix, AZ 85001",
            cargo_type="Electronics",
            weight="15000 lbs",
            truck_type="53ft Dry Van",
            pickup_time="2025-06-10 09:00",
            delivery_time="2025-06-11 15:00",
            deadline="2025-06-11 17:00",
            transcription="Test transcription for column mapping verification",
            extracted_data=json.dumps(SAMPLE_EXTRACTED),
        )
    )
    try:
        ctx.sheets.append_load_row(load)
    except LoadDeskError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return {
        "success": True,
        "message": "Test load request created and saved to Google Sheets",
        "loadId": load.load_id,
    }
