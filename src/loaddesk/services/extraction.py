"""Language-model adapter that turns a transcript into structured load fields."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..errors import ExtractionError
from ..schemas.extraction import REQUIRED_FIELDS, ExtractedLoad

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = """You are an expert at extracting trucking load information from phone call transcriptions.
Extract the following information and respond with JSON in this exact format:
{
  "customerName": "string",
  "customerPhone": "string",
  "pickupLocation": "string (city, state)",
  "pickupAddress": "string (full address)",
  "deliveryLocation": "string (city, state)",
  "deliveryAddress": "string (full address)",
  "cargoType": "string (description of what's being shipped)",
  "weight": "string (weight with units)",
  "truckType": "string (type of truck/trailer needed)",
  "pickupTime": "string (optional - pickup time window)",
  "deliveryTime": "string (optional - delivery time window)",
  "deadline": "string (optional - deadline for delivery)"
}

If any information is not clearly stated, make reasonable inferences based on the cargo type and context.
For truck type, common options are: Box Truck, Dry Van, Flatbed, Reefer, Step Deck, Lowboy.
Extract phone numbers in format (XXX) XXX-XXXX.
For locations, provide city and state even if full address isn't given."""

SUMMARY_SYSTEM_PROMPT = (
    "Create a concise, professional summary of this load request for email notification "
    "to the trucking company owner. Include all key details in a clear, actionable format."
)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Either the validated fields or the name of the first missing required field."""

    fields: ExtractedLoad | None = None
    missing_field: str | None = None

    @classmethod
    def ok(cls, fields: ExtractedLoad) -> "ExtractionResult":
        return cls(fields=fields)

    @classmethod
    def missing(cls, field_name: str) -> "ExtractionResult":
        return cls(missing_field=field_name)

    @property
    def is_ok(self) -> bool:
        return self.fields is not None

    def unwrap(self) -> ExtractedLoad:
        if self.fields is None:
            raise ExtractionError(
                f"Failed to extract load information: missing required field: {self.missing_field}",
                missing_field=self.missing_field,
            )
        return self.fields


def validate_extraction(payload: dict[str, Any]) -> ExtractionResult:
    """Check required fields are present and non-empty, then build the typed record."""
    for field_name in REQUIRED_FIELDS:
        value = payload.get(field_name)
        if value is None or not str(value).strip():
            return ExtractionResult.missing(field_name)
    try:
        return ExtractionResult.ok(ExtractedLoad.model_validate(payload))
    except ValidationError as exc:
        raise ExtractionError(f"Failed to extract load information: {exc}") from exc


def fallback_summary(fields: ExtractedLoad) -> str:
    """Plain-text summary used when the language model cannot produce one."""
    lines = [
        f"Customer: {fields.customer_name}",
        f"Phone: {fields.customer_phone or 'not provided'}",
        f"Route: {fields.route}",
        f"Cargo: {fields.cargo_type} ({fields.weight})",
        f"Truck: {fields.truck_type}",
    ]
    if fields.pickup_time:
        lines.append(f"Pickup: {fields.pickup_time}")
    if fields.delivery_time:
        lines.append(f"Delivery: {fields.delivery_time}")
    if fields.deadline:
        lines.append(f"Deadline: {fields.deadline}")
    return "\n".join(lines)


class LoadExtractor:
    """Wraps the chat-completions call that maps free text to :class:`ExtractedLoad`.

    Extraction is not deterministic: the model is told to infer missing values, so the
    same transcript can produce different field values. Only the schema shape and the
    presence of required fields are guaranteed.
    """

    def __init__(self, client: Any | None, model: str = "gpt-4o") -> None:
        self.client = client
        self.model = model

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _complete(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        response = self.client.chat.completions.create(model=self.model, messages=messages, **kwargs)
        return response.choices[0].message.content or ""

    def extract(self, transcription: str) -> ExtractionResult:
        if not transcription or not transcription.strip():
            raise ExtractionError("Failed to extract load information: transcription is empty")
        if self.client is None:
            raise ExtractionError("Failed to extract load information: extraction service is not configured")

        try:
            content = self._complete(
                [
                    {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": f'Extract load information from this call transcription: "{transcription}"',
                    },
                ],
                response_format={"type": "json_object"},
            )
        except Exception as exc:
            logger.error(f"Error extracting load info: {exc}")
            raise ExtractionError(f"Failed to extract load information: {exc}") from exc

        try:
            payload = json.loads(content or "{}")
        except json.JSONDecodeError as exc:
            raise ExtractionError(f"Failed to extract load information: response was not JSON ({exc})") from exc
        if not isinstance(payload, dict):
            raise ExtractionError("Failed to extract load information: response was not a JSON object")

        result = validate_extraction(payload)
        if not result.is_ok:
            logger.warning(f"Extraction response missing required field: {result.missing_field}")
        return result

    def summarize(self, fields: ExtractedLoad) -> str:
        if self.client is None:
            return fallback_summary(fields)
        content = self._complete(
            [
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": f"Create a summary for this load request: {fields.to_json()}"},
            ]
        )
        return content.strip() or fallback_summary(fields)
