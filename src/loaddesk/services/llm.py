"""OpenAI client construction shared by the transcription and extraction adapters."""

from __future__ import annotations

import logging

from openai import OpenAI

from ..config import Settings

logger = logging.getLogger(__name__)


def build_openai_client(config: Settings) -> OpenAI | None:
    """Return an OpenAI client, or None when no API key is configured."""
    if not config.openai_configured:
        logger.warning("OpenAI API key not found - transcription and extraction are disabled")
        return None
    return OpenAI(
        api_key=config.openai_api_key,
        timeout=config.llm_timeout_seconds,
        max_retries=0,
    )
