"""Explicit bundle of external clients, built once per application instance."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Settings
from ..db.supabase import get_supabase_client
from ..persistence import AudioStorage, InMemoryRecordStore, RecordStore, SupabaseRecordStore
from .extraction import LoadExtractor
from .llm import build_openai_client
from .notifications import EmailSender, NotificationDispatcher, SMSSender
from .sheets import SheetsSync
from .telephony import TwilioClient
from .transcription import WhisperTranscriber

logger = logging.getLogger(__name__)


@dataclass
class Integrations:
    """Everything the pipeline talks to. Tests build one of these with fakes."""

    settings: Settings
    store: RecordStore
    audio_storage: AudioStorage
    transcriber: WhisperTranscriber
    extractor: LoadExtractor
    notifier: NotificationDispatcher
    sheets: SheetsSync
    telephony: TwilioClient

    def status(self) -> dict[str, bool]:
        return {
            "store_persistent": isinstance(self.store, SupabaseRecordStore),
            "transcription": self.transcriber.enabled,
            "extraction": self.extractor.enabled,
            "email": self.notifier.email.enabled,
            "sms": self.notifier.sms.enabled,
            "sheets": self.sheets.enabled,
            "telephony": self.telephony.enabled,
        }


def build_record_store(config: Settings) -> RecordStore:
    if config.store_backend == "supabase":
        client = get_supabase_client(config.supabase_url, config.supabase_key)
        if client is not None:
            logger.info("Using Supabase record store")
            return SupabaseRecordStore(client, load_code_prefix=config.load_code_prefix)
        logger.warning("Supabase store requested but not configured - falling back to in-memory store")
    return InMemoryRecordStore(load_code_prefix=config.load_code_prefix)


def build_integrations(config: Settings) -> Integrations:
    """Construct every client from settings; a missing credential disables only its integration."""
    openai_client = build_openai_client(config)
    return Integrations(
        settings=config,
        store=build_record_store(config),
        audio_storage=AudioStorage(root=config.upload_dir),
        transcriber=WhisperTranscriber(openai_client, model=config.transcription_model),
        extractor=LoadExtractor(openai_client, model=config.extraction_model),
        notifier=NotificationDispatcher(EmailSender(config), SMSSender(config)),
        sheets=SheetsSync.from_settings(config),
        telephony=TwilioClient.from_settings(config),
    )
