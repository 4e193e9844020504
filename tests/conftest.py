from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from loaddesk.config import Settings
from loaddesk.main import create_app
from loaddesk.persistence import AudioStorage, InMemoryRecordStore
from loaddesk.services.context import Integrations
from loaddesk.services.extraction import LoadExtractor
from loaddesk.services.notifications import NotificationDispatcher
from loaddesk.services.sheets import SheetsSync
from loaddesk.services.transcription import WhisperTranscriber

from fakes import FakeOpenAI, FakeTelephony, FakeWorksheet, RecordingEmailSender, RecordingSMSSender


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        upload_dir=tmp_path / "uploads",
        base_url="http://dispatch.test",
        owner_email="owner@example.com",
        owner_phone="+15550001111",
    )


@pytest.fixture
def make_integrations(test_settings: Settings) -> Callable[..., Integrations]:
    def _build(
        openai_client: FakeOpenAI | None = None,
        worksheet: FakeWorksheet | None = None,
        email: RecordingEmailSender | None = None,
        sms: RecordingSMSSender | None = None,
        telephony: FakeTelephony | None = None,
    ) -> Integrations:
        client = openai_client or FakeOpenAI()
        return Integrations(
            settings=test_settings,
            store=InMemoryRecordStore(load_code_prefix=test_settings.load_code_prefix),
            audio_storage=AudioStorage(root=test_settings.upload_dir),
            transcriber=WhisperTranscriber(client),
            extractor=LoadExtractor(client),
            notifier=NotificationDispatcher(email or RecordingEmailSender(), sms or RecordingSMSSender()),
            sheets=SheetsSync(None, None, None, worksheet=worksheet or FakeWorksheet()),
            telephony=telephony or FakeTelephony(),
        )

    return _build


@pytest.fixture
def integrations(make_integrations) -> Integrations:
    return make_integrations()


@pytest.fixture
def api_client(integrations: Integrations) -> TestClient:
    return TestClient(create_app(integrations))
