import logging
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from loaddesk.main import create_app
from loaddesk.models.domain import CallStatus
from loaddesk.persistence import InMemoryRecordStore, NewLoadRequest
from loaddesk.services import load_requests as load_requests_service

from fakes import DALLAS_PAYLOAD, FakeOpenAI, FakeWorksheet

AUDIO_FILE = {"audio": ("dispatch-call.mp3", b"ID3 fake audio", "audio/mpeg")}


def _seed_load(store, name: str = "Seeded Shipper"):
    return store.create_load_request(
        NewLoadRequest(
            customer_name=name,
            pickup_location="Tulsa, OK",
            delivery_location="Omaha, NE",
            cargo_type="Steel coils",
            weight="44000 lbs",
            truck_type="Flatbed",
        )
    )


def test_health_endpoints(api_client: TestClient) -> None:
    assert api_client.get("/api/health").json() == {"status": "ok"}

    integrations = api_client.get("/api/health/integrations").json()["integrations"]
    assert integrations["store_persistent"] is False
    assert integrations["transcription"] is True


def test_upload_audio_happy_path(api_client: TestClient, integrations) -> None:
    response = api_client.post("/api/upload-audio", files=AUDIO_FILE)

    assert response.status_code == 200
    body = response.json()
    assert body["loadRequest"]["pickupLocation"] == "Dallas, TX"
    assert body["loadRequest"]["status"] == "pending"
    assert body["loadRequest"]["notificationSent"] is True
    assert body["extractedData"]["truckType"] == "Reefer"
    assert body["transcription"].startswith("Hi, this is Maria")
    assert body["message"] == "Audio processed successfully and notifications sent"

    listed = api_client.get("/api/load-requests").json()
    assert listed[0]["pickupLocation"] == "Dallas, TX"
    assert list(integrations.audio_storage.root.iterdir()) == []


def test_upload_without_file_is_rejected(api_client: TestClient) -> None:
    response = api_client.post("/api/upload-audio")

    assert response.status_code == 400
    assert response.json()["detail"] == "No audio file uploaded"


def test_upload_with_wrong_type_is_rejected(api_client: TestClient, integrations) -> None:
    response = api_client.post("/api/upload-audio", files={"audio": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 415
    assert integrations.store.list_call_logs() == []


def test_upload_succeeds_when_spreadsheet_is_down(make_integrations) -> None:
    client = TestClient(create_app(make_integrations(worksheet=FakeWorksheet(fail=True))))

    response = client.post("/api/upload-audio", files=AUDIO_FILE)

    assert response.status_code == 200
    assert response.json()["loadRequest"]["loadId"].startswith("EXT-")


def test_upload_extraction_failure_returns_500(make_integrations) -> None:
    payload = {key: value for key, value in DALLAS_PAYLOAD.items() if key != "weight"}
    client = TestClient(create_app(make_integrations(openai_client=FakeOpenAI(payload=payload))))

    response = client.post("/api/upload-audio", files=AUDIO_FILE)

    assert response.status_code == 500
    assert "Failed to process audio file" in response.json()["detail"]
    assert "weight" in response.json()["detail"]


class BrokenStore(InMemoryRecordStore):
    def create_load_request(self, fields):
        raise RuntimeError("database unavailable")


def test_upload_unexpected_failure_returns_json_500(make_integrations) -> None:
    ctx = make_integrations()
    ctx.store = BrokenStore()
    client = TestClient(create_app(ctx))

    response = client.post("/api/upload-audio", files=AUDIO_FILE)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to process audio file: database unavailable"


def test_upload_too_large_returns_413(api_client: TestClient, integrations) -> None:
    integrations.settings.max_upload_bytes = 8

    response = api_client.post("/api/upload-audio", files=AUDIO_FILE)

    assert response.status_code == 413


def test_approving_twice_restamps_decision_time(
    api_client: TestClient, integrations, monkeypatch: pytest.MonkeyPatch
) -> None:
    load = _seed_load(integrations.store)
    first = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
    stamps = iter([first, first + timedelta(minutes=5)])
    monkeypatch.setattr(load_requests_service, "utcnow", lambda: next(stamps))

    one = api_client.post(f"/api/load-requests/{load.id}/approve").json()
    two = api_client.post(f"/api/load-requests/{load.id}/approve").json()

    assert one["message"] == "Load request approved successfully"
    assert one["loadRequest"]["status"] == two["loadRequest"]["status"] == "approved"
    assert one["loadRequest"]["approvedAt"] != two["loadRequest"]["approvedAt"]


def test_approve_updates_spreadsheet_row(make_integrations) -> None:
    worksheet = FakeWorksheet()
    client = TestClient(create_app(make_integrations(worksheet=worksheet)))
    created = client.post("/api/upload-audio", files=AUDIO_FILE).json()["loadRequest"]

    client.post(f"/api/load-requests/{created['id']}/reject")

    assert worksheet.rows[0][0] == created["loadId"]
    assert worksheet.rows[0][13] == "rejected"


def test_opposite_decision_is_a_conflict(api_client: TestClient, integrations) -> None:
    load = _seed_load(integrations.store)
    api_client.post(f"/api/load-requests/{load.id}/approve")

    response = api_client.post(f"/api/load-requests/{load.id}/reject")

    assert response.status_code == 409
    assert integrations.store.get_load_request(load.id).status.value == "approved"


def test_unknown_load_request_is_404(api_client: TestClient) -> None:
    assert api_client.get("/api/load-requests/999").status_code == 404
    assert api_client.post("/api/load-requests/999/approve").status_code == 404
    assert api_client.post("/api/load-requests/999/reject").status_code == 404


def test_metrics_counts(api_client: TestClient, integrations) -> None:
    loads = [_seed_load(integrations.store, f"Shipper {index}") for index in range(3)]
    api_client.post(f"/api/load-requests/{loads[0].id}/approve")
    api_client.post("/api/simulate-call", json={})

    metrics = api_client.get("/api/metrics").json()

    assert metrics == {
        "callsToday": 1,
        "loadsProcessed": 3,
        "pendingApproval": 2,
        "revenue": 2500,
        "totalLoads": 3,
        "totalCalls": 1,
    }


def test_simulate_call_and_call_logs(api_client: TestClient) -> None:
    default = api_client.post("/api/simulate-call").json()
    custom = api_client.post("/api/simulate-call", json={"phoneNumber": "+14045550100"}).json()

    assert default["status"] == "Call simulation started"
    logs = api_client.get("/api/call-logs").json()
    assert [log["id"] for log in logs] == [custom["callId"], default["callId"]]
    assert logs[0]["phoneNumber"] == "+14045550100"
    assert logs[1]["phoneNumber"] == "+1 (555) 123-4567"
    assert logs[1]["status"] == CallStatus.SIMULATED


def test_voice_webhook_threads_call_log_id(api_client: TestClient, integrations) -> None:
    response = api_client.post("/api/telephony/voice", data={"From": "+19725550123", "CallSid": "CA1"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/xml")
    call = integrations.store.get_call_log_by_call_sid("CA1")
    assert call.status == CallStatus.IN_PROGRESS
    assert f"/api/telephony/recording?call_log_id={call.id}" in response.text


def test_recording_webhook_acknowledges_even_when_processing_fails(make_integrations, caplog) -> None:
    caplog.set_level(logging.INFO)
    ctx = make_integrations(openai_client=FakeOpenAI(transcription_error=RuntimeError("whisper down")))
    client = TestClient(create_app(ctx))
    call = client.post("/api/telephony/voice", data={"From": "+19725550123", "CallSid": "CA2"})
    call_log_id = ctx.store.get_call_log_by_call_sid("CA2").id

    response = client.post(
        f"/api/telephony/recording?call_log_id={call_log_id}",
        data={"RecordingSid": "RE2", "CallSid": "CA2", "RecordingUrl": "https://rec/RE2", "RecordingDuration": "31"},
    )

    assert call.status_code == 200
    assert response.status_code == 200
    assert "<Hangup" in response.text
    assert "Background job 'recording:RE2' failed" in caplog.text
    assert ctx.store.get_call_log(call_log_id).status == CallStatus.FAILED
    assert ctx.store.list_load_requests() == []


def test_recording_webhook_creates_load(api_client: TestClient, integrations) -> None:
    api_client.post("/api/telephony/voice", data={"From": "+19725550123", "CallSid": "CA3"})
    call_log_id = integrations.store.get_call_log_by_call_sid("CA3").id

    api_client.post(
        f"/api/telephony/recording?call_log_id={call_log_id}",
        data={"RecordingSid": "RE3", "CallSid": "CA3", "RecordingDuration": "abc"},
    )

    call = integrations.store.get_call_log(call_log_id)
    assert call.status == CallStatus.PROCESSED
    assert integrations.store.get_load_request(call.load_request_id).customer_name == "Maria Lopez"


def test_sms_webhook_creates_load(api_client: TestClient, integrations) -> None:
    response = api_client.post(
        "/api/telephony/sms",
        data={"From": "+13125550111", "Body": "Reefer Dallas to Denver, 40k lbs", "MessageSid": "SM9"},
    )

    assert response.status_code == 200
    assert "<Message>" in response.text
    call = integrations.store.get_call_log_by_call_sid("SM9")
    assert call.status == CallStatus.PROCESSED
    assert call.transcription == "Reefer Dallas to Denver, 40k lbs"
    assert len(integrations.store.list_load_requests()) == 1


def test_recording_diagnostic_validates_input(api_client: TestClient) -> None:
    missing = api_client.post("/api/test/recording", json={"RecordingSid": "RE1"})
    bad_duration = api_client.post(
        "/api/test/recording",
        json={"RecordingUrl": "https://rec/RE1", "RecordingSid": "RE1", "CallSid": "CA1", "RecordingDuration": "x"},
    )

    assert missing.status_code == 400
    assert missing.json()["detail"] == "Missing required parameters"
    assert bad_duration.status_code == 400
    assert bad_duration.json()["detail"] == "Invalid RecordingDuration"


def test_recording_diagnostic_runs_pipeline(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/test/recording",
        json={"RecordingUrl": "https://rec/RE5", "RecordingSid": "RE5", "CallSid": "CA5", "RecordingDuration": "20"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"]["loadRequest"]["deliveryLocation"] == "Denver, CO"


def test_sheets_diagnostic_appends_sample_load(make_integrations) -> None:
    worksheet = FakeWorksheet()
    client = TestClient(create_app(make_integrations(worksheet=worksheet)))

    body = client.post("/api/test/google-sheets").json()

    assert body["success"] is True
    assert worksheet.rows[0][0] == body["loadId"]


def test_startup_writes_sheet_header(make_integrations) -> None:
    worksheet = FakeWorksheet()

    with TestClient(create_app(make_integrations(worksheet=worksheet))) as client:
        assert client.get("/").json()["status"] == "running"

    assert worksheet.header[0] == "Load ID"


def test_app_applies_configured_log_level(make_integrations) -> None:
    root = logging.getLogger()
    previous = root.level
    ctx = make_integrations()
    ctx.settings.log_level = "debug"

    try:
        create_app(ctx)
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)
