"""HTTP client for the Twilio REST API (call metadata and recording audio)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import Settings
from ...errors import TelephonyError

logger = logging.getLogger(__name__)


class TwilioClient:
    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        api_base_url: str = "https://api.twilio.com",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(cls, config: Settings) -> "TwilioClient":
        if not config.twilio_configured:
            logger.warning("Twilio credentials not found - recording downloads are disabled")
        return cls(
            account_sid=config.twilio_account_sid,
            auth_token=config.twilio_auth_token,
            api_base_url=config.twilio_api_base_url,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.account_sid and self.auth_token)

    def _account_url(self, path: str) -> str:
        return f"{self.api_base_url}/2010-04-01/Accounts/{self.account_sid}/{path}"

    def _get(self, url: str) -> httpx.Response:
        if not self.enabled:
            raise TelephonyError("Twilio credentials are not configured.")
        client = self._http_client or httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))
        try:
            response = client.get(url, auth=(self.account_sid, self.auth_token), follow_redirects=True)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as exc:
            raise TelephonyError(
                f"Twilio request to {url} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TelephonyError(f"Twilio request to {url} failed: {exc}") from exc
        finally:
            if self._http_client is None:
                client.close()

    def fetch_call(self, call_sid: str) -> dict[str, Any]:
        return self._get(self._account_url(f"Calls/{call_sid}.json")).json()

    def caller_number(self, call_sid: str) -> str:
        call = self.fetch_call(call_sid)
        number = call.get("from")
        if not number:
            raise TelephonyError(f"Call {call_sid} has no caller number.")
        return number

    def recording_media_url(self, recording_sid: str) -> str:
        recording = self._get(self._account_url(f"Recordings/{recording_sid}.json")).json()
        uri = recording.get("uri")
        if not uri:
            raise TelephonyError(f"Recording {recording_sid} has no media URI.")
        return f"{self.api_base_url}{uri.replace('.json', '.mp3')}"

    def download_recording(self, recording_sid: str | None, recording_url: str | None = None) -> bytes:
        """Download recording audio as MP3 bytes, by SID when known, else from the webhook URL."""
        if recording_sid:
            media_url = self.recording_media_url(recording_sid)
        elif recording_url:
            media_url = recording_url if recording_url.endswith(".mp3") else f"{recording_url}.mp3"
        else:
            raise TelephonyError("Neither a recording SID nor a recording URL was provided.")
        logger.info(f"Downloading audio from: {media_url}")
        return self._get(media_url).content
