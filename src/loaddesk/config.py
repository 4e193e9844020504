"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="LOADDESK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Load Desk API"
    company_name: str = "Expedite Transport"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level applied when the app starts.")
    base_url: str = Field(
        default="http://localhost:5000",
        description="Public base URL used to build approve/reject links and webhook callbacks.",
    )
    load_code_prefix: str = Field(default="EXT", min_length=1, max_length=8)
    revenue_per_approved_load: int = Field(default=2500, ge=0, description="Mock revenue per approved load.")
    upload_dir: Path = Field(default=Path("uploads"), description="Scratch directory for temporary audio files.")
    max_upload_bytes: int = Field(default=25 * 1024 * 1024, ge=1)
    allowed_audio_types: tuple[str, ...] = Field(
        default=("audio/mpeg", "audio/wav", "audio/mp4", "audio/m4a"),
        description="MIME types accepted by the audio upload endpoint.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5000",
            "http://127.0.0.1:5000",
            "http://localhost:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Storage backend
    store_backend: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Record store engine. 'supabase' requires supabase_url and supabase_key.",
    )
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL.")
    supabase_key: Optional[str] = Field(default=None, description="Supabase service role key.")

    # Telephony (Twilio)
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None
    twilio_api_base_url: str = "https://api.twilio.com"
    twilio_voice: str = "Polly.Joanna-Neural"
    max_recording_seconds: int = Field(default=300, ge=1)

    # Owner contact
    owner_email: str = "owner@trucking.com"
    owner_phone: str = "+1 (555) 999-8888"

    # Language model / transcription (OpenAI)
    openai_api_key: Optional[str] = None
    transcription_model: str = "whisper-1"
    extraction_model: str = "gpt-4o"
    llm_timeout_seconds: float = Field(default=60.0, gt=0.0)

    # Email (SMTP)
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from_address: Optional[str] = None

    # Google Sheets
    google_sheets_id: Optional[str] = None
    google_sheets_client_email: Optional[str] = None
    google_sheets_private_key: Optional[str] = None
    google_sheets_sheet_name: str = "Load_Requests"

    @field_validator("upload_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("google_sheets_private_key", mode="before")
    @classmethod
    def _unescape_private_key(cls, value: Any) -> Optional[str]:
        """Service-account keys are usually pasted into env files with literal \\n sequences."""
        if value is None:
            return None
        return str(value).replace("\\n", "\n")

    @field_validator("frontend_allowed_origins", "allowed_audio_types", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def twilio_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token)

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_username and self.smtp_password)

    @property
    def sheets_configured(self) -> bool:
        return bool(
            self.google_sheets_id
            and self.google_sheets_client_email
            and self.google_sheets_private_key
        )

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


settings = Settings()
