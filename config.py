# config.py
"""
Configuration for the RealAI prompt relay.

Usage:
    from config import load_settings
    s = load_settings()
    print(s.server_port)

Override via env vars (prefix REALAI_, case-insensitive) or a local .env, e.g.:
  GOOGLE_API_KEY=...                  (or REALAI_GOOGLE_API_KEY)
  REALAI_SERVER_PORT=1000
  REALAI_LOG_LEVEL=debug
  REALAI_CORS_ALLOW_ORIGINS='["http://localhost:5173"]'
  REALAI_MAX_BODY_BYTES=52428800
  REALAI_TEXT_MODEL=gemini-1.5-flash
  REALAI_EXPOSE_ERROR_DETAILS=false
"""
from __future__ import annotations

from typing import Any, List, Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.core.gateway import DEFAULT_IMAGE_QUESTION

LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class Settings(BaseSettings):
    # ---- Upstream (Gemini) ----
    google_api_key: SecretStr = Field(
        validation_alias=AliasChoices("REALAI_GOOGLE_API_KEY", "GOOGLE_API_KEY"),
    )
    text_model: str = "gemini-1.5-flash"
    vision_model: str = "gemini-1.5-flash"
    default_image_question: str = DEFAULT_IMAGE_QUESTION

    # ---- Server ----
    server_host: str = "0.0.0.0"
    server_port: int = 1000

    # Trusted front-end origins. Use '["*"]' for local development only.
    cors_allow_origins: List[str] = Field(
        default_factory=lambda: [
            "https://mrxai.netlify.app",
            "http://localhost:5173",
        ]
    )

    # Base64 images inflate by ~4/3, keep this well above the largest upload
    max_body_bytes: int = 50 * 1024 * 1024

    # Include the upstream message in error bodies (redacted)
    expose_error_details: bool = True

    # Logging
    log_level: LogLevel = "info"

    # Uvicorn
    uvicorn_access_log: bool = False

    model_config = SettingsConfigDict(
        env_prefix="REALAI_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def allow_any_origin(self) -> bool:
        return "*" in self.cors_allow_origins

    @field_validator("google_api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, v: Any) -> Any:
        raw = v.get_secret_value() if isinstance(v, SecretStr) else v
        if raw is None or not str(raw).strip():
            raise ValueError("an upstream API key is required (set GOOGLE_API_KEY)")
        return str(raw).strip()

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, v: str) -> LogLevel:
        vv = str(v).lower().strip()
        return vv if vv in {"debug", "info", "warning", "error", "critical"} else "info"  # type: ignore[return-value]

    @field_validator("max_body_bytes")
    @classmethod
    def _validate_max_body(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_body_bytes must be positive")
        return v

    @field_validator("default_image_question", mode="before")
    @classmethod
    def _validate_question(cls, v: Any) -> str:
        vv = str(v or "").strip()
        return vv or DEFAULT_IMAGE_QUESTION


def load_settings(**overrides: Any) -> Settings:
    """Build the process configuration. Called once at startup."""
    return Settings(**overrides)
