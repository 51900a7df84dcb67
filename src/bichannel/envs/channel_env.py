from __future__ import annotations

import logging
import os

from pydantic import BaseModel, field_validator

from ..crypto.signatures import DERB64, load_public_key_from_der_b64
from ..domain.channel.entities import DISPUTE_TIMEOUT


class Settings(BaseModel):
    """Typed channel-core settings built from CHANNEL_* environment variables."""

    database_url: str = "redis://localhost:6379/0"

    api_host: str = "0.0.0.0"
    api_port: int = 8002
    api_debug: bool = False
    api_cors_origins: list[str] = ["*"]

    app_name: str = "BiChannel"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    admin_identity: str
    dispute_timeout: int = DISPUTE_TIMEOUT

    @field_validator("admin_identity")
    @classmethod
    def validate_admin_identity(cls, v: str) -> str:
        """Validate that the admin identity is a base64 DER EC public key."""
        if not v:
            raise ValueError("Admin identity cannot be empty")
        try:
            load_public_key_from_der_b64(DERB64(v))
        except Exception as e:
            raise ValueError(f"Invalid admin identity: {e}") from e
        return v

    @field_validator("dispute_timeout")
    @classmethod
    def validate_dispute_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Dispute timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        database_url=os.environ.get("CHANNEL_DATABASE_URL", "redis://localhost:6379/0"),
        api_host=os.environ.get("CHANNEL_API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("CHANNEL_API_PORT", "8002")),
        api_debug=os.environ.get("CHANNEL_API_DEBUG", "false").lower() == "true",
        api_cors_origins=os.environ.get("CHANNEL_API_CORS_ORIGINS", "*").split(","),
        app_name=os.environ.get("CHANNEL_APP_NAME", "BiChannel"),
        app_version=os.environ.get("CHANNEL_APP_VERSION", "0.1.0"),
        log_level=os.environ.get("CHANNEL_LOG_LEVEL", "INFO"),
        admin_identity=os.environ.get("CHANNEL_ADMIN_IDENTITY", ""),
        dispute_timeout=int(
            os.environ.get("CHANNEL_DISPUTE_TIMEOUT", str(DISPUTE_TIMEOUT))
        ),
    )
