"""
Runtime settings loaded from the environment.

Values come from the process environment after `.env` has been read. The
signing secret has no default: the application refuses to start without it.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class Settings(BaseModel):
    """Typed runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    app_name: str = "Fresh Produce Platform"
    api_prefix: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    database_url: str = "sqlite:///./freshmarket.db"

    jwt_secret: str = Field(min_length=1)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = 10

    upload_dir: str = "uploads"

    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return value

    @field_validator("access_token_expire_minutes", "port", "smtp_port")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("api_prefix")
    @classmethod
    def validate_prefix(cls, value: str) -> str:
        if value and not value.startswith("/"):
            raise ValueError("api_prefix must start with '/'")
        return value.rstrip("/")

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_user and self.email_pass)


_ENV_FIELDS = {
    "APP_NAME": "app_name",
    "API_PREFIX": "api_prefix",
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
    "DATABASE_URL": "database_url",
    "JWT_SECRET": "jwt_secret",
    "JWT_ALGORITHM": "jwt_algorithm",
    "ACCESS_TOKEN_EXPIRE_MINUTES": "access_token_expire_minutes",
    "BCRYPT_ROUNDS": "bcrypt_rounds",
    "UPLOAD_DIR": "upload_dir",
    "EMAIL_USER": "email_user",
    "EMAIL_PASS": "email_pass",
    "SMTP_HOST": "smtp_host",
    "SMTP_PORT": "smtp_port",
}


def load_settings(*, load_env: bool = True) -> Settings:
    """Build settings from `.env` and the process environment."""

    if load_env:
        load_dotenv(override=False)

    values: dict[str, object] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()

    origins = os.getenv("CORS_ORIGINS")
    if origins:
        values["cors_origins"] = [item.strip() for item in origins.split(",") if item.strip()]

    if "jwt_secret" not in values:
        raise RuntimeError("JWT_SECRET environment variable is required but not set.")

    try:
        return Settings(**values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
