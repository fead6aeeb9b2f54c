"""
Application settings.

Load order (each layer overrides the previous):
  1. field defaults below
  2. ``.env`` in the working directory (optional)
  3. environment variables with the ``MEDIASHELF_`` prefix
"""

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

ENV_PREFIX = "MEDIASHELF_"


class Settings(BaseModel):
    """Runtime configuration. Every field can be overridden by MEDIASHELF_<NAME>."""

    model_config = ConfigDict(frozen=True)

    # ── Database ───────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./mediashelf.db"
    database_echo: bool = False
    create_schema_on_startup: bool = True

    # ── Service ────────────────────────────────────
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from ``.env`` and ``MEDIASHELF_*`` variables."""
    if environ is None:
        load_dotenv(override=False)
        environ = dict(os.environ)

    raw = {
        name: environ[ENV_PREFIX + name.upper()]
        for name in Settings.model_fields
        if ENV_PREFIX + name.upper() in environ
    }
    return Settings(**raw)


settings = load_settings()
