"""canpi-config settings via environment / .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_STATIC_DIR = Path(__file__).resolve().parent / "static"


class CanpiSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CANPI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Files ---
    DEFN_FILE: Path = _STATIC_DIR / "canpi-config-defn.json"
    CFG_FILE: Path = Path("/home/pi/canpi/canpi.cfg")
    SCHEMA_FILE: Optional[Path] = None

    # --- Value file ---
    SECTIONS: list[str] = []
    BACKUP_ON_WRITE: bool = True

    # --- Logging ---
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @field_validator("SCHEMA_FILE", mode="before")
    @classmethod
    def _empty_schema(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def section_names(self) -> list[Optional[str]]:
        """Sections to read from the value file; None is the unnamed section."""
        return [name or None for name in self.SECTIONS] or [None]


def get_settings() -> CanpiSettings:
    return CanpiSettings()
