from __future__ import annotations
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

class Settings(BaseSettings):
    # App
    APP_ENV: str = Field("dev")
    APP_TITLE: str = "shelflife-api"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Optional[str] = None

    # DB (doar SQLite: versiunea schemei stă în PRAGMA user_version)
    DATABASE_URL: str = Field("sqlite:///./var/products.db", description="sqlite:///<path>")
    DB_ECHO: bool = False

    # Raport / grafic
    REPORT_LABEL: str = "消費期限までの日数"
    REPORT_TIMEZONE: Optional[str] = None  # ex. "Asia/Tokyo"; gol => data locală a host-ului

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("DATABASE_URL")
    @classmethod
    def _sqlite_only(cls, v: str) -> str:
        v = (v or "").strip()
        if not v.startswith("sqlite"):
            raise ValueError("DATABASE_URL must be a sqlite URL (e.g. sqlite:///./var/products.db)")
        return v

    @field_validator("REPORT_TIMEZONE")
    @classmethod
    def _known_timezone(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        if not v:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"REPORT_TIMEZONE must be an IANA time zone name, got {v!r}") from e
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

settings = Settings()
