from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load project-root .env early so both pydantic-settings and any direct os.getenv access
# see consistent values, even if the process CWD is not the repo root.
_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_IN_TEST = (os.getenv("ENVIRONMENT") or "").lower() == "test" or bool(os.getenv("PYTEST_CURRENT_TEST"))
if _ENV_PATH.exists() and not _IN_TEST:
    load_dotenv(dotenv_path=_ENV_PATH, override=True)


def _parse_str_list(raw: Any) -> list[str]:
    if raw is None:
        return []

    items: list[Any]
    if isinstance(raw, (list, tuple, set)):
        items = list(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return []

        # Support JSON array string or comma-separated string.
        if s.startswith("["):
            try:
                parsed = json.loads(s)
                items = parsed if isinstance(parsed, list) else [parsed]
            except json.JSONDecodeError:
                items = [p.strip() for p in s.strip("[]").split(",")]
        else:
            items = [p.strip() for p in s.split(",")]
    else:
        items = [raw]

    values: list[str] = []
    for item in items:
        if item is None:
            continue
        value = str(item).strip()
        if value:
            values.append(value)
    return values


class Settings(BaseSettings):
    app_name: str = Field(default="Skill Gap Backend")
    api_prefix: str = Field(default="/api")
    version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=True)

    db_url: str | None = Field(default=None, validation_alias="DB_URL")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        validation_alias="CORS_ORIGINS",
    )

    # Course provider credentials. A provider without credentials returns no courses.
    coursera_api_key: str | None = Field(default=None, validation_alias="COURSERA_API_KEY")
    coursera_affiliate_id: str = Field(default="careerosapp", validation_alias="COURSERA_AFFILIATE_ID")
    udemy_client_id: str | None = Field(default=None, validation_alias="UDEMY_CLIENT_ID")
    udemy_client_secret: str | None = Field(default=None, validation_alias="UDEMY_CLIENT_SECRET")
    udemy_affiliate_id: str = Field(default="careerosapp", validation_alias="UDEMY_AFFILIATE_ID")

    # - JSON array string: COURSE_PROVIDERS=["Coursera","Udemy"]
    # - Comma-separated:   COURSE_PROVIDERS=Coursera,Udemy
    default_course_providers: list[str] = Field(
        default_factory=lambda: ["Coursera", "Udemy"],
        validation_alias="COURSE_PROVIDERS",
    )

    # O*NET web services (occupational taxonomy)
    onet_api_username: str | None = Field(default=None, validation_alias="ONET_API_USERNAME")
    onet_api_password: str | None = Field(default=None, validation_alias="ONET_API_PASSWORD")
    onet_api_base: str = Field(default="https://services.onetcenter.org/ws", validation_alias="ONET_API_BASE")

    http_timeout_seconds: float = Field(default=10.0, validation_alias="HTTP_TIMEOUT_SECONDS")
    taxonomy_cache_ttl_seconds: float = Field(default=24 * 60 * 60, validation_alias="TAXONOMY_CACHE_TTL_SECONDS")
    taxonomy_db_ttl_days: int = Field(default=30, validation_alias="TAXONOMY_DB_TTL_DAYS")
    course_cache_ttl_seconds: float = Field(default=60 * 60, validation_alias="COURSE_CACHE_TTL_SECONDS")

    @field_validator("cors_origins", "default_course_providers", mode="before")
    @classmethod
    def _validate_str_list(cls, v: Any) -> list[str]:
        return _parse_str_list(v)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def build_sqlalchemy_db_url(settings: Settings) -> str:
    if settings.db_url:
        return settings.db_url
    return "sqlite:///./dev.db"


def onet_configured(settings: Settings) -> bool:
    return bool(settings.onet_api_username and settings.onet_api_password)
