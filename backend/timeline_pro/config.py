"""
Configuration settings using Pydantic Settings.

Runtime credentials are resolved once at startup by ``resolve_runtime_config``
into a frozen ``RuntimeConfig``. Sources, lowest precedence first:

1. Built-in defaults (no database credentials, tenant ``timeline-pro-v2``).
2. Sandbox injection (``SANDBOX_DATABASE_CONFIG``, ``SANDBOX_APP_ID``,
   ``SANDBOX_AUTH_TOKEN``). Its presence switches on sandbox mode.
3. Deployment environment (``DATABASE_CONFIG``, ``APP_ID``, ``GEMINI_API_KEY``).
"""

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parents[1]

DEFAULT_TENANT_ID = "timeline-pro-v2"
SANDBOX_TENANT_ID = "timeline-pro-sandbox"

logger = logging.getLogger('timeline_pro.config')


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    GEMINI_API_KEY: str = ""
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-2.5-flash-preview-09-2025"

    HTTP_TIMEOUT_SECONDS: float = 60.0
    FETCH_MAX_ATTEMPTS: int = 5
    FETCH_RETRY_BASE_SECONDS: float = 1.0
    FETCH_RETRY_MAX_SECONDS: float = 16.0

    IMAGE_WIDTH: int = 1000
    RESEARCH_EVENT_COUNT: int = 35
    DEFAULT_ZOOM_LEVEL: int = 5
    MAX_WORKSPACE_SESSIONS: int = 1000

    DATABASE_PATH: str = "database/timelines.db"

    # Deployment sources
    DATABASE_CONFIG: str = ""
    APP_ID: str = ""

    # Sandbox injection
    SANDBOX_DATABASE_CONFIG: str = ""
    SANDBOX_APP_ID: str = ""
    SANDBOX_AUTH_TOKEN: str = ""

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    DEBUG: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }

    @model_validator(mode="after")
    def resolve_relative_paths(self):
        db_path = Path(self.DATABASE_PATH)
        if not db_path.is_absolute():
            self.DATABASE_PATH = str((BASE_DIR / db_path).resolve())
        return self


@dataclass(frozen=True)
class RuntimeConfig:
    """Credentials and tenancy resolved once at startup."""

    database_credentials: Optional[dict[str, Any]] = None
    ai_api_key: str = ""
    tenant_id: str = DEFAULT_TENANT_ID
    is_sandbox_mode: bool = False
    initial_auth_token: Optional[str] = field(default=None, repr=False)


def _parse_json_config(raw: str, source: str) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Ignoring malformed {source}: {e}")
        return None
    if not isinstance(parsed, dict):
        logger.error(f"Ignoring {source}: expected a JSON object")
        return None
    return parsed


def resolve_runtime_config(settings: Settings) -> RuntimeConfig:
    """
    Resolve runtime credentials from all configuration sources.

    :param settings: Loaded application settings
    :type settings: Settings
    :return: Frozen runtime configuration
    :rtype: RuntimeConfig
    """
    credentials: Optional[dict[str, Any]] = None
    tenant_id = DEFAULT_TENANT_ID
    is_sandbox = False
    initial_token: Optional[str] = None

    sandbox_credentials = _parse_json_config(
        settings.SANDBOX_DATABASE_CONFIG, "SANDBOX_DATABASE_CONFIG"
    )
    if sandbox_credentials is not None:
        credentials = sandbox_credentials
        is_sandbox = True
        tenant_id = settings.SANDBOX_APP_ID or SANDBOX_TENANT_ID
        initial_token = settings.SANDBOX_AUTH_TOKEN or None

    deployment_credentials = _parse_json_config(settings.DATABASE_CONFIG, "DATABASE_CONFIG")
    if deployment_credentials is not None:
        credentials = deployment_credentials
    if settings.APP_ID:
        tenant_id = settings.APP_ID

    return RuntimeConfig(
        database_credentials=credentials,
        ai_api_key=settings.GEMINI_API_KEY,
        tenant_id=str(tenant_id).replace("/", "_"),
        is_sandbox_mode=is_sandbox,
        initial_auth_token=initial_token,
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: Cached Settings instance
    :rtype: Settings
    """
    return Settings()


settings = get_settings()
