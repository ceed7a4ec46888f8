"""
Application Configuration
=========================

Everything the service needs to know at startup comes from environment
variables (optionally loaded from a .env file).

ENVIRONMENT VARIABLES:
---------------------
    SUPABASE_URL                 Project URL (e.g. https://xyz.supabase.co)
    SUPABASE_KEY                 Service or anon key sent on every request
    TIMESTAMP_SOURCE             "server" (default) or "client"
    READING_MODE                 "upsert" (default) or "append"
    COMPACTION_MODE              "app" (default) or "rpc"
    RETENTION_LIMIT              Readings kept per device by compaction (default: 20)
    RECENT_LIMIT                 Rows returned by /fluxo/recentes (default: 20)
    REQUIRE_ADMIN_ID             "true" to make adminId mandatory on /fluxo-diario
    COMPACTION_INTERVAL_MINUTES  Scheduled compaction sweep, 0 disables (default: 0)
    REQUEST_TIMEOUT              Seconds to wait for the datastore (default: 30)
    CORS_ORIGINS                 Comma separated list, "*" allows everything
    LOG_LEVEL                    Python logging level name (default: INFO)
"""

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import find_dotenv, load_dotenv


class TimestampSource(str, Enum):
    """Who decides the reading timestamp."""
    SERVER = "server"
    CLIENT = "client"


class ReadingMode(str, Enum):
    """
    How raw readings are stored.

    - UPSERT: one row per device, each reading overwrites the previous one
    - APPEND: one row per reading, bounded only by compaction
    """
    UPSERT = "upsert"
    APPEND = "append"


class CompactionMode(str, Enum):
    """Where the keep-newest-K retention runs."""
    APP = "app"
    RPC = "rpc"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_key: str = ""

    timestamp_source: TimestampSource = TimestampSource.SERVER
    reading_mode: ReadingMode = ReadingMode.UPSERT
    compaction_mode: CompactionMode = CompactionMode.APP

    retention_limit: int = 20
    recent_limit: int = 20
    require_admin_id: bool = False

    compaction_interval_minutes: int = 0
    request_timeout: float = 30.0

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def get_settings() -> Settings:
    """
    Build Settings from the environment.

    A .env file in the working directory is loaded first, but real
    environment variables always win.

    Raises:
        ValueError: if one of the mode variables holds an unknown value
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)

    cors_raw = os.getenv("CORS_ORIGINS", "*")
    cors_origins = [origin.strip() for origin in cors_raw.split(",") if origin.strip()]

    return Settings(
        supabase_url=os.getenv("SUPABASE_URL", "").rstrip("/"),
        supabase_key=os.getenv("SUPABASE_KEY", ""),
        timestamp_source=TimestampSource(os.getenv("TIMESTAMP_SOURCE", "server").lower()),
        reading_mode=ReadingMode(os.getenv("READING_MODE", "upsert").lower()),
        compaction_mode=CompactionMode(os.getenv("COMPACTION_MODE", "app").lower()),
        retention_limit=int(os.getenv("RETENTION_LIMIT", "20")),
        recent_limit=int(os.getenv("RECENT_LIMIT", "20")),
        require_admin_id=_env_bool("REQUIRE_ADMIN_ID"),
        compaction_interval_minutes=int(os.getenv("COMPACTION_INTERVAL_MINUTES", "0")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
        cors_origins=cors_origins or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
