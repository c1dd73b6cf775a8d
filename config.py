"""Scout configuration, read once from the environment at startup.

Required (a run refuses to start without them):
    GEMINI_API_KEY            Gemini API key
    TAVILY_API_KEY            Tavily search key
    DISCORD_WEBHOOK_URL       Chat webhook receiving the daily message
    NOTION_API_KEY            Notion integration token
    NOTION_AI_RESEARCH_DB_ID  Notion database receiving one page per flow

Generation:
    PRIMARY_MODEL / SECONDARY_MODEL   Failover pair (first overload switches)
    MAX_RETRIES                       Attempts per generation call (3)
    RETRY_BASE_DELAY                  Backoff base in seconds (2.0)

Job:
    FLOWS                     Comma-separated flows for `scout run` (research,apps)
    HTTP_TIMEOUT_SECONDS      Total timeout for search and sink requests
    NOTION_VERSION            Notion-Version header
    NOTION_STATUS             Status select on new pages

Observability:
    LOG_DIR, LOG_LEVEL, LOG_FORMAT (text|json), LOG_MAX_BYTES (0 = daily
    rotation), LOG_BACKUP_COUNT, ENABLE_LOGFIRE, LOGFIRE_TOKEN
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TypeVar

N = TypeVar("N", int, float)

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_number(key: str, default: N, parse: Callable[[str], N]) -> N:
    """Parse a numeric variable; unset or empty means default.

    Raises:
        ValueError: If the value is set but does not parse
    """
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        kind = "an integer" if parse is int else "a number"
        raise ValueError(f"{key} must be {kind}, got '{raw}'") from None


def _env_int(key: str, default: int) -> int:
    return _env_number(key, default, int)


def _env_float(key: str, default: float) -> float:
    return _env_number(key, default, float)


def _env_bool(key: str, default: bool = False) -> bool:
    raw = os.environ.get(key, "").strip().lower()
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    return default


def _env_list(key: str, default: list[str]) -> list[str]:
    """Comma-separated list; blank entries are dropped."""
    items = [item.strip() for item in os.environ.get(key, "").split(",")]
    return [item for item in items if item] or list(default)


DEFAULT_FLOWS = ["research", "apps"]


@dataclass
class Config:
    """Settings for one scout process.

    Built by Config.load(); nothing mutates it after the job starts.
    validate() reports the first problem as a message instead of raising, so
    the CLI can print it and exit before any flow runs.
    """

    # Credentials
    gemini_api_key: str = ""  # GEMINI_API_KEY
    tavily_api_key: str = ""  # TAVILY_API_KEY

    # Sinks
    discord_webhook_url: str = ""  # DISCORD_WEBHOOK_URL
    notion_api_key: str = ""  # NOTION_API_KEY
    notion_database_id: str = ""  # NOTION_AI_RESEARCH_DB_ID
    notion_version: str = "2022-06-28"  # NOTION_VERSION
    notion_status: str = "New"  # NOTION_STATUS - Status select on new pages

    # Generation
    primary_model: str = "gemini-2.5-flash"  # PRIMARY_MODEL
    secondary_model: str = "gemini-2.5-flash-preview-09-2025"  # SECONDARY_MODEL

    max_retries: int = 3  # MAX_RETRIES - Generation attempts per call
    retry_base_delay: float = 2.0  # RETRY_BASE_DELAY - Seconds, multiplied by attempt index

    # Job
    flows: list[str] = field(default_factory=lambda: DEFAULT_FLOWS.copy())  # FLOWS
    http_timeout_seconds: float = 30.0  # HTTP_TIMEOUT_SECONDS

    # Logging
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR
    log_level: str = "INFO"  # LOG_LEVEL
    log_backup_count: int = 30  # LOG_BACKUP_COUNT
    log_max_bytes: int = 0  # LOG_MAX_BYTES, 0 rotates daily
    log_format: str = "text"  # LOG_FORMAT, text or json

    # Tracing (pip install 'scout[tracing]')
    enable_logfire: bool = False  # ENABLE_LOGFIRE
    logfire_token: str = ""  # LOGFIRE_TOKEN

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            gemini_api_key=_env("GEMINI_API_KEY"),
            tavily_api_key=_env("TAVILY_API_KEY"),
            discord_webhook_url=_env("DISCORD_WEBHOOK_URL"),
            notion_api_key=_env("NOTION_API_KEY"),
            notion_database_id=_env("NOTION_AI_RESEARCH_DB_ID"),
            notion_version=_env("NOTION_VERSION", "2022-06-28"),
            notion_status=_env("NOTION_STATUS", "New"),
            primary_model=_env("PRIMARY_MODEL", "gemini-2.5-flash"),
            secondary_model=_env("SECONDARY_MODEL", "gemini-2.5-flash-preview-09-2025"),
            max_retries=_env_int("MAX_RETRIES", 3),
            retry_base_delay=_env_float("RETRY_BASE_DELAY", 2.0),
            flows=_env_list("FLOWS", DEFAULT_FLOWS),
            http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", 30.0),
            log_dir=Path(_env("LOG_DIR", "log")),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> str | None:
        """Validate configuration for required fields and valid values.

        Missing credentials or destinations are startup-fatal: the caller
        reports the message and exits without attempting any flow.

        Returns:
            Error message string if invalid, None if valid.
        """
        required = (
            ("GEMINI_API_KEY", self.gemini_api_key),
            ("TAVILY_API_KEY", self.tavily_api_key),
            ("DISCORD_WEBHOOK_URL", self.discord_webhook_url),
            ("NOTION_API_KEY", self.notion_api_key),
            ("NOTION_AI_RESEARCH_DB_ID", self.notion_database_id),
        )
        for name, value in required:
            if not value:
                return f"{name} environment variable is required"
        if not self.primary_model or not self.secondary_model:
            return "PRIMARY_MODEL and SECONDARY_MODEL must not be empty"
        if self.max_retries <= 0:
            return "MAX_RETRIES must be positive"
        if self.retry_base_delay < 0:
            return "RETRY_BASE_DELAY must be non-negative"
        if self.http_timeout_seconds <= 0:
            return "HTTP_TIMEOUT_SECONDS must be positive"
        if not self.flows:
            return "No flows configured"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
