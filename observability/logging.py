"""Logging setup for scheduled runs.

Every record carries the job's run id and the flow being executed, so a
single log file can hold many runs and still be grepped per flow:

    09:00:02 [INFO] [3f9a1c2e/research] pipeline: Search complete | results=7

Credentials from the configuration (API keys, the webhook URL) are masked
in every record before it reaches a handler.

Usage:
    >>> setup_logging(config)
    >>> set_run_context("3f9a1c2e")
    >>> set_flow_context("research")
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

LOG_FILE_NAME = "scout.log"
NOISY_LOGGERS = ("aiohttp", "asyncio", "httpx", "httpcore", "google_genai", "urllib3")
MASK = "***"

run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")
flow_var: contextvars.ContextVar[str] = contextvars.ContextVar("flow", default="-")

# Attributes every LogRecord has; anything else was passed via extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "run_id", "flow"}


def set_run_context(run_id: str) -> None:
    run_id_var.set(run_id)


def set_flow_context(flow: str) -> None:
    flow_var.set(flow)


def clear_context() -> None:
    run_id_var.set("-")
    flow_var.set("-")


class ContextFilter(logging.Filter):
    """Stamps run_id and flow onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        record.flow = flow_var.get()
        return True


class SecretFilter(logging.Filter):
    """Replaces configured secret values in the rendered message."""

    def __init__(self, secrets: list[str]):
        super().__init__()
        # Longest first so a key that contains another is fully masked
        self.secrets = sorted({s for s in secrets if len(s) >= 8}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        masked = message
        for secret in self.secrets:
            masked = masked.replace(secret, MASK)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "pipeline",
         "run_id": "3f9a1c2e", "flow": "research", "message": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "run_id": getattr(record, "run_id", "-"),
            "flow": getattr(record, "flow", "-"),
            "message": record.getMessage(),
        }
        if record.levelno >= logging.WARNING:
            data["source"] = f"{record.filename}:{record.lineno}"
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            data[key] = value

        return json.dumps(data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """TIMESTAMP [LEVEL] [run_id/flow] logger: message"""

    def __init__(self, include_date: bool = False):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(run_id)s/%(flow)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S",
        )


def _config_secrets(config: Any) -> list[str]:
    names = ("gemini_api_key", "tavily_api_key", "notion_api_key", "discord_webhook_url", "logfire_token")
    return [getattr(config, name, "") or "" for name in names]


def _file_handler(config: Any) -> logging.Handler:
    """Rotating file handler; size-based when LOG_MAX_BYTES is set, else daily."""
    config.log_dir.mkdir(parents=True, exist_ok=True)
    path = config.log_dir / LOG_FILE_NAME
    if config.log_max_bytes > 0:
        return RotatingFileHandler(
            path,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
    return TimedRotatingFileHandler(
        path,
        when="midnight",
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Configure console and rotating file logging on the root logger.

    The file handler always logs at DEBUG. If the log directory cannot be
    written, logging continues on the console only.

    Args:
        config: Configuration with log_dir, log_level, log_format,
            log_max_bytes and log_backup_count
        verbose: Force DEBUG on the console

    Returns:
        True if file logging is active
    """
    json_format = config.log_format == "json"
    filters: list[logging.Filter] = [ContextFilter(), SecretFilter(_config_secrets(config))]

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO))
    console.setFormatter(JsonFormatter() if json_format else TextFormatter())
    handlers: list[logging.Handler] = [console]

    file_logging = False
    try:
        file_handler = _file_handler(config)
    except OSError as e:
        print(
            f"Warning: cannot write logs to '{config.log_dir}': {e}. Logging to console only.",
            file=sys.stderr,
        )
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonFormatter() if json_format else TextFormatter(include_date=True))
        handlers.append(file_handler)
        file_logging = True

    for handler in handlers:
        for f in filters:
            handler.addFilter(f)
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return file_logging
