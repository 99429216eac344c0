"""
Centralized logging configuration for GupAI.

Both front ends call ``setup_logging`` once at startup: the stub server from
its lifespan hook, the terminal chat before its event loop starts. Records go
to a colored console stream and/or a rotating file of JSON lines. Module code
only ever uses ``logging.getLogger(__name__)`` and passes structured data as
``extra={"extra_fields": {...}}``.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PLAIN_FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """Console formatter that pads and colors the level name."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers share this record; restore the plain level name afterwards
        plain = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        record.levelname = f"{color}{plain:8s}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra_fields`` merged in at top level."""

    def __init__(self, static_fields: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
            **self.static_fields,
        }

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            entry.update(extra_fields)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def _console_handler(level: int) -> logging.Handler:
    # stderr keeps log lines out of anything a command prints to stdout
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(config: Any, level: int) -> logging.Handler:
    log_path = Path(config.log_file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=log_path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if config.log_json_format:
        handler.setFormatter(JSONFormatter({"app": config.app_name, "version": config.app_version}))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    config: Any,
    console: Optional[bool] = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Replace the root logger's handlers according to ``config``.

    Args:
        config: Settings object with logging configuration
        console: Override for ``config.log_console_enabled``. The interactive
            terminal chat turns console logging off so log lines do not
            interleave with the transcript.
        quiet_loggers: Third-party loggers raised to WARNING
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    console_enabled = config.log_console_enabled if console is None else console

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    if console_enabled:
        root.addHandler(_console_handler(level))
    if config.log_file_enabled:
        root.addHandler(_file_handler(config, level))

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(
        f"Logging initialized: level={logging.getLevelName(level)}, "
        f"console={console_enabled}, file={config.log_file_enabled}"
    )


class SessionLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that merges chat context into ``extra_fields``.

    Usage:
        log = SessionLoggerAdapter(logging.getLogger(__name__), {"session_id": sid})
        log.info("Reply appended")  # JSON record carries session_id
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.setdefault("extra", {})
        extra["extra_fields"] = {**self.extra, **extra.get("extra_fields", {})}
        return msg, kwargs


SENSITIVE_KEYS = ("password", "token", "secret", "authorization", "api_key", "api-key")
FILTERED = "***FILTERED***"


def filter_sensitive_data(data: Any, sensitive_keys: Iterable[str] = SENSITIVE_KEYS) -> Any:
    """
    Mask values whose key looks like a credential, recursing into dicts and lists.

    Args:
        data: Decoded JSON-like data
        sensitive_keys: Case-insensitive key fragments to mask

    Returns:
        A copy of ``data`` with matching values replaced by ``FILTERED``
    """
    keys = tuple(k.lower() for k in sensitive_keys)
    if isinstance(data, dict):
        return {
            key: FILTERED if any(k in str(key).lower() for k in keys)
            else filter_sensitive_data(value, keys)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [filter_sensitive_data(item, keys) for item in data]
    return data


def truncate_large_data(data: str, max_length: int = 5000) -> str:
    """Truncate ``data`` to ``max_length`` characters, noting the original length."""
    if len(data) <= max_length:
        return data
    return data[:max_length] + f"... (truncated, total length: {len(data)})"
