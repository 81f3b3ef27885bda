"""Structured logging for graph builds, index builds, queries and layout runs.

By default logs to ~/.insight-explorer/logs/insight_explorer_<session>.log and
echoes warnings to stderr.

Configuration via environment variables:
- INSIGHT_EXPLORER_LOG_DIR: Directory for log files
- INSIGHT_EXPLORER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- INSIGHT_EXPLORER_LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
- INSIGHT_EXPLORER_LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
- INSIGHT_EXPLORER_LOG_DISABLE_FILE: Set to 1 to disable file logging (stderr only)
"""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from .config_schema import LoggingConfig

LOGGER_NAME = "insight_explorer"

ENV_LOG_DIR = "INSIGHT_EXPLORER_LOG_DIR"
ENV_LOG_LEVEL = "INSIGHT_EXPLORER_LOG_LEVEL"
ENV_LOG_MAX_BYTES = "INSIGHT_EXPLORER_LOG_MAX_BYTES"
ENV_LOG_BACKUP_COUNT = "INSIGHT_EXPLORER_LOG_BACKUP_COUNT"
ENV_LOG_DISABLE_FILE = "INSIGHT_EXPLORER_LOG_DISABLE_FILE"

DEFAULT_LOG_DIR = Path.home() / ".insight-explorer" / "logs"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

_logger_initialized = False
_settings: Optional[LoggingConfig] = None
_session_start = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")


def _setting(env_var: str, attr: str, default: Any) -> Any:
    """Environment wins, then ``configure_logging`` settings, then the default."""
    value = os.getenv(env_var)
    if value is not None:
        return value
    if _settings is not None:
        configured = getattr(_settings, attr)
        if configured not in ("", None):
            return configured
    return default


def _get_log_level() -> int:
    level_name = str(_setting(ENV_LOG_LEVEL, "level", DEFAULT_LOG_LEVEL)).upper()
    return getattr(logging, level_name, logging.INFO)


def _get_log_file_path() -> Optional[Path]:
    """Get the log file path, creating directories if needed.

    Returns None if file logging is disabled.
    """
    if str(_setting(ENV_LOG_DISABLE_FILE, "disable_file", "")).lower() in ("1", "true", "yes"):
        return None

    log_dir = Path(_setting(ENV_LOG_DIR, "dir", DEFAULT_LOG_DIR))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"insight_explorer_{_session_start}.log"


def _get_logger() -> logging.Logger:
    """Get or initialize the package logger."""
    global _logger_initialized
    logger = logging.getLogger(LOGGER_NAME)

    if not _logger_initialized:
        _logger_initialized = True
        logger.handlers.clear()

        log_level = _get_log_level()
        logger.setLevel(log_level)

        formatter = logging.Formatter(
            "[%(levelname)s %(asctime)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S"
        )

        log_file = _get_log_file_path()
        if log_file:
            max_bytes = int(_setting(ENV_LOG_MAX_BYTES, "max_bytes", DEFAULT_MAX_BYTES))
            backup_count = int(_setting(ENV_LOG_BACKUP_COUNT, "backup_count", DEFAULT_BACKUP_COUNT))

            file_handler = RotatingFileHandler(
                str(log_file),
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(log_level)
            logger.addHandler(file_handler)

        # stderr only gets warnings and above
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(max(log_level, logging.WARNING))
        logger.addHandler(stream_handler)

    return logger


def configure_logging(settings: Optional[LoggingConfig]) -> None:
    """Use settings from the config file; environment variables still win.

    Takes effect on the next log call.
    """
    global _settings
    _settings = settings
    reset_logging()


def reset_logging() -> None:
    """Drop handlers so the next log call re-reads the environment."""
    global _logger_initialized
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    _logger_initialized = False


def log_action(
    action: str,
    *,
    outcome: str = "ok",
    duration_ms: Optional[float] = None,
    **fields: Any,
) -> None:
    """Emit a structured log line for an action.

    Args:
        action: Name of the action being logged
        outcome: Result status ("ok", "error", etc.)
        duration_ms: How long the action took in milliseconds
        **fields: Additional fields to include
    """
    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "outcome": outcome,
    }
    if duration_ms is not None:
        payload["duration_ms"] = round(duration_ms, 2)
    if fields:
        payload.update(fields)

    _get_logger().info(json.dumps(payload, separators=(",", ":"), sort_keys=True, default=str))


def log_warning(message: str, **fields: Any) -> None:
    """Log a warning message with optional structured fields."""
    logger = _get_logger()
    if fields:
        field_str = " " + json.dumps(fields, separators=(",", ":"), sort_keys=True, default=str)
        logger.warning(f"{message}{field_str}")
    else:
        logger.warning(message)


def _action_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    # action and duration_ms belong to the timer
    return {k: v for k, v in fields.items() if k not in ("action", "duration_ms")}


@contextmanager
def timeit(action: str, **fields: Any):
    """Time a block and emit a structured log on exit.

    On exception, logs outcome="error" and re-raises.

    Yields:
        A dict the block can fill with extra result fields. Its keys
        override same-named ``fields``; an ``outcome`` key replaces "ok".
    """
    start = time.perf_counter()
    result_info: Dict[str, Any] = {}
    try:
        yield result_info
    except Exception:
        duration_ms = (time.perf_counter() - start) * 1000.0
        extra = _action_fields(fields)
        extra.pop("outcome", None)
        log_action(action, outcome="error", duration_ms=duration_ms, **extra)
        raise
    duration_ms = (time.perf_counter() - start) * 1000.0
    extra = _action_fields({**fields, **result_info})
    outcome = str(extra.pop("outcome", "ok"))
    log_action(action, outcome=outcome, duration_ms=duration_ms, **extra)
