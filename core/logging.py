"""Logging setup for the chat personalization backend.

Console output always; inside containers (``NODE_ENV`` set and not ``test``)
two rotating files are added: ``backend.log`` for everything and
``request-queue.log`` for the retry queue, whose retries are otherwise hard
to follow between request logs.
"""
from __future__ import annotations

import logging
import logging.config
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from core.utils.env import get_env, is_truthy

_PATH_TRIM_PREFIX = "/app/"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False

# Chatty at INFO during every provider, storage or database round-trip
_NOISY_LOGGERS = (
    "httpcore",
    "httpx",
    "urllib3",
    "botocore",
    "boto3",
    "s3transfer",
    "asyncpg",
    "aiosqlite",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "python_multipart",
    "h11",
    "edge_tts",
    "aiohttp",
)
_SILENCED_LOGGERS = ("google", "google.genai")


def _level(name: str, fallback: str) -> str:
    value = (get_env(name) or "").strip().upper()
    if value and isinstance(getattr(logging, value, None), int):
        return value
    return fallback


@dataclass(slots=True)
class LoggingSettings:
    level: str = "INFO"
    console_level: str = "INFO"
    queue_level: str = "INFO"
    access_level: str = "WARNING"
    log_dir: Path | None = None
    retention_days: int = 7
    milliseconds: bool = False

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        level = _level("BACKEND_LOG_LEVEL", "INFO")
        node_env = get_env("NODE_ENV")
        log_dir = None
        if node_env and node_env != "test":
            log_dir = Path(get_env("BACKEND_LOG_DIR", default="/storage/logs") or "/storage/logs")
        return cls(
            level=level,
            console_level=_level("BACKEND_LOG_CONSOLE_LEVEL", level),
            queue_level=_level("REQUEST_QUEUE_LOG_LEVEL", level),
            access_level=_level("BACKEND_ACCESS_LOG_LEVEL", "WARNING"),
            log_dir=log_dir,
            retention_days=int(get_env("BACKEND_LOG_RETENTION", default="7") or "7"),
            milliseconds=is_truthy(get_env("BACKEND_LOG_TIME_MS")),
        )


class _HealthCheckFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return "/health" not in record.getMessage()


def _trim_paths() -> None:
    """Expose ``shortpathname`` (path without the container prefix) on every record."""

    base_factory = logging.getLogRecordFactory()
    if getattr(base_factory, "_trims_paths", False):
        return

    def factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = base_factory(*args, **kwargs)
        pathname = record.pathname or ""
        record.shortpathname = pathname[len(_PATH_TRIM_PREFIX):] if pathname.startswith(_PATH_TRIM_PREFIX) else pathname
        return record

    factory._trims_paths = True  # type: ignore[attr-defined]
    logging.setLogRecordFactory(factory)


def _file_handler(settings: LoggingSettings, filename: str, level: str) -> Dict[str, Any]:
    assert settings.log_dir is not None
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "level": level,
        "formatter": "standard",
        "filename": str(settings.log_dir / filename),
        "when": "midnight",
        "backupCount": settings.retention_days,
        "encoding": "utf-8",
    }


def build_logging_config(settings: LoggingSettings) -> Dict[str, Any]:
    """Return the ``dictConfig`` mapping for ``settings``."""

    time_format = "%(asctime)s.%(msecs)03d" if settings.milliseconds else "%(asctime)s"
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.console_level,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
    }
    root_handlers: List[str] = ["console"]
    queue_handlers: List[str] = []

    if settings.log_dir is not None:
        handlers["file"] = _file_handler(settings, get_env("BACKEND_LOG_FILE", default="backend.log") or "backend.log", settings.level)
        handlers["queue_file"] = _file_handler(settings, "request-queue.log", settings.queue_level)
        root_handlers.append("file")
        queue_handlers.append("queue_file")

    server_logger = {"level": "WARNING", "handlers": root_handlers, "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": f"{time_format} %(levelname)s [%(shortpathname)s:%(lineno)d] - %(message)s",
                "datefmt": _DATE_FORMAT,
            },
        },
        "handlers": handlers,
        "root": {"level": settings.level, "handlers": root_handlers},
        "loggers": {
            "uvicorn": server_logger,
            "uvicorn.error": server_logger,
            "uvicorn.access": {"level": settings.access_level, "handlers": ["console"], "propagate": False},
            # Propagates to root as well; the dedicated file only adds a second copy
            "core.queue": {"level": settings.queue_level, "handlers": queue_handlers},
        },
    }


def setup_logging(force: bool = False, settings: LoggingSettings | None = None) -> None:
    """Configure logging once per process (``force`` re-applies it)."""

    global _configured
    if _configured and not force:
        return

    settings = settings or LoggingSettings.from_env()
    if settings.log_dir is not None:
        settings.log_dir.mkdir(parents=True, exist_ok=True)

    _trim_paths()
    logging.config.dictConfig(build_logging_config(settings))
    logging.captureWarnings(True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name in _SILENCED_LOGGERS:
        logging.getLogger(name).setLevel(logging.CRITICAL)
    logging.getLogger("uvicorn.access").addFilter(_HealthCheckFilter())

    _configured = True


__all__ = ["LoggingSettings", "build_logging_config", "setup_logging"]
