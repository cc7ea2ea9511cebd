"""
Process-wide logging for the ride planner.

Entrypoints call `setup_logging(job_name=...)` once; modules take a logger
from `get_tagged_logger(__name__, tag=...)` and pass structured context via
`extra`:

    logger = get_tagged_logger(__name__, tag="ride_planner")
    logger.warning("Weather request failed; retrying", extra={"city": "Tula", "attempt": 2})

The formatter appends such context as `key=value` pairs, so a city batch
running concurrently still produces lines that can be grepped per city.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Mapping, Optional

# Used until setup_logging runs (imports, early config errors).
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_JOB_NAME = "ride_planner"

# Attributes every LogRecord has; anything else on a record came from `extra`.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "tag", "job_name", "taskName"}

_CONFIGURED: bool = False


class MaxLevelFilter(logging.Filter):
    """Drop records above `max_level`."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class EnsureTagFilter(logging.Filter):
    """Give untagged records (uvicorn, requests) the last segment of their logger name."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if getattr(record, "tag", None) is None:
            record.tag = record.name.rsplit(".", 1)[-1] if record.name else "-"
        return True


class JobNameFilter(logging.Filter):
    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self.job_name = job_name or DEFAULT_JOB_NAME

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if getattr(record, "job_name", None) is None:
            record.job_name = self.job_name
        return True


def context_items(record: logging.LogRecord) -> list[tuple[str, Any]]:
    """The `extra` fields attached to a record, in insertion order."""
    return [(key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS]


class ContextFormatter(logging.Formatter):
    """Standard formatter that appends `extra` context as `key=value` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(f"{key}={value}" for key, value in context_items(record))
        if not context:
            return line
        head, sep, tail = line.partition("\n")
        # keep tracebacks below the context
        return f"{head} | {context}{sep}{tail}"


def build_logging_config(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = None,
) -> Mapping[str, Any]:
    """dictConfig mapping with INFO and below on stdout, warnings and errors on stderr."""
    shared_filters = ["ensure_tag", "job_name"]

    def stream_handler(stream: str, handler_level: str, extra_filters: list[str]) -> dict[str, Any]:
        return {
            "class": "logging.StreamHandler",
            "formatter": "context",
            "filters": shared_filters + extra_filters,
            "level": handler_level,
            "stream": f"ext://sys.{stream}",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ensure_tag": {"()": EnsureTagFilter},
            "job_name": {"()": JobNameFilter, "job_name": job_name},
            "info_and_below": {"()": MaxLevelFilter, "max_level": logging.INFO},
        },
        "formatters": {
            "context": {"()": ContextFormatter, "format": log_format, "datefmt": date_format},
        },
        "handlers": {
            "stdout": stream_handler("stdout", "DEBUG", ["info_and_below"]),
            "stderr": stream_handler("stderr", "WARNING", []),
        },
        "root": {"level": level, "handlers": ["stdout", "stderr"]},
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = None,
    override_existing: bool = False,
) -> None:
    """Configure logging once per process; later calls need `override_existing=True`."""
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    logging.config.dictConfig(
        build_logging_config(level=level, log_format=log_format, date_format=date_format, job_name=job_name)
    )
    _CONFIGURED = True


class TaggedLoggerAdapter(logging.LoggerAdapter):
    """Adapter that merges call-site `extra` with the adapter's own fields."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_tagged_logger(name: str, *, tag: Optional[str] = None) -> TaggedLoggerAdapter:
    """Adapter stamping `tag` (default: last segment of `name`) on every record."""
    return TaggedLoggerAdapter(logging.getLogger(name), {"tag": tag or name.rsplit(".", 1)[-1]})
