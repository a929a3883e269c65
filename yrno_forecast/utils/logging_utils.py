"""
Logging helpers for the forecast client.

Importing the package never touches the root logger: ``yrno_forecast`` only
gets a ``NullHandler``. Applications that want output call ``setup_logging``
(the bundled CLI does), which attaches stdout/stderr handlers to the package
logger.

    from yrno_forecast.utils.logging_utils import get_tagged_logger, setup_logging

    setup_logging(level="DEBUG", job_name="dublin_weather")
    logger = get_tagged_logger(__name__, tag="met_no_client")
    logger.info("Requesting locationforecast")

Records carry a ``tag`` (component) and a ``job_name`` (process) field.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Mapping, Optional

PACKAGE_LOGGER = "yrno_forecast"

DEFAULT_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(name)s | %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

_CONFIGURED: bool = False


class MaxLevelFilter(logging.Filter):
    """Pass only records at or below ``max_level``."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class RecordContextFilter(logging.Filter):
    """
    Fill in ``tag`` and ``job_name`` on records that lack them.

    ``tag`` falls back to the last segment of the logger name
    (``yrno_forecast.resolver`` -> ``resolver``).
    """

    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self.job_name = job_name or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            record.tag = record.name.rsplit(".", 1)[-1] if record.name else "-"
        if not hasattr(record, "job_name"):
            record.job_name = self.job_name
        return True


def build_logging_config(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = None,
    logger_name: str = PACKAGE_LOGGER,
) -> Mapping[str, Any]:
    """
    Build a ``dictConfig`` mapping for ``logger_name``.

    DEBUG and INFO go to stdout, WARNING and above to stderr. The logger
    stops propagating so records are not printed twice by root handlers.
    """
    handler_filters = ["context"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "context": {"()": RecordContextFilter, "job_name": job_name},
            "upto_info": {"()": MaxLevelFilter, "max_level": logging.INFO},
        },
        "formatters": {
            "tagged": {"format": log_format, "datefmt": date_format},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "tagged",
                "filters": handler_filters + ["upto_info"],
                "level": "DEBUG",
                "stream": "ext://sys.stdout",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "tagged",
                "filters": handler_filters,
                "level": "WARNING",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            logger_name: {
                "level": level,
                "handlers": ["stdout", "stderr"],
                "propagate": False,
            },
        },
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    job_name: Optional[str] = None,
    override_existing: bool = False,
    **format_options: str,
) -> None:
    """
    Attach the package's handlers once per process.

    ``format_options`` accepts ``log_format`` and ``date_format``. Pass
    ``override_existing=True`` to re-apply, e.g. with a new level.
    """
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    logging.config.dictConfig(
        build_logging_config(level=level, job_name=job_name, **format_options)
    )
    _CONFIGURED = True


def get_tagged_logger(name: str, *, tag: Optional[str] = None) -> logging.LoggerAdapter:
    """Return a LoggerAdapter whose records carry ``tag`` (default: last name segment)."""
    if tag is None:
        tag = name.rsplit(".", 1)[-1]
    return logging.LoggerAdapter(logging.getLogger(name), {"tag": tag})
