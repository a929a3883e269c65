"""Factory helpers for choosing a forecast source from settings."""

from __future__ import annotations

from yrno_forecast import config
from yrno_forecast.data_sources.base import ForecastSource
from yrno_forecast.data_sources.met_no_client import MetNoClient
from yrno_forecast.utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "met_no"


def build_forecast_source(settings: config.Settings | None = None) -> ForecastSource:
    """Instantiate a fresh forecast source for the given settings."""
    settings = settings or config.settings
    source = (settings.forecast_source or DEFAULT_SOURCE_NAME).lower()

    if source == "met_no":
        logger.debug("Using met.no locationforecast source", extra={"base_url": settings.base_url})
        return MetNoClient(
            base_url=settings.base_url,
            user_agent=settings.user_agent,
            timeout=settings.request_timeout_seconds,
        )

    raise ValueError(f"Unknown forecast source '{source}'")
