"""Forecast sources that return raw locationforecast XML."""

from .base import CallableForecastSource, ForecastSource
from .factory import build_forecast_source
from .met_no_client import MetNoClient

__all__ = [
    "build_forecast_source",
    "CallableForecastSource",
    "ForecastSource",
    "MetNoClient",
]
