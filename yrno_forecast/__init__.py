"""Fetch yr.no / met.no locationforecast data and query it by time."""

from .client import YrNoForecast
from .config import Settings
from .document import ClassifiedDocument, ForecastInterval, IntervalKind, classify
from .errors import FetchError, ForecastError, InvalidTimeError, ParseError
from .forecast_service import LocationForecast
from .merger import merge
from .resolver import resolve, round_to_hour

__all__ = [
    "ClassifiedDocument",
    "FetchError",
    "ForecastError",
    "ForecastInterval",
    "IntervalKind",
    "InvalidTimeError",
    "LocationForecast",
    "ParseError",
    "Settings",
    "YrNoForecast",
    "classify",
    "merge",
    "resolve",
    "round_to_hour",
]
