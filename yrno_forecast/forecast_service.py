"""Query a single locationforecast document by time."""
from __future__ import annotations

import datetime as dt
import time
from typing import Any, Dict, List, Optional, Union

from yrno_forecast.document import ClassifiedDocument, classify, format_timestamp
from yrno_forecast.errors import InvalidTimeError
from yrno_forecast.merger import ResolvedForecast, merge
from yrno_forecast.resolver import resolve, round_to_hour
from yrno_forecast.tree_parser import parse_xml
from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="forecast_service")

SUMMARY_DAYS = 5
SUMMARY_HOUR = 12  # midday, UTC

TimeLike = Union[dt.datetime, dt.date, str, int, float]


def coerce_instant(value: TimeLike) -> dt.datetime:
    """Interpret ``value`` as an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), dates (midnight UTC),
    ISO-8601 strings and epoch seconds. Raises InvalidTimeError otherwise.
    """
    try:
        if isinstance(value, dt.datetime):
            instant = value
        elif isinstance(value, dt.date):
            instant = dt.datetime(value.year, value.month, value.day)
        elif isinstance(value, bool):
            raise TypeError("booleans are not instants")
        elif isinstance(value, (int, float)):
            instant = dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            instant = dt.datetime.fromisoformat(text)
        else:
            raise TypeError(f"unsupported time type {type(value).__name__}")
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        logger.debug("Rejected query time", extra={"value": repr(value)})
        raise InvalidTimeError("Invalid date provided for weather lookup") from exc

    if instant.tzinfo is None:
        return instant.replace(tzinfo=dt.timezone.utc)
    return instant.astimezone(dt.timezone.utc)


class LocationForecast:
    """A parsed locationforecast document and the queries it answers.

    Construction parses and classifies the XML once; ParseError propagates
    and no half-built object is returned. All queries are read-only.
    """

    def __init__(self, xml: str, *, structured: bool = False):
        started = time.perf_counter()
        logger.debug("building LocationForecast object by parsing xml to JSON")

        self.xml = xml
        self.json: Dict[str, Any] = parse_xml(xml)
        self.document: ClassifiedDocument = classify(self.json)
        self.structured = structured

        logger.debug("LocationForecast init complete in %.1fms", (time.perf_counter() - started) * 1000)

    def __repr__(self) -> str:
        return (
            f"LocationForecast(first={self.get_first_date_in_payload()!r}, "
            f"last={self.get_last_date_in_payload()!r}, "
            f"basic={len(self.document.basic)}, detailed={len(self.document.detailed)})"
        )

    def get_xml(self) -> str:
        """Return the XML string the API returned."""
        return self.xml

    def get_json(self) -> Dict[str, Any]:
        """Return the parsed XML tree."""
        return self.json

    def get_first_date_in_payload(self) -> str:
        """Earliest ISO timestamp in the document."""
        return format_timestamp(self.document.first_instant)

    def get_last_date_in_payload(self) -> str:
        """Start of the last time node in the document."""
        return format_timestamp(self.document.last_instant)

    def get_valid_timestamps(self) -> List[str]:
        """Interval ends inside the payload range, ascending.

        Each one resolves to a forecast without falling back to another day.
        """
        ends = set(self.document.basic.ends) | set(self.document.detailed.ends)
        return [format_timestamp(t) for t in sorted(ends) if self.document.in_range(t)]

    def is_in_range(self, time_value: TimeLike) -> bool:
        """True if the instant lies within the first/last dates of the payload."""
        return self.document.in_range(coerce_instant(time_value))

    def get_forecast_for_time(self, time_value: TimeLike) -> Optional[ResolvedForecast]:
        """Return the merged forecast closest to ``time_value``.

        The instant is rounded to the nearest hour first. Returns None when
        the rounded instant falls outside the payload's date range.
        """
        instant = round_to_hour(coerce_instant(time_value))
        logger.debug("getForecastForTime %s", format_timestamp(instant))

        if not self.document.in_range(instant):
            logger.info(
                "Requested time outside forecast range",
                extra={
                    "instant": format_timestamp(instant),
                    "first": self.get_first_date_in_payload(),
                    "last": self.get_last_date_in_payload(),
                },
            )
            return None

        basic = resolve(self.document.basic, instant)
        detailed = resolve(self.document.detailed, instant)
        return merge(basic, detailed, structured=self.structured)

    def summary_instants(self) -> List[dt.datetime]:
        """Query instants for the five-day summary.

        Day one is midday of the first date, or the first instant when the
        payload starts after midday; later days are midday.
        """
        start = self.document.first_instant
        base = start.replace(hour=SUMMARY_HOUR, minute=0, second=0, microsecond=0)
        first = start if base < start else base
        logger.debug(
            "five day summary is using %s as a starting point", format_timestamp(base),
        )
        return [first] + [base + dt.timedelta(days=n) for n in range(1, SUMMARY_DAYS)]

    def get_five_day_summary(self) -> List[Optional[ResolvedForecast]]:
        """Forecasts for five consecutive days, in day order (None where unavailable)."""
        return [self.get_forecast_for_time(instant) for instant in self.summary_instants()]
