"""Resolve a requested instant to the best forecast interval of a series.

Basic intervals are windows (``from`` < ``to``), so they are matched by
containment: the tightest window holding the instant wins. Detailed intervals
are instants (``from`` == ``to`` in practice), so they are matched by the
distance between their end and the instant, within the instant's UTC day.

When neither rule finds anything the day fallback picks an edge of the
series: the first interval for instants before all data, the last one
otherwise. ``resolve`` therefore only returns None for an empty series;
range checks belong to the caller.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from yrno_forecast.document import (
    ForecastInterval,
    IntervalKind,
    IntervalSeries,
    format_timestamp,
)
from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="resolver")

ONE_DAY = dt.timedelta(days=1)


def round_to_hour(instant: dt.datetime) -> dt.datetime:
    """Round to the nearest top of hour: ``:31`` and later go up, ``:30`` and earlier go down."""
    truncated = instant.replace(minute=0, second=0, microsecond=0)
    if instant.minute > 30:
        return truncated + dt.timedelta(hours=1)
    return truncated


def _utc_day_bounds(instant: dt.datetime) -> tuple[dt.datetime, dt.datetime]:
    utc = instant.astimezone(dt.timezone.utc)
    day_start = utc.replace(hour=0, minute=0, second=0, microsecond=0)
    return day_start, day_start + ONE_DAY - dt.timedelta(microseconds=1)


def day_fallback(series: IntervalSeries, instant: dt.datetime) -> Optional[ForecastInterval]:
    """Earliest interval if ``instant`` precedes every end, else the latest."""
    if not series:
        return None
    if instant < series.ends[0]:
        chosen = series[0]
    else:
        chosen = series[-1]
    logger.debug(
        "Using day fallback",
        extra={
            "kind": series.kind.value,
            "instant": format_timestamp(instant),
            "chosen_from": format_timestamp(chosen.start),
        },
    )
    return chosen


def resolve_basic(series: IntervalSeries, instant: dt.datetime) -> Optional[ForecastInterval]:
    """Tightest window containing ``instant``; earlier document position breaks ties."""
    # A containing window ends at or after the instant, and no later than
    # the widest window in the series allows.
    candidates = [
        interval
        for interval in series.ending_between(instant, instant + series.max_span)
        if interval.contains(instant)
    ]
    if not candidates:
        return day_fallback(series, instant)
    return min(candidates, key=lambda i: (i.span, i.position))


def resolve_detailed(series: IntervalSeries, instant: dt.datetime) -> Optional[ForecastInterval]:
    """Same-day interval whose end is closest to ``instant``; earlier position breaks ties."""
    day_start, day_end = _utc_day_bounds(instant)
    candidates = series.ending_between(day_start, day_end)
    if not candidates:
        return day_fallback(series, instant)
    return min(candidates, key=lambda i: (abs(i.end - instant), i.position))


def resolve(series: IntervalSeries, instant: dt.datetime) -> Optional[ForecastInterval]:
    """Pick the best interval of ``series`` for ``instant`` using the rule for its kind."""
    if series.kind is IntervalKind.BASIC:
        return resolve_basic(series, instant)
    return resolve_detailed(series, instant)
