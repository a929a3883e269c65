"""Classified view of a parsed locationforecast document.

A locationforecast ``product`` is a flat run of ``time`` nodes in
chronological order. Two shapes are interleaved:

    <time from="2017-04-18T22:00:00Z" to="2017-04-18T22:00:00Z">   detailed
      <location ...>
        <temperature id="TTT" unit="celsius" value="5.2"/>
        <windSpeed id="ff" mps="3.4" beaufort="3" name="Lett bris"/>
        ...
    <time from="2017-04-18T21:00:00Z" to="2017-04-18T22:00:00Z">   basic
      <location ...>
        <precipitation unit="mm" value="0.0"/>
        <symbol id="Sun" number="1"/>

Nodes are tagged once, on ingestion, by what their ``location`` carries: a
``symbol`` makes the node BASIC, anything else is DETAILED.
"""
from __future__ import annotations

import bisect
import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from yrno_forecast.errors import ParseError
from yrno_forecast.tree_parser import TEXT_KEY
from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="document")

FORECAST_ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
ICON_ATTRIBUTE = "symbol"
PRECIPITATION_ATTRIBUTE = "precipitation"
# XML attributes of <location> itself, as opposed to its child elements.
LOCATION_KEYS = frozenset({"id", "name", "altitude", "latitude", "longitude", TEXT_KEY})


class IntervalKind(str, Enum):
    """Shape of a forecast time node."""
    BASIC = "basic"
    DETAILED = "detailed"


def parse_timestamp(value: str) -> dt.datetime:
    """Parse a forecast ISO timestamp into an aware UTC datetime."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def format_timestamp(value: dt.datetime) -> str:
    """Render a datetime the way the forecast XML does: ``2017-04-18T13:00:00Z``."""
    return value.astimezone(dt.timezone.utc).strftime(FORECAST_ISO_FORMAT)


@dataclass(frozen=True)
class ForecastInterval:
    """One ``time`` node: a UTC window plus the attributes of its location."""
    start: dt.datetime  # timezone-aware, UTC
    end: dt.datetime  # timezone-aware, UTC
    kind: IntervalKind
    attributes: Mapping[str, Any]
    position: int  # index among all time nodes, document order

    @property
    def span(self) -> dt.timedelta:
        return self.end - self.start

    @property
    def icon(self) -> Optional[str]:
        """Weather symbol id (e.g. "Sun"), basic intervals only."""
        symbol = self.attributes.get(ICON_ATTRIBUTE)
        if isinstance(symbol, Mapping):
            return symbol.get("id")
        return None

    @property
    def rain(self) -> Optional[str]:
        """Precipitation as ``"<value> <unit>"``, basic intervals only."""
        precipitation = self.attributes.get(PRECIPITATION_ATTRIBUTE)
        if not isinstance(precipitation, Mapping) or "value" not in precipitation:
            return None
        return f"{precipitation['value']} {precipitation.get('unit', '')}".rstrip()

    def contains(self, instant: dt.datetime) -> bool:
        return self.start <= instant <= self.end


class IntervalSeries(Sequence[ForecastInterval]):
    """Intervals of one kind in document order, indexed by end instant.

    ``ends`` is sorted ascending so lookups by instant are binary searches;
    ``max_span`` bounds how far past an instant a containing window can end.
    """

    def __init__(self, kind: IntervalKind, intervals: Sequence[ForecastInterval]):
        self.kind = kind
        self._intervals: List[ForecastInterval] = list(intervals)
        self._by_end: List[ForecastInterval] = sorted(
            self._intervals, key=lambda i: (i.end, i.position)
        )
        self.ends: List[dt.datetime] = [i.end for i in self._by_end]
        self.max_span: dt.timedelta = max(
            (i.span for i in self._intervals), default=dt.timedelta(0)
        )

    def __getitem__(self, index):
        return self._intervals[index]

    def __len__(self) -> int:
        return len(self._intervals)

    def __iter__(self) -> Iterator[ForecastInterval]:
        return iter(self._intervals)

    def __repr__(self) -> str:
        return f"IntervalSeries(kind={self.kind.value!r}, size={len(self)})"

    def ending_between(self, lower: dt.datetime, upper: dt.datetime) -> List[ForecastInterval]:
        """Intervals with ``lower <= end <= upper``, ordered by end."""
        lo = bisect.bisect_left(self.ends, lower)
        hi = bisect.bisect_right(self.ends, upper)
        return self._by_end[lo:hi]


@dataclass(frozen=True)
class ClassifiedDocument:
    """Basic and detailed intervals of one fetch, plus its valid query range."""
    basic: IntervalSeries
    detailed: IntervalSeries
    first_instant: dt.datetime
    last_instant: dt.datetime
    meta: Mapping[str, Any] = field(default_factory=dict)

    def in_range(self, instant: dt.datetime) -> bool:
        return self.first_instant <= instant <= self.last_instant


def _time_nodes(tree: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    try:
        nodes = tree["weatherdata"]["product"]["time"]
    except (KeyError, TypeError) as exc:
        raise ParseError(
            f"forecast document is missing weatherdata.product.time: {exc!r}"
        ) from exc

    if isinstance(nodes, Mapping):
        nodes = [nodes]
    if not isinstance(nodes, list) or not nodes:
        raise ParseError("forecast document has no time nodes")
    return nodes


def _interval_from_node(node: Any, position: int) -> ForecastInterval:
    if not isinstance(node, Mapping):
        raise ParseError(f"time node #{position} is not an element")

    location = node.get("location")
    if not isinstance(location, Mapping):
        raise ParseError(f"time node #{position} has no location")

    try:
        start = parse_timestamp(node["from"])
        end = parse_timestamp(node["to"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ParseError(f"time node #{position} has an invalid from/to: {exc}") from exc

    if start > end:
        raise ParseError(
            f"time node #{position} ends before it starts ({node['from']} > {node['to']})"
        )

    kind = IntervalKind.BASIC if ICON_ATTRIBUTE in location else IntervalKind.DETAILED
    attributes = {
        name: value for name, value in location.items() if name not in LOCATION_KEYS
    }

    return ForecastInterval(
        start=start,
        end=end,
        kind=kind,
        attributes=MappingProxyType(attributes),
        position=position,
    )


def classify(tree: Mapping[str, Any]) -> ClassifiedDocument:
    """Split the parsed tree's time nodes into basic and detailed series.

    Raises ParseError when the tree does not look like a locationforecast
    document; nothing is returned for a partially valid one.
    """
    nodes = _time_nodes(tree)
    intervals = [_interval_from_node(node, i) for i, node in enumerate(nodes)]

    basic = IntervalSeries(
        IntervalKind.BASIC, [i for i in intervals if i.kind is IntervalKind.BASIC]
    )
    detailed = IntervalSeries(
        IntervalKind.DETAILED, [i for i in intervals if i.kind is IntervalKind.DETAILED]
    )

    meta = tree["weatherdata"].get("meta") or {}
    document = ClassifiedDocument(
        basic=basic,
        detailed=detailed,
        first_instant=intervals[0].start,
        last_instant=intervals[-1].start,
        meta=meta if isinstance(meta, Mapping) else {},
    )
    logger.debug(
        "Classified forecast document",
        extra={
            "basic_count": len(basic),
            "detailed_count": len(detailed),
            "first_instant": format_timestamp(document.first_instant),
            "last_instant": format_timestamp(document.last_instant),
        },
    )
    return document
