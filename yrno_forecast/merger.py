"""Merge a basic and a detailed interval into one flat forecast record."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from yrno_forecast.document import ForecastInterval, format_timestamp
from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="merger")

ResolvedForecast = Dict[str, Any]

# Provider bookkeeping, e.g. <temperature id="TTT" .../>
INTERNAL_KEYS = frozenset({"id"})
# Extra basic attributes carried over when present (six-hour nodes).
BASIC_EXTRA_ATTRIBUTES = ("minTemperature", "maxTemperature")


def _strip_internal(node: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in node.items() if k not in INTERNAL_KEYS}


def render_attribute(node: Any, *, structured: bool = False) -> Any:
    """Render one location attribute.

    ``{value, unit}`` becomes ``"<value> <unit>"``, ``{percent}`` becomes
    ``"<percent>%"``; anything else (wind direction, wind speed, ...) is
    copied without its ``id``. With ``structured=True`` nothing is flattened.
    """
    if not isinstance(node, Mapping):
        return node
    if not structured:
        if "value" in node and "unit" in node:
            return f"{node['value']} {node['unit']}"
        if "percent" in node:
            return f"{node['percent']}%"
    return _strip_internal(node)


def merge(
    basic: Optional[ForecastInterval],
    detailed: Optional[ForecastInterval],
    *,
    structured: bool = False,
) -> Optional[ResolvedForecast]:
    """Combine the two halves of a forecast into one dict.

    ``icon``/``from``/``to``/``rain`` come from ``basic`` and are left out
    when it is None; every attribute of ``detailed`` is added under its own
    name. Returns None when both are None.
    """
    if basic is None and detailed is None:
        return None

    record: ResolvedForecast = {}

    if basic is not None:
        record["icon"] = basic.icon
        record["from"] = format_timestamp(basic.start)
        record["to"] = format_timestamp(basic.end)
        if structured and isinstance(basic.attributes.get("precipitation"), Mapping):
            record["rain"] = _strip_internal(basic.attributes["precipitation"])
        else:
            record["rain"] = basic.rain
        for name in BASIC_EXTRA_ATTRIBUTES:
            if name in basic.attributes:
                record[name] = render_attribute(basic.attributes[name], structured=structured)

    if detailed is not None:
        for name, node in detailed.attributes.items():
            record[name] = render_attribute(node, structured=structured)
    else:
        logger.debug("No detailed interval to merge", extra={"from": record.get("from")})

    return record
