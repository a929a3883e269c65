"""Turn a raw locationforecast XML payload into a plain dict tree.

The tree mirrors the document the way the forecast code wants to read it:

* the document element is kept, so the result is ``{"weatherdata": {...}}``;
* XML attributes and child elements share one dict, keyed by name;
* repeated children under one parent become a list, a single child stays a dict;
* an element with no attributes and no children collapses to its text;
* text next to attributes or children lands under ``_Data``.

Namespace prefixes are dropped from tags and attribute names.
"""
from __future__ import annotations

import time
import xml.etree.ElementTree as ET
from typing import Any, Dict

from yrno_forecast.errors import ParseError
from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="tree_parser")

TEXT_KEY = "_Data"


def _local_name(name: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    if name.startswith("{"):
        return name.rsplit("}", 1)[1]
    return name


def _element_to_node(element: ET.Element) -> Any:
    node: Dict[str, Any] = {_local_name(k): v for k, v in element.attrib.items()}

    for child in element:
        tag = _local_name(child.tag)
        value = _element_to_node(child)
        if tag not in node:
            node[tag] = value
        elif isinstance(node[tag], list):
            node[tag].append(value)
        else:
            node[tag] = [node[tag], value]

    text = (element.text or "").strip()
    if not node:
        return text
    if text:
        node[TEXT_KEY] = text
    return node


def parse_xml(xml: str | bytes) -> Dict[str, Any]:
    """Parse ``xml`` into a dict tree rooted at the document element.

    Raises ParseError (chained to the parser exception) on malformed input.
    """
    started = time.perf_counter()
    try:
        root = ET.fromstring(xml)
    except (ET.ParseError, TypeError, ValueError) as exc:
        logger.warning("Forecast XML could not be parsed: %s", exc)
        raise ParseError(f"failed to parse returned xml string to JSON: {exc}") from exc

    tree = {_local_name(root.tag): _element_to_node(root)}
    logger.debug("parsing xml to JSON took %.1fms", (time.perf_counter() - started) * 1000)
    return tree
