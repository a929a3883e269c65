"""Interfaces and helpers for locationforecast sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol


class ForecastSource(Protocol):
    """Anything that can return a raw locationforecast XML document."""

    def locationforecast(self, *, query: Mapping[str, Any], version: str) -> str:
        """Return the XML payload for ``query`` (lat/lon/altitude) and API ``version``.

        Implementations raise ``FetchError`` when the request fails.
        """
        ...


@dataclass
class CallableForecastSource(ForecastSource):
    """Wrap a plain callable so alternate transports (or test doubles) can be plugged in."""

    fetch: Callable[..., str]

    def locationforecast(self, *, query: Mapping[str, Any], version: str) -> str:
        """Delegate to the configured callable."""
        return self.fetch(query=query, version=version)
