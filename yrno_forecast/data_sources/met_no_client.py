"""Client for the met.no locationforecast API (the data behind yr.no)."""
from __future__ import annotations

from typing import Any, Mapping, Optional

import requests

from yrno_forecast.errors import FetchError
from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="met_no_client")

MET_NO_BASE_URL = "https://api.met.no/weatherapi"
LOCATIONFORECAST_PATH = "locationforecast/{version}/"

# Query keys understood by the endpoint.
QUERY_KEYS = ("lat", "lon", "msl", "altitude")


def _clean_query(query: Mapping[str, Any]) -> dict:
    """Drop unset values and warn on keys the endpoint does not know."""
    params = {}
    for key, value in query.items():
        if value is None:
            continue
        if key not in QUERY_KEYS:
            logger.warning("Unexpected locationforecast query key", extra={"key": key})
        params[key] = value
    return params


class MetNoClient:
    """One-shot HTTP client for locationforecast.

    Each instance owns its ``requests.Session``; nothing is cached and failed
    requests are not retried.
    """

    def __init__(
        self,
        *,
        base_url: str = MET_NO_BASE_URL,
        user_agent: str = "yrno-forecast",
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        # met.no rejects anonymous clients
        self.session.headers.update({"User-Agent": user_agent})

    def url_for(self, version: str) -> str:
        return f"{self.base_url}/{LOCATIONFORECAST_PATH.format(version=version)}"

    def locationforecast(self, *, query: Mapping[str, Any], version: str) -> str:
        """GET the XML document for ``query``; raise FetchError on any failure."""
        url = self.url_for(version)
        params = _clean_query(query)
        logger.info(
            "Requesting locationforecast",
            extra={"url": url, "params": params, "timeout": self.timeout},
        )

        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.Timeout as exc:
            logger.error("locationforecast request timed out after %ss", self.timeout)
            raise FetchError(f"locationforecast request timed out: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            logger.error("failed to get locationforecast from met.no API: %s", exc)
            raise FetchError(f"failed to get locationforecast: {exc}") from exc

        logger.info("Successfully retrieved locationforecast", extra={"bytes": len(resp.content)})
        # Served as UTF-8 without a charset, so requests would guess latin-1.
        try:
            return resp.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.error("locationforecast body is not valid UTF-8: %s", exc)
            raise FetchError(f"locationforecast body is not valid UTF-8: {exc}") from exc
