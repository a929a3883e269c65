"""Entry point: fetch a locationforecast and wrap it for querying."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from yrno_forecast import config
from yrno_forecast.data_sources import ForecastSource, build_forecast_source
from yrno_forecast.errors import FetchError
from yrno_forecast.forecast_service import LocationForecast
from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="client")


class YrNoForecast:
    """Fetches forecasts for locations.

    Each instance owns its forecast source; two instances never share a
    connection or configuration.
    """

    def __init__(
        self,
        settings: config.Settings | None = None,
        *,
        source: ForecastSource | None = None,
        structured: bool = False,
    ):
        self.settings = settings or config.settings
        self.source = source or build_forecast_source(self.settings)
        self.structured = structured

    def get_weather(
        self,
        query: Mapping[str, Any],
        version: Optional[str | float] = None,
    ) -> LocationForecast:
        """Fetch the forecast for ``query`` (e.g. ``{"lat": 53.3, "lon": -6.3}``).

        ``version`` overrides the configured API version for this call only.
        Raises FetchError if the source fails and ParseError if the payload
        is not a usable locationforecast document.
        """
        version = str(version) if version is not None else self.settings.version
        logger.info("requesting a locationforecast using API version %s", version)

        try:
            body = self.source.locationforecast(query=query, version=version)
        except FetchError:
            raise
        except Exception as exc:
            logger.error("failed to get locationforecast: %s", exc)
            raise FetchError(f"failed to get locationforecast: {exc}") from exc

        logger.debug("successfully retrieved locationforecast report")
        return LocationForecast(body, structured=self.structured)
