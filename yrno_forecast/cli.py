"""Command line helper: print the forecast for a location as JSON."""

import argparse
import datetime as dt
import json
import sys
from typing import List, Optional

from yrno_forecast.client import YrNoForecast
from yrno_forecast.config import Settings
from yrno_forecast.errors import ForecastError
from yrno_forecast.utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yrno-forecast",
        description="Fetch a yr.no locationforecast and print it as JSON.",
    )
    parser.add_argument("--lat", type=float, required=True, help="latitude in decimal degrees")
    parser.add_argument("--lon", type=float, required=True, help="longitude in decimal degrees")
    parser.add_argument("--altitude", type=int, default=None, help="altitude in metres")
    parser.add_argument("--time", default=None, help="ISO-8601 instant (default: now)")
    parser.add_argument("--summary", action="store_true", help="also print the five day summary")
    parser.add_argument("--version", default=None, help="locationforecast API version")
    parser.add_argument("--timeout-ms", type=int, default=None, help="request timeout in milliseconds")
    parser.add_argument("--structured", action="store_true", help="keep value/unit pairs as objects")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING ...")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.timeout_ms is not None:
        overrides["request_timeout_ms"] = args.timeout_ms
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = Settings(**overrides)
    setup_logging(level=settings.log_level.upper(), job_name="yrno-forecast")

    query = {"lat": args.lat, "lon": args.lon, "altitude": args.altitude}
    client = YrNoForecast(settings, structured=args.structured)

    try:
        weather = client.get_weather(query, args.version)
        when = args.time or dt.datetime.now(dt.timezone.utc)
        output = {"time": weather.get_forecast_for_time(when)}
        if args.summary:
            output["summary"] = weather.get_five_day_summary()
    except ForecastError as exc:
        logger.error("an error occurred getting weather: %s", exc)
        return 1

    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
