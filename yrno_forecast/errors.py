"""Exception types raised by the forecast client.

Every error is local to the call that raised it: nothing is retried and no
partially parsed document is ever handed back. The underlying exception is
always chained (``raise ... from exc``) so callers can inspect ``__cause__``.
"""


class ForecastError(Exception):
    """Base class for all forecast client errors."""


class FetchError(ForecastError):
    """The forecast source failed, timed out or returned a non-success status."""


class ParseError(ForecastError):
    """The payload was not XML, or lacked the weatherdata/product/time layout."""


class InvalidTimeError(ForecastError, ValueError):
    """A query instant could not be interpreted as a calendar time."""
