import datetime as dt
import unittest
from pathlib import Path

from yrno_forecast.errors import InvalidTimeError, ParseError
from yrno_forecast.forecast_service import LocationForecast, coerce_instant

FIXTURE = Path(__file__).parent / "fixtures" / "weather-response-oslo.xml"
SAMPLE_XML = FIXTURE.read_text(encoding="utf-8")

UTC = dt.timezone.utc

DETAILED_FIELDS = (
    "temperature",
    "windDirection",
    "windSpeed",
    "humidity",
    "pressure",
    "cloudiness",
    "lowClouds",
    "mediumClouds",
    "highClouds",
    "dewpointTemperature",
)


def _parse(value):
    return dt.datetime.strptime(value, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=UTC)


class TestCoerceInstant(unittest.TestCase):
    def test_naive_datetime_is_utc(self):
        self.assertEqual(
            coerce_instant(dt.datetime(2017, 4, 18, 21, 35)),
            dt.datetime(2017, 4, 18, 21, 35, tzinfo=UTC),
        )

    def test_aware_datetime_is_converted(self):
        oslo_summer = dt.timezone(dt.timedelta(hours=2))
        self.assertEqual(
            coerce_instant(dt.datetime(2017, 4, 18, 23, 0, tzinfo=oslo_summer)),
            dt.datetime(2017, 4, 18, 21, 0, tzinfo=UTC),
        )

    def test_strings_dates_and_epochs(self):
        expected = dt.datetime(2017, 4, 18, 0, 0, tzinfo=UTC)
        self.assertEqual(coerce_instant("2017-04-18"), expected)
        self.assertEqual(coerce_instant("2017-04-18T00:00:00Z"), expected)
        self.assertEqual(coerce_instant(dt.date(2017, 4, 18)), expected)
        self.assertEqual(coerce_instant(expected.timestamp()), expected)

    def test_rejects_garbage(self):
        for value in ("bad time string", None, True, [2017, 4, 18]):
            with self.subTest(value=value):
                with self.assertRaises(InvalidTimeError):
                    coerce_instant(value)


class TestLocationForecast(unittest.TestCase):
    def setUp(self):
        self.weather = LocationForecast(SAMPLE_XML)

    def test_raw_accessors(self):
        self.assertEqual(self.weather.get_xml(), SAMPLE_XML)
        tree = self.weather.get_json()
        self.assertIsInstance(tree["weatherdata"]["created"], str)
        self.assertIsInstance(tree["weatherdata"]["meta"], dict)
        self.assertIsInstance(tree["weatherdata"]["product"], dict)

    def test_payload_range(self):
        self.assertEqual(self.weather.get_first_date_in_payload(), "2017-04-18T13:00:00Z")
        self.assertEqual(self.weather.get_last_date_in_payload(), "2017-04-26T18:00:00Z")
        self.assertTrue(self.weather.is_in_range("2017-04-20T00:00:00Z"))
        self.assertFalse(self.weather.is_in_range("2017-04-27T00:00:00Z"))

    def test_valid_timestamps(self):
        times = self.weather.get_valid_timestamps()
        self.assertEqual(times[0], "2017-04-18T13:00:00Z")
        # the last node ends at 2017-04-27T00:00:00Z, past the payload range
        self.assertEqual(times[-1], "2017-04-26T18:00:00Z")
        self.assertEqual(times, sorted(set(times)))
        self.assertEqual(len(times), 73)

    def test_every_valid_timestamp_resolves(self):
        unresolved = [
            t for t in self.weather.get_valid_timestamps()
            if self.weather.get_forecast_for_time(t) is None
        ]
        self.assertEqual(unresolved, [])
        for t in self.weather.get_valid_timestamps():
            self.assertTrue(self.weather.is_in_range(t))

    def test_invalid_time_raises(self):
        with self.assertRaises(InvalidTimeError) as ctx:
            self.weather.get_forecast_for_time("bad time string")
        self.assertIn("Invalid date provided for weather lookup", str(ctx.exception))

    def test_before_range_returns_none(self):
        self.assertIsNone(self.weather.get_forecast_for_time(dt.datetime(2017, 4, 15, tzinfo=UTC)))

    def test_after_range_returns_none(self):
        self.assertIsNone(self.weather.get_forecast_for_time("2017-04-26T19:00:00Z"))
        self.assertIsNone(self.weather.get_forecast_for_time("2017-05-01T12:00:00Z"))

    def test_rounds_up(self):
        forecast = self.weather.get_forecast_for_time(dt.datetime(2017, 4, 18, 21, 35, tzinfo=UTC))
        self.assertEqual(forecast["from"], "2017-04-18T21:00:00Z")
        self.assertEqual(forecast["to"], "2017-04-18T22:00:00Z")
        self.assertEqual(forecast["icon"], "PartlyCloud")
        self.assertEqual(forecast["rain"], "0.0 mm")
        self.assertEqual(forecast["temperature"], "8.3 celsius")
        self.assertEqual(forecast["humidity"], "69.4 percent")
        self.assertEqual(forecast["cloudiness"], "53.0%")
        self.assertEqual(forecast["fog"], "0.0%")
        self.assertEqual(forecast["windSpeed"], {"mps": "4.2", "beaufort": "3", "name": "Lett bris"})
        self.assertEqual(forecast["windDirection"], {"deg": "333.0", "name": "NW"})
        self.assertEqual(forecast["windGust"], {"mps": "6.2"})
        for field in DETAILED_FIELDS:
            self.assertIn(field, forecast)

    def test_rounds_down(self):
        forecast = self.weather.get_forecast_for_time(dt.datetime(2017, 4, 18, 21, 20, tzinfo=UTC))
        self.assertEqual(forecast["from"], "2017-04-18T20:00:00Z")
        self.assertEqual(forecast["to"], "2017-04-18T21:00:00Z")
        self.assertEqual(forecast["temperature"], "7.6 celsius")
        self.assertIsInstance(forecast["icon"], str)
        self.assertIsInstance(forecast["rain"], str)

    def test_sparse_day_uses_closest_same_day_interval(self):
        forecast = self.weather.get_forecast_for_time(dt.datetime(2017, 4, 25, 13, 0, tzinfo=UTC))
        self.assertEqual(forecast["from"], "2017-04-25T12:00:00Z")
        self.assertEqual(forecast["to"], "2017-04-25T18:00:00Z")
        self.assertIn("minTemperature", forecast)
        self.assertIn("maxTemperature", forecast)
        self.assertIn("temperature", forecast)

    def test_rounding_is_idempotent(self):
        for value in ("2017-04-19T06:00:00Z", "2017-04-21T09:00:00Z"):
            with self.subTest(value=value):
                exact = self.weather.get_forecast_for_time(value)
                nudged = self.weather.get_forecast_for_time(value.replace(":00:00Z", ":20:00Z"))
                self.assertEqual(exact, nudged)

    def test_from_is_monotonic_over_the_range(self):
        instant = _parse(self.weather.get_first_date_in_payload())
        last = _parse(self.weather.get_last_date_in_payload())
        previous = None
        while instant <= last:
            forecast = self.weather.get_forecast_for_time(instant)
            self.assertIsNotNone(forecast)
            current = _parse(forecast["from"])
            if previous is not None:
                self.assertLessEqual(previous, current, instant.isoformat())
            previous = current
            instant += dt.timedelta(hours=1)

    def test_five_day_summary(self):
        summary = self.weather.get_five_day_summary()
        self.assertEqual(len(summary), 5)
        self.assertEqual(
            [entry["from"] for entry in summary],
            [
                "2017-04-18T12:00:00Z",
                "2017-04-19T11:00:00Z",
                "2017-04-20T11:00:00Z",
                "2017-04-21T06:00:00Z",
                "2017-04-22T06:00:00Z",
            ],
        )
        previous = None
        for entry in summary:
            if previous is not None:
                self.assertLess(_parse(previous["from"]), _parse(entry["from"]))
            previous = entry
            self.assertIsInstance(entry["icon"], str)
            self.assertIsInstance(entry["to"], str)
            self.assertIsInstance(entry["rain"], str)
            for field in DETAILED_FIELDS:
                self.assertIn(field, entry)

    def test_summary_anchor_clamps_to_first_instant(self):
        instants = self.weather.summary_instants()
        self.assertEqual(instants[0], dt.datetime(2017, 4, 18, 13, tzinfo=UTC))
        self.assertEqual(instants[1], dt.datetime(2017, 4, 19, 12, tzinfo=UTC))
        self.assertEqual(instants[4], dt.datetime(2017, 4, 22, 12, tzinfo=UTC))

    def test_structured_output(self):
        weather = LocationForecast(SAMPLE_XML, structured=True)
        forecast = weather.get_forecast_for_time("2017-04-18T22:00:00Z")
        self.assertEqual(forecast["temperature"], {"unit": "celsius", "value": "8.3"})
        self.assertEqual(forecast["rain"]["unit"], "mm")

    def test_malformed_payload(self):
        with self.assertRaises(ParseError):
            LocationForecast("<weatherdata><product></weatherdata>")

    def test_document_without_time_nodes(self):
        with self.assertRaises(ParseError):
            LocationForecast("<weatherdata><product/></weatherdata>")


if __name__ == "__main__":
    unittest.main()
