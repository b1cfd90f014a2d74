"""Tests for hourly and daily forecast derivation."""
import logging
import pytest
from datetime import date, datetime, timedelta, timezone
from forecast import build_daily, build_forecast, build_hourly, parse_readings
from units import kelvin_to_celsius
from weather_data import ForecastSeries
from weather_provider import ParseError

# 2024-05-01 00:00:00 UTC, a Wednesday
BASE_TS = 1714521600
HOUR = 3600


def c_to_k(celsius):
    return celsius + 273.15


def make_item(offset_hours, temp=290.0, temp_min=None, temp_max=None, icon="01d"):
    return {
        "dt": BASE_TS + offset_hours * HOUR,
        "main": {
            "temp": temp,
            "temp_min": temp if temp_min is None else temp_min,
            "temp_max": temp if temp_max is None else temp_max,
        },
        "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": icon}],
    }


def at(offset_hours):
    return datetime.fromtimestamp(BASE_TS + offset_hours * HOUR, tz=timezone.utc)


def test_parse_readings_sorts_by_time():
    readings = parse_readings([make_item(6), make_item(0), make_item(3)])
    assert [r.time for r in readings] == [at(0), at(3), at(6)]


def test_parse_readings_skips_bad_entries(caplog):
    bad = make_item(3)
    del bad["main"]["temp_min"]

    with caplog.at_level(logging.WARNING):
        readings = parse_readings([make_item(0), bad, make_item(6)])

    assert len(readings) == 2
    assert "Skipping forecast entry 1" in caplog.text


def test_parse_readings_all_bad_raises():
    bad = [{"dt": BASE_TS}, {"dt": BASE_TS + HOUR, "main": {}}]

    with pytest.raises(ParseError):
        parse_readings(bad)


def test_hourly_empty_series():
    assert build_hourly(parse_readings([]), timezone_offset=0) == []
    assert build_hourly(parse_readings([]), timezone_offset=0, sunset=at(1)) == []


def test_hourly_entries_in_order():
    entries = build_hourly(
        parse_readings([make_item(3, temp=292.0, icon="02d"), make_item(0, temp=290.0)]),
        timezone_offset=-28800,
    )

    assert [e.time for e in entries] == [at(0), at(3)]
    assert entries[0].temperature_kelvin == 290.0
    assert entries[1].icon_code == "02d"
    assert all(e.timezone_offset == -28800 for e in entries)
    assert not any(e.is_sunset_marker for e in entries)


def test_hourly_sunset_marker_between_straddling_entries():
    items = [make_item(h) for h in (0, 3, 6, 9)]
    sunset = at(4) + timedelta(minutes=30)

    entries = build_hourly(parse_readings(items), timezone_offset=0, sunset=sunset)

    markers = [i for i, e in enumerate(entries) if e.is_sunset_marker]
    assert markers == [2]
    marker = entries[2]
    assert marker.time == sunset
    assert marker.temperature_kelvin is None
    assert marker.icon_code is None
    assert entries[1].time < marker.time < entries[3].time
    assert len(entries) == 5


def test_hourly_sunset_on_entry_time_goes_after_it():
    entries = build_hourly(parse_readings([make_item(h) for h in (0, 3, 6)]), timezone_offset=0, sunset=at(3))

    assert [e.is_sunset_marker for e in entries] == [False, False, True, False]


@pytest.mark.parametrize("sunset_hours", [-2, 12])
def test_hourly_no_marker_when_sunset_outside_series(sunset_hours):
    entries = build_hourly(parse_readings([make_item(h) for h in (0, 3, 6, 9)]), timezone_offset=0, sunset=at(sunset_hours))

    assert len(entries) == 4
    assert not any(e.is_sunset_marker for e in entries)


def test_hourly_single_entry_has_no_marker():
    entries = build_hourly(parse_readings([make_item(0)]), timezone_offset=0, sunset=at(0))
    assert len(entries) == 1


def test_hourly_returns_fresh_list():
    items = [make_item(0), make_item(3)]
    first = build_hourly(parse_readings(items), timezone_offset=0)
    first.clear()
    assert len(build_hourly(parse_readings(items), timezone_offset=0)) == 2


def test_daily_min_of_min_max_of_max():
    items = [
        make_item(9, temp=c_to_k(15), temp_min=c_to_k(10), temp_max=c_to_k(20)),
        make_item(12, temp=c_to_k(15), temp_min=c_to_k(5), temp_max=c_to_k(25)),
    ]

    daily = build_daily(parse_readings(items), timezone_offset=0, now=at(0))

    assert len(daily) == 1
    assert kelvin_to_celsius(daily[0].low_temperature_kelvin) == pytest.approx(5)
    assert kelvin_to_celsius(daily[0].high_temperature_kelvin) == pytest.approx(25)


def test_daily_uses_min_max_fields_not_current_temperature():
    items = [make_item(6, temp=300.0, temp_min=280.0, temp_max=290.0)]

    entry = build_daily(parse_readings(items), timezone_offset=0, now=at(0))[0]

    assert entry.low_temperature_kelvin == 280.0
    assert entry.high_temperature_kelvin == 290.0


def test_daily_icon_from_entry_closest_to_midday():
    items = [make_item(9, icon="a"), make_item(12, icon="b"), make_item(15, icon="c")]

    assert build_daily(parse_readings(items), timezone_offset=0, now=at(0))[0].icon_code == "b"


def test_daily_icon_tie_goes_to_earlier_entry():
    items = [make_item(14, icon="later"), make_item(10, icon="earlier")]

    assert build_daily(parse_readings(items), timezone_offset=0, now=at(0))[0].icon_code == "earlier"


def test_daily_labels_today_then_weekdays():
    items = [make_item(h) for h in (6, 12, 30, 54)]

    daily = build_daily(parse_readings(items), timezone_offset=0, now=at(8))

    assert [d.day_label for d in daily] == ["Today", "Thursday", "Friday"]
    assert [d.date for d in daily] == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3)]


def test_daily_first_group_not_today_uses_weekday():
    items = [make_item(6), make_item(30)]

    daily = build_daily(parse_readings(items), timezone_offset=0, now=at(72))

    assert [d.day_label for d in daily] == ["Wednesday", "Thursday"]


def test_daily_groups_by_location_calendar_day():
    # -8h: 03:00 UTC is 19:00 on Apr 30 locally, 09:00 UTC is 01:00 on May 1
    items = [make_item(3), make_item(9)]

    daily = build_daily(parse_readings(items), timezone_offset=-28800, now=at(5))

    assert [d.date for d in daily] == [date(2024, 4, 30), date(2024, 5, 1)]
    assert [d.day_label for d in daily] == ["Today", "Wednesday"]


def test_daily_empty_series():
    assert build_daily(parse_readings([]), timezone_offset=0) == []


def test_daily_skips_bad_entry():
    bad = make_item(12, temp_min=250.0)
    del bad["main"]["temp"]

    daily = build_daily(parse_readings([make_item(6, temp=290.0), bad]), timezone_offset=0, now=at(0))

    assert daily[0].low_temperature_kelvin == 290.0


def test_parse_readings_skips_out_of_range_timestamp():
    bad = make_item(3)
    bad["dt"] = 1e20

    readings = parse_readings([make_item(0), bad])

    assert [r.time for r in readings] == [at(0)]


def test_parse_readings_skips_non_finite_temperature():
    bad = make_item(3, temp=float("nan"))

    readings = parse_readings([make_item(0), bad, make_item(6)])

    assert [r.time for r in readings] == [at(0), at(6)]


def test_build_forecast_logs_each_bad_entry_once(caplog):
    bad = make_item(3)
    bad["dt"] = 1e20
    series = ForecastSeries(
        city_name="Testville",
        timezone_offset=0,
        items=(make_item(0), bad, make_item(6)),
    )

    with caplog.at_level(logging.WARNING):
        hourly, daily = build_forecast(series, now=at(0))

    assert len(hourly) == 2
    assert len(daily) == 1
    assert caplog.text.count("Skipping forecast entry 1") == 1


def test_build_forecast_uses_series_sunset_by_default():
    series = ForecastSeries(
        city_name="Testville",
        timezone_offset=0,
        items=tuple(make_item(h) for h in (0, 3, 6)),
        sunset=at(4),
    )

    hourly, daily = build_forecast(series, now=at(0))

    assert sum(e.is_sunset_marker for e in hourly) == 1
    assert len(daily) == 1
    assert daily[0].day_label == "Today"


def test_build_forecast_explicit_sunset_wins():
    series = ForecastSeries(
        city_name="Testville",
        timezone_offset=0,
        items=tuple(make_item(h) for h in (0, 3, 6)),
        sunset=at(4),
    )

    hourly, _ = build_forecast(series, sunset=at(1), now=at(0))

    assert hourly[1].is_sunset_marker
