"""Hourly and daily views derived from a raw forecast series."""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from weather_data import (
    DailyForecastEntry,
    ForecastReading,
    ForecastSeries,
    HourlyForecastEntry,
    local_timezone,
)
from weather_parser import parse_forecast_reading
from weather_provider import ParseError

MIDDAY_HOUR = 12
TODAY_LABEL = "Today"


def parse_readings(items: Iterable[Any]) -> List[ForecastReading]:
    """
    Parse raw series entries, skipping the ones that are malformed.

    Returns readings sorted by time; the provider's order is not relied on.

    Raises:
        ParseError: if the series is non-empty and every entry failed
    """
    items = list(items)
    readings = []
    for index, item in enumerate(items):
        try:
            readings.append(parse_forecast_reading(item))
        except ParseError as e:
            logging.warning(f"Skipping forecast entry {index}: {e}")

    if items and not readings:
        raise ParseError("list", f"All {len(items)} forecast entries were invalid")

    if len(readings) < len(items):
        logging.info(f"Kept {len(readings)} of {len(items)} forecast entries")
    readings.sort(key=lambda reading: reading.time)
    return readings


def build_hourly(
    readings: Iterable[ForecastReading],
    timezone_offset: int,
    sunset: Optional[datetime] = None,
) -> List[HourlyForecastEntry]:
    """
    Build the hourly strip.

    When sunset falls between two consecutive readings a single marker
    entry (no temperature, no icon) is inserted between them.

    Args:
        readings: Parsed forecast readings, see parse_readings
        timezone_offset: Location's offset from UTC in seconds
        sunset: Today's sunset for the location (aware datetime)

    Returns:
        Chronological list of entries
    """
    entries = [
        HourlyForecastEntry(
            time=reading.time,
            temperature_kelvin=reading.temperature,
            icon_code=reading.condition.icon_code,
            timezone_offset=timezone_offset,
        )
        for reading in sorted(readings, key=lambda reading: reading.time)
    ]

    if sunset is None:
        return entries

    for index in range(len(entries) - 1):
        if entries[index].time <= sunset < entries[index + 1].time:
            marker = HourlyForecastEntry(
                time=sunset,
                temperature_kelvin=None,
                icon_code=None,
                timezone_offset=timezone_offset,
                is_sunset_marker=True,
            )
            entries.insert(index + 1, marker)
            logging.debug(f"Sunset marker inserted at position {index + 1}")
            break

    return entries


def _representative(readings: List[ForecastReading], timezone_offset: int) -> ForecastReading:
    # min() keeps the first of equal keys, so ties go to the earlier reading
    return min(
        readings,
        key=lambda reading: abs(reading.local_time(timezone_offset).hour - MIDDAY_HOUR),
    )


def day_label(day: date, today: date) -> str:
    if day == today:
        return TODAY_LABEL
    return day.strftime("%A")


def build_daily(
    readings: Iterable[ForecastReading],
    timezone_offset: int,
    now: Optional[datetime] = None,
) -> List[DailyForecastEntry]:
    """
    Aggregate readings into one entry per local calendar day.

    Low/high are the min of 'temp_min' and max of 'temp_max' over the day's
    readings, not the spread of 'temp'.
    """
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(local_timezone(timezone_offset)).date()

    groups: Dict[date, List[ForecastReading]] = {}
    for reading in sorted(readings, key=lambda reading: reading.time):
        day = reading.local_time(timezone_offset).date()
        groups.setdefault(day, []).append(reading)

    daily = []
    for day in sorted(groups):
        day_readings = groups[day]
        daily.append(DailyForecastEntry(
            date=day,
            day_label=day_label(day, today),
            icon_code=_representative(day_readings, timezone_offset).condition.icon_code,
            low_temperature_kelvin=min(reading.temp_min for reading in day_readings),
            high_temperature_kelvin=max(reading.temp_max for reading in day_readings),
        ))
    return daily


def build_forecast(
    series: ForecastSeries,
    sunset: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[HourlyForecastEntry], List[DailyForecastEntry]]:
    """
    Both views for a forecast response.

    The items are parsed once, so each malformed entry is logged once.
    Sunset defaults to the series' own.
    """
    sunset = sunset or series.sunset
    readings = parse_readings(series.items)
    hourly = build_hourly(readings, series.timezone_offset, sunset=sunset)
    daily = build_daily(readings, series.timezone_offset, now=now)
    return hourly, daily
