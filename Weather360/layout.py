"""Presentation logic for the weather display - pure functions for testability."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from location_provider import AuthorizationStatus
from units import TemperatureUnit, celsius_to_fahrenheit, format_temperature, kelvin_to_celsius
from weather_data import DailyForecastEntry, HourlyForecastEntry, WeatherSnapshot, local_timezone

RGB = Tuple[int, int, int]

BLUE = (0, 0, 255)
CYAN = (0, 255, 255)
GREEN = (0, 200, 0)
YELLOW = (255, 220, 0)
ORANGE = (255, 165, 0)
RED = (255, 0, 0)


@dataclass(frozen=True)
class TemperatureGradient:
    """Two-colour swatch for a day's temperature range bar."""
    bucket: str
    start: RGB
    end: RGB


# (exclusive upper bound in °F, gradient), ascending
TEMPERATURE_BUCKETS = (
    (50.0, TemperatureGradient("cold", BLUE, CYAN)),
    (65.0, TemperatureGradient("cool", CYAN, GREEN)),
    (75.0, TemperatureGradient("mild", GREEN, YELLOW)),
    (85.0, TemperatureGradient("warm", YELLOW, ORANGE)),
)
HOT = TemperatureGradient("hot", ORANGE, RED)


def temperature_range_colors(low: float, high: float, is_celsius: bool = True) -> TemperatureGradient:
    """
    Pick the gradient for a low/high pair.

    The average is bucketed in Fahrenheit whatever the display unit:
    below 50 cold, 50-65 cool, 65-75 mild, 75-85 warm, 85 and above hot.
    Each lower bound belongs to the warmer bucket.

    Args:
        low: Low temperature
        high: High temperature
        is_celsius: True when low/high are Celsius, False when Fahrenheit
    """
    average = (low + high) / 2
    average_f = celsius_to_fahrenheit(average) if is_celsius else average

    for upper_bound, gradient in TEMPERATURE_BUCKETS:
        if average_f < upper_bound:
            return gradient
    return HOT


def daily_range_colors(entry: DailyForecastEntry) -> TemperatureGradient:
    return temperature_range_colors(
        kelvin_to_celsius(entry.low_temperature_kelvin),
        kelvin_to_celsius(entry.high_temperature_kelvin),
        is_celsius=True,
    )


def hourly_label(entry: HourlyForecastEntry, now: Optional[datetime] = None) -> str:
    """
    Label for one slot of the hourly strip, in the location's time.

    "Now" when the slot's hour matches the current hour there,
    "Sunset" for the marker, otherwise e.g. "3 PM".
    """
    if entry.is_sunset_marker:
        return "Sunset"

    now = now or datetime.now(timezone.utc)
    local = entry.local_time()
    current = now.astimezone(local_timezone(entry.timezone_offset))
    if local.hour == current.hour:
        return "Now"

    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour} {suffix}"


def condition_text(snapshot: WeatherSnapshot) -> str:
    """Capitalized description, falling back to the condition category."""
    text = snapshot.description or snapshot.condition_category
    return text.title()


def format_clock(moment: datetime, timezone_offset: int) -> str:
    local = moment.astimezone(local_timezone(timezone_offset))
    return local.strftime("%H:%M")


def format_weather_lines(snapshot: WeatherSnapshot, unit: TemperatureUnit) -> List[str]:
    """Text lines for the current conditions panel."""
    title = snapshot.city_name
    if snapshot.country:
        title = f"{title}, {snapshot.country}"

    lines = [
        title,
        f"{format_temperature(snapshot.temperature, unit)}{unit.value}  {condition_text(snapshot)}",
        f"High {format_temperature(snapshot.temp_max, unit)}  Low {format_temperature(snapshot.temp_min, unit)}",
        f"Feels like {format_temperature(snapshot.feels_like, unit)}",
        f"Humidity {snapshot.humidity}%  Pressure {snapshot.pressure} hPa",
        f"Wind {snapshot.wind_speed:.1f} m/s {snapshot.wind_direction}",
        f"Sunrise {format_clock(snapshot.sunrise, snapshot.timezone_offset)}"
        f"  Sunset {format_clock(snapshot.sunset, snapshot.timezone_offset)}",
    ]
    if snapshot.observed_at is not None:
        lines.append(f"Updated {format_clock(snapshot.observed_at, snapshot.timezone_offset)}")
    return lines


def format_hourly_line(
    entries: List[HourlyForecastEntry],
    unit: TemperatureUnit,
    now: Optional[datetime] = None,
) -> str:
    cells = []
    for entry in entries:
        label = hourly_label(entry, now)
        if entry.is_sunset_marker:
            cells.append(label)
        else:
            cells.append(f"{label} {format_temperature(entry.temperature_kelvin, unit)}")
    return " | ".join(cells)


def format_daily_line(entry: DailyForecastEntry, unit: TemperatureUnit) -> str:
    gradient = daily_range_colors(entry)
    return (
        f"{entry.day_label:<10} {entry.icon_code:<4} "
        f"{format_temperature(entry.low_temperature_kelvin, unit)} - "
        f"{format_temperature(entry.high_temperature_kelvin, unit)} ({gradient.bucket})"
    )


def location_status_text(status: AuthorizationStatus) -> str:
    if status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
        return "Location access denied"
    if status == AuthorizationStatus.AUTHORIZED:
        return "Location access granted"
    return "Location permission not determined"
