"""Weather domain model - immutable value objects independent of any API."""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from wind import wind_direction


@dataclass(frozen=True)
class Condition:
    """One entry of the provider's conditions list."""
    id: int
    category: str  # e.g., "Clouds", "Rain", "Clear"
    description: str  # e.g., "broken clouds", "light rain"
    icon_code: str  # e.g., "04d"


DEFAULT_CONDITION = Condition(id=0, category="Unknown", description="", icon_code="")


def local_timezone(timezone_offset: int) -> timezone:
    """Fixed-offset tzinfo for a location's UTC offset in seconds."""
    return timezone(timedelta(seconds=timezone_offset))


@dataclass(frozen=True)
class WeatherSnapshot:
    """
    Normalized current weather for one location.

    Temperatures are stored in Kelvin; display units are derived on demand.
    """
    city_name: str
    temperature: float
    feels_like: float
    temp_max: float
    temp_min: float
    humidity: int
    pressure: int
    wind_speed: float
    wind_degrees: int
    description: str
    icon_code: str
    sunrise: datetime  # aware, UTC
    sunset: datetime  # aware, UTC
    timezone_offset: int  # Offset from UTC in seconds

    # Optional fields that might be useful
    condition_category: str = "Unknown"
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    wind_gust: Optional[float] = None
    cloudiness: Optional[int] = None  # percentage
    visibility: Optional[int] = None  # meters
    observed_at: Optional[datetime] = None

    @property
    def wind_direction(self) -> str:
        return wind_direction(self.wind_degrees)

    @property
    def local_timezone(self) -> timezone:
        return local_timezone(self.timezone_offset)


@dataclass(frozen=True)
class ForecastReading:
    """One parsed element of a forecast series."""
    time: datetime  # aware, UTC
    temperature: float
    temp_min: float
    temp_max: float
    condition: Condition = DEFAULT_CONDITION
    humidity: Optional[int] = None
    wind_speed: Optional[float] = None
    wind_degrees: Optional[int] = None
    precipitation_probability: Optional[float] = None

    def local_time(self, timezone_offset: int) -> datetime:
        return self.time.astimezone(local_timezone(timezone_offset))


@dataclass(frozen=True)
class ForecastSeries:
    """
    Envelope of a forecast response.

    The list items are kept raw so each derivation can skip malformed
    entries on its own.
    """
    city_name: str
    timezone_offset: int
    items: Tuple[Dict[str, Any], ...] = ()
    country: Optional[str] = None
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None


@dataclass(frozen=True)
class HourlyForecastEntry:
    time: datetime
    temperature_kelvin: Optional[float]
    icon_code: Optional[str]
    timezone_offset: int
    is_sunset_marker: bool = False

    def local_time(self) -> datetime:
        return self.time.astimezone(local_timezone(self.timezone_offset))


@dataclass(frozen=True)
class DailyForecastEntry:
    date: date  # calendar date in the location's timezone
    day_label: str
    icon_code: str
    low_temperature_kelvin: float
    high_temperature_kelvin: float


@dataclass(frozen=True)
class WeatherState:
    """Everything the front end needs to render the outcome of one request."""
    snapshot: Optional[WeatherSnapshot] = None
    hourly: Tuple[HourlyForecastEntry, ...] = ()
    daily: Tuple[DailyForecastEntry, ...] = ()
    error_message: Optional[str] = None
    forecast_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None and self.error_message is None
