"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from weather_data import ForecastSeries, WeatherSnapshot


class WeatherProviderError(Exception):
    """Exception raised when a weather request fails."""

    default_message = "Something went wrong fetching the weather"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        """Short text suitable for showing to the user."""
        return str(self)


class ConfigurationError(WeatherProviderError):
    """API key or endpoint missing or still set to a placeholder."""
    default_message = "Weather service is not configured"


class EncodingError(WeatherProviderError):
    """City name cannot be turned into a query string."""
    default_message = "Invalid city name"


class NetworkError(WeatherProviderError):
    """Transport failure, including timeouts."""

    @property
    def user_message(self) -> str:
        return f"Network error: {self}"


class HttpStatusError(WeatherProviderError):
    """Non-success HTTP status, categorized by code."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"Unexpected HTTP status {status_code}")


class RemoteApiError(WeatherProviderError):
    """The API answered with its {cod, message} error body."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class ParseError(WeatherProviderError):
    """Response did not have the expected shape."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing or invalid field '{field}'")

    @property
    def user_message(self) -> str:
        return "Failed to parse weather data"


class NoDataError(WeatherProviderError):
    """Response body was empty."""
    default_message = "No data received"


class LocationError(WeatherProviderError):
    """Current position could not be determined."""
    default_message = "Unable to determine your location"


@dataclass(frozen=True)
class WeatherQuery:
    """Where to fetch weather for: a city name or a coordinate pair."""
    city: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @classmethod
    def for_city(cls, city: str) -> "WeatherQuery":
        return cls(city=city)

    @classmethod
    def for_coordinates(cls, lat: float, lon: float) -> "WeatherQuery":
        return cls(lat=lat, lon=lon)

    def to_params(self) -> Dict[str, Any]:
        """Location part of the query string."""
        if self.city is not None:
            return {"q": self.city}
        if self.lat is None or self.lon is None:
            raise EncodingError("Either a city or both coordinates are required")
        return {"lat": self.lat, "lon": self.lon}

    def __str__(self) -> str:
        if self.city is not None:
            return self.city
        return f"lat={self.lat}, lon={self.lon}"


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_current(self, query: WeatherQuery) -> WeatherSnapshot:
        """
        Fetch current weather data.

        Returns:
            WeatherSnapshot: Current weather information

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def get_forecast(self, query: WeatherQuery) -> ForecastSeries:
        """
        Fetch the forecast series for the same kind of query.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass
