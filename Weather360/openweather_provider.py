"""OpenWeather Current Weather and 5 day / 3 hour Forecast API provider."""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from config import DEFAULT_BASE_URL, DEFAULT_FORECAST_URL, PLACEHOLDER_API_KEY, WeatherConfig
from weather_data import ForecastSeries, WeatherSnapshot
from weather_parser import decode_forecast_response, decode_json, decode_weather_response, parse_error_payload
from weather_provider import (
    ConfigurationError,
    EncodingError,
    HttpStatusError,
    NetworkError,
    NoDataError,
    ParseError,
    WeatherProviderBase,
    WeatherQuery,
)

STATUS_MESSAGES = {
    401: "API key is invalid or expired",
    404: "City not found",
    429: "API rate limit exceeded",
}
SERVER_ERROR_MESSAGE = "Weather service is temporarily unavailable"


def encode_city(city: Any) -> str:
    """
    Validate a city name for use in a query string.

    Raises:
        EncodingError: Empty name or text that cannot be percent-encoded
    """
    name = city.strip() if isinstance(city, str) else ""
    if not name:
        raise EncodingError("Invalid city name")
    try:
        quote(name, safe="")
    except UnicodeEncodeError as e:
        logging.error(f"Failed to encode city name: {city!r}")
        raise EncodingError("Invalid city name") from e
    return name


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using the free OpenWeather endpoints.

    Current weather: https://openweathermap.org/current
    Forecast: https://openweathermap.org/forecast5

    No 'units' parameter is sent, so temperatures arrive in Kelvin.
    """

    BASE_URL = DEFAULT_BASE_URL
    FORECAST_URL = DEFAULT_FORECAST_URL

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        forecast_url: Optional[str] = None,
        lang: str = "en",
        timeout: float = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            base_url: Current weather endpoint
            forecast_url: Forecast endpoint
            lang: Language code for descriptions (e.g., "en", "de")
            timeout: HTTP request timeout in seconds

        Raises:
            ConfigurationError: If the API key is missing or a placeholder
        """
        if not api_key or api_key == PLACEHOLDER_API_KEY:
            raise ConfigurationError("OpenWeather API key is not configured")
        self.api_key = api_key
        self.base_url = base_url or self.BASE_URL
        self.forecast_url = forecast_url or self.FORECAST_URL
        self.lang = lang
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: WeatherConfig) -> "OpenWeatherProvider":
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            forecast_url=config.forecast_url,
            lang=config.lang,
            timeout=config.timeout,
        )

    def get_current(self, query: WeatherQuery) -> WeatherSnapshot:
        """
        Fetch current weather from OpenWeather Current Weather API.

        Raises:
            WeatherProviderError: If the API request fails
        """
        body = self._request(self.base_url, query)
        snapshot = decode_weather_response(body)
        logging.info(f"Successfully parsed weather data: {snapshot.city_name} {snapshot.temperature}K, {snapshot.description}")
        return snapshot

    def get_forecast(self, query: WeatherQuery) -> ForecastSeries:
        """
        Fetch the 5 day / 3 hour forecast series.

        Raises:
            WeatherProviderError: If the API request fails
        """
        body = self._request(self.forecast_url, query)
        series = decode_forecast_response(body)
        logging.info(f"Successfully parsed forecast: {series.city_name}, {len(series.items)} entries")
        return series

    def _params(self, query: WeatherQuery) -> Dict[str, Any]:
        if query.city is not None:
            query = WeatherQuery.for_city(encode_city(query.city))
        params = query.to_params()
        params["appid"] = self.api_key
        params["lang"] = self.lang
        return params

    def _request(self, url: str, query: WeatherQuery) -> bytes:
        params = self._params(query)

        try:
            logging.info(f"Making OpenWeather API request: {url}")
            logging.debug(f"Request parameters: {query}, lang={self.lang}")

            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise NetworkError(str(e)) from e

        logging.info(f"API response status: {response.status_code}")

        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            self._handle_error_response(response)

        body = response.content
        if not body:
            logging.error("No data received")
            raise NoDataError()

        logging.debug(f"Received {len(body)} bytes")
        logging.debug(f"API response (truncated): {body[:500]!r}...")
        return body

    def _handle_error_response(self, response: requests.Response) -> None:
        """Raise the error matching a non-success response."""
        status = response.status_code
        if status in STATUS_MESSAGES:
            raise HttpStatusError(status, STATUS_MESSAGES[status])
        if 500 <= status < 600:
            raise HttpStatusError(status, SERVER_ERROR_MESSAGE)

        try:
            remote_error = parse_error_payload(decode_json(response.content))
        except (ParseError, NoDataError):
            logging.error(f"Non-JSON error response: HTTP {status}, body: {response.content[:500]!r}")
            raise HttpStatusError(status)

        logging.error(f"OpenWeather API error response: {remote_error.code} {remote_error}")
        raise remote_error
