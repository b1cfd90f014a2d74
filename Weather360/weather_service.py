"""Weather service: runs requests and keeps the result of the latest one."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from forecast import build_forecast
from location_provider import AuthorizationStatus, LocationProviderBase
from weather_data import WeatherState
from weather_provider import LocationError, WeatherProviderBase, WeatherProviderError, WeatherQuery

LOCATION_DENIED_MESSAGE = (
    "Location access is required to get weather for your current location. "
    "Please enable location access in Settings."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WeatherService:
    """
    Service that turns user actions into WeatherState values.

    Every request is numbered when it starts. A result is applied only if
    no newer request has started in the meantime; otherwise it is dropped
    and the caller gets None. There is no cancellation: the older call
    still runs to completion, its outcome is just ignored.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        include_forecast: bool = True,
        clock: Callable[[], datetime] = _utcnow
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            include_forecast: Also fetch and derive hourly/daily forecasts
            clock: Returns the current aware datetime (used for "Today")
        """
        self.provider = provider
        self.include_forecast = include_forecast
        self.clock = clock

        self._latest_request = 0
        self._state = WeatherState()

    @property
    def state(self) -> WeatherState:
        """State produced by the most recent applied request."""
        return self._state

    def begin_request(self) -> int:
        self._latest_request += 1
        logging.debug(f"Starting weather request {self._latest_request}")
        return self._latest_request

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest_request

    def complete_request(self, request_id: int, state: WeatherState) -> Optional[WeatherState]:
        """Apply state if request_id is still the latest request."""
        if not self.is_current(request_id):
            logging.info(
                f"Discarding result of request {request_id}, superseded by request {self._latest_request}"
            )
            return None
        self._state = state
        return state

    def load(self, query: WeatherQuery) -> WeatherState:
        """
        Fetch and derive everything for one query (blocking).

        Provider errors become an error state; a forecast failure after a
        successful current-weather fetch keeps the snapshot.
        """
        logging.info(f"Fetching weather for {query}")
        try:
            snapshot = self.provider.get_current(query)
        except WeatherProviderError as e:
            logging.error(f"Weather fetch failed for {query}: {e}")
            return WeatherState(error_message=e.user_message)

        if not self.include_forecast:
            return WeatherState(snapshot=snapshot)

        try:
            series = self.provider.get_forecast(query)
            hourly, daily = build_forecast(series, sunset=snapshot.sunset, now=self.clock())
        except WeatherProviderError as e:
            logging.warning(f"Forecast unavailable for {query}: {e}")
            return WeatherState(snapshot=snapshot, forecast_error=e.user_message)

        logging.info(f"Weather ready for {snapshot.city_name}: {len(hourly)} hourly, {len(daily)} daily entries")
        return WeatherState(snapshot=snapshot, hourly=tuple(hourly), daily=tuple(daily))

    def search_city(self, city: str) -> Optional[WeatherState]:
        request_id = self.begin_request()
        return self.complete_request(request_id, self.load(WeatherQuery.for_city(city)))

    async def search_city_async(self, city: str) -> Optional[WeatherState]:
        request_id = self.begin_request()
        state = await asyncio.to_thread(self.load, WeatherQuery.for_city(city))
        return self.complete_request(request_id, state)

    async def search_current_location(self, location_provider: LocationProviderBase) -> Optional[WeatherState]:
        """
        Resolve the device position, then fetch weather for it.

        Denied or restricted access short-circuits to an error state
        without asking for a position.
        """
        request_id = self.begin_request()

        status = location_provider.authorization_status
        logging.info(f"Location authorization status: {status.value}")
        if status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
            return self.complete_request(request_id, WeatherState(error_message=LOCATION_DENIED_MESSAGE))

        try:
            position = await location_provider.request_position()
        except LocationError as e:
            logging.error(f"Location request failed: {e}")
            return self.complete_request(request_id, WeatherState(error_message=e.user_message))

        if not self.is_current(request_id):
            logging.info(f"Position for request {request_id} arrived after a newer request, skipping fetch")
            return None

        query = WeatherQuery.for_coordinates(position.latitude, position.longitude)
        state = await asyncio.to_thread(self.load, query)
        return self.complete_request(request_id, state)
