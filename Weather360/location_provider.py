"""Device location abstraction - one async request for the current position."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from weather_provider import LocationError


class AuthorizationStatus(Enum):
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    AUTHORIZED = "authorized"


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float


class LocationProviderBase(ABC):
    """Abstract base class for location sources."""

    @property
    @abstractmethod
    def authorization_status(self) -> AuthorizationStatus:
        """Current permission state for location access."""
        pass

    @abstractmethod
    async def request_position(self) -> Position:
        """
        Resolve the current position once.

        Raises:
            LocationError: If access is denied or no fix is available
        """
        pass


class StaticLocationProvider(LocationProviderBase):
    """
    Location provider backed by fixed coordinates (e.g. WEATHER_LAT/WEATHER_LON).

    With no coordinates configured it reports NOT_DETERMINED and every
    request fails.
    """

    def __init__(self, lat: Optional[float] = None, lon: Optional[float] = None):
        self.lat = lat
        self.lon = lon

    @property
    def authorization_status(self) -> AuthorizationStatus:
        if self.lat is None or self.lon is None:
            return AuthorizationStatus.NOT_DETERMINED
        return AuthorizationStatus.AUTHORIZED

    async def request_position(self) -> Position:
        if self.lat is None or self.lon is None:
            logging.error("No coordinates configured for current location")
            raise LocationError("No location configured (set WEATHER_LAT and WEATHER_LON)")
        logging.debug(f"Static position: lat={self.lat}, lon={self.lon}")
        return Position(latitude=self.lat, longitude=self.lon)
