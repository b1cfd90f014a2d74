"""Configuration loaded from the environment (and a .env file when present)."""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from weather_provider import ConfigurationError

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"


@dataclass(frozen=True)
class WeatherConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    forecast_url: str = DEFAULT_FORECAST_URL
    lang: str = "en"
    timeout: float = 10.0
    lat: Optional[float] = None
    lon: Optional[float] = None


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {name}: {raw!r}") from exc


def load_config(dotenv: bool = True) -> WeatherConfig:
    """
    Read settings from the environment.

    Raises:
        ConfigurationError: Missing/placeholder API key or malformed values
    """
    if dotenv:
        load_dotenv()

    api_key = (os.getenv("WEATHER_API_KEY") or "").strip()
    if not api_key:
        raise ConfigurationError("Missing WEATHER_API_KEY in environment")
    if api_key == PLACEHOLDER_API_KEY:
        raise ConfigurationError("WEATHER_API_KEY is still set to the placeholder value")

    base_url = os.getenv("WEATHER_BASE_URL") or DEFAULT_BASE_URL
    forecast_url = os.getenv("WEATHER_FORECAST_URL") or DEFAULT_FORECAST_URL
    for name, url in (("WEATHER_BASE_URL", base_url), ("WEATHER_FORECAST_URL", forecast_url)):
        if not url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid {name}: {url!r}")

    timeout = _optional_float("WEATHER_TIMEOUT")
    lat = _optional_float("WEATHER_LAT")
    lon = _optional_float("WEATHER_LON")
    if (lat is None) != (lon is None):
        raise ConfigurationError("WEATHER_LAT and WEATHER_LON must be set together")

    config = WeatherConfig(
        api_key=api_key,
        base_url=base_url,
        forecast_url=forecast_url,
        lang=os.getenv("WEATHER_LANG", "en"),
        timeout=timeout if timeout is not None else 10.0,
        lat=lat,
        lon=lon,
    )
    logging.info("Configuration loaded: base_url=%s lang=%s timeout=%s", config.base_url, config.lang, config.timeout)
    return config
