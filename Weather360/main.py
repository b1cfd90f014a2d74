"""Terminal front end: look up weather for a city or the current location."""
import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from config import WeatherConfig, load_config
from layout import format_daily_line, format_hourly_line, format_weather_lines, location_status_text
from location_provider import StaticLocationProvider
from openweather_provider import OpenWeatherProvider
from units import TemperatureUnit
from weather_data import WeatherState
from weather_provider import ConfigurationError
from weather_service import WeatherService

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "weather360.log")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("weather360", description="Weather lookup")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--city", help="City name, e.g. 'London' or 'Paris,FR'")
    target.add_argument("--here", action="store_true", help="Use WEATHER_LAT/WEATHER_LON")
    parser.add_argument("--units", choices=[u.value for u in TemperatureUnit], default=TemperatureUnit.CELSIUS.value)
    parser.add_argument("--hours", type=int, default=8, help="Hourly entries to show")
    parser.add_argument("--no-forecast", action="store_true")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file)
        ]
    )


def build_weather_service(config: WeatherConfig, args: argparse.Namespace) -> WeatherService:
    provider = OpenWeatherProvider.from_config(config)
    if args.timeout is not None:
        provider.timeout = args.timeout
    service = WeatherService(provider=provider, include_forecast=not args.no_forecast)
    logging.info("Weather service ready (forecast=%s)", service.include_forecast)
    return service


def render_state(state: WeatherState, unit: TemperatureUnit, hours: int = 8) -> List[str]:
    """Lines to print for a finished request."""
    if state.error_message:
        return [f"Error: {state.error_message}"]

    lines = format_weather_lines(state.snapshot, unit)
    if state.forecast_error:
        lines.append(f"Forecast unavailable: {state.forecast_error}")
    if state.hourly:
        lines.append("")
        lines.append(format_hourly_line(list(state.hourly[:hours]), unit))
    if state.daily:
        lines.append("")
        lines.extend(format_daily_line(entry, unit) for entry in state.daily)
    return lines


def run(service: WeatherService, config: WeatherConfig, args: argparse.Namespace) -> Optional[WeatherState]:
    if args.here:
        location = StaticLocationProvider(config.lat, config.lon)
        logging.info(location_status_text(location.authorization_status))
        return asyncio.run(service.search_current_location(location))
    return service.search_city(args.city)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        config = load_config()
        service = build_weather_service(config, args)
    except ConfigurationError as err:
        logging.error("Configuration error: %s", err)
        print(f"Error: {err.user_message}")
        return 2

    state = run(service, config, args)
    if state is None:
        return 1

    for line in render_state(state, TemperatureUnit(args.units), args.hours):
        print(line)
    return 0 if state.ok else 1


if __name__ == "__main__":
    sys.exit(main())
