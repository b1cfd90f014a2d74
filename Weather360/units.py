"""Temperature unit conversion - pure functions over the Kelvin values the API returns."""
from enum import Enum

KELVIN_OFFSET = 273.15
DEGREE = "°"


class TemperatureUnit(str, Enum):
    """Display unit selected by the user."""
    CELSIUS = "C"
    FAHRENHEIT = "F"


def kelvin_to_celsius(kelvin: float) -> float:
    return kelvin - KELVIN_OFFSET


def kelvin_to_fahrenheit(kelvin: float) -> float:
    return (kelvin - KELVIN_OFFSET) * 9 / 5 + 32


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def convert_temperature(kelvin: float, unit: TemperatureUnit) -> float:
    """Convert a stored Kelvin value to the requested display unit."""
    if unit == TemperatureUnit.FAHRENHEIT:
        return kelvin_to_fahrenheit(kelvin)
    return kelvin_to_celsius(kelvin)


def format_temperature(kelvin: float, unit: TemperatureUnit = TemperatureUnit.CELSIUS) -> str:
    """
    Format a Kelvin temperature for display.

    Args:
        kelvin: Temperature in Kelvin
        unit: Display unit

    Returns:
        Value with one decimal place and a degree sign, e.g. "20.0°"
    """
    return f"{convert_temperature(kelvin, unit):.1f}{DEGREE}"
