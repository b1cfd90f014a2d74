"""Turn decoded OpenWeather payloads into domain objects."""
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from weather_data import (
    DEFAULT_CONDITION,
    Condition,
    ForecastReading,
    ForecastSeries,
    WeatherSnapshot,
)
from weather_provider import NoDataError, ParseError, RemoteApiError

T = TypeVar("T")
Body = Union[str, bytes, Dict[str, Any], None]

_MISSING = object()


def _lookup(payload: Any, path: str) -> Any:
    """Walk a dotted path, returning _MISSING if any step is absent."""
    value = payload
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return _MISSING
        value = value[key]
    return value


def _finite(value: Any, path: str) -> float:
    # json.loads accepts NaN and Infinity literals
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(path)
    try:
        number = float(value)
    except OverflowError as e:
        raise ParseError(path, f"Number out of range at '{path}'") from e
    if not math.isfinite(number):
        raise ParseError(path, f"Non-finite number at '{path}'")
    return number


def _number(payload: Dict[str, Any], path: str) -> float:
    value = _lookup(payload, path)
    if value is _MISSING:
        raise ParseError(path)
    return _finite(value, path)


def _integer(payload: Dict[str, Any], path: str) -> int:
    return int(round(_number(payload, path)))


def _optional_number(payload: Dict[str, Any], path: str) -> Optional[float]:
    value = _lookup(payload, path)
    if value is _MISSING or value is None:
        return None
    return _finite(value, path)


def _optional_integer(payload: Dict[str, Any], path: str) -> Optional[int]:
    value = _optional_number(payload, path)
    return None if value is None else int(round(value))


def _string(payload: Dict[str, Any], path: str) -> str:
    value = _lookup(payload, path)
    if not isinstance(value, str):
        raise ParseError(path)
    return value


def _timestamp(payload: Dict[str, Any], path: str) -> datetime:
    seconds = _number(payload, path)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ParseError(path, f"Timestamp out of range at '{path}': {seconds}") from e


def _block(payload: Dict[str, Any], path: str) -> Dict[str, Any]:
    value = _lookup(payload, path)
    if not isinstance(value, dict):
        raise ParseError(path, f"Response missing '{path}' block")
    return value


def parse_condition(entry: Any) -> Condition:
    """Condition entry; fields that are absent or of the wrong type fall back to the default."""
    if not isinstance(entry, dict):
        return DEFAULT_CONDITION

    def text(key: str, default: str) -> str:
        value = entry.get(key)
        return value if isinstance(value, str) else default

    condition_id = entry.get("id")
    if isinstance(condition_id, bool) or not isinstance(condition_id, int):
        condition_id = DEFAULT_CONDITION.id

    return Condition(
        id=condition_id,
        category=text("main", DEFAULT_CONDITION.category),
        description=text("description", DEFAULT_CONDITION.description),
        icon_code=text("icon", DEFAULT_CONDITION.icon_code),
    )


def primary_condition(payload: Dict[str, Any]) -> Condition:
    """First element of the 'weather' array, or a default when it is empty."""
    conditions = payload.get("weather")
    if conditions is None:
        conditions = []
    if not isinstance(conditions, list):
        raise ParseError("weather")
    if not conditions:
        logging.warning("Response has an empty 'weather' array, using default condition")
        return DEFAULT_CONDITION
    return parse_condition(conditions[0])


def parse_weather(payload: Any) -> WeatherSnapshot:
    """
    Build a WeatherSnapshot from a current-weather payload.

    Raises:
        ParseError: with the dotted path of the first missing/invalid field
    """
    if not isinstance(payload, dict):
        raise ParseError("<root>", "Response is not a JSON object")

    _block(payload, "main")
    _block(payload, "wind")
    _block(payload, "sys")
    condition = primary_condition(payload)

    observed_at = None
    if _optional_number(payload, "dt") is not None:
        observed_at = _timestamp(payload, "dt")

    country = _lookup(payload, "sys.country")

    snapshot = WeatherSnapshot(
        city_name=_string(payload, "name"),
        temperature=_number(payload, "main.temp"),
        feels_like=_number(payload, "main.feels_like"),
        temp_max=_number(payload, "main.temp_max"),
        temp_min=_number(payload, "main.temp_min"),
        humidity=_integer(payload, "main.humidity"),
        pressure=_integer(payload, "main.pressure"),
        wind_speed=_number(payload, "wind.speed"),
        wind_degrees=_integer(payload, "wind.deg"),
        description=condition.description,
        icon_code=condition.icon_code,
        sunrise=_timestamp(payload, "sys.sunrise"),
        sunset=_timestamp(payload, "sys.sunset"),
        timezone_offset=_integer(payload, "timezone"),
        condition_category=condition.category,
        country=country if isinstance(country, str) else None,
        latitude=_optional_number(payload, "coord.lat"),
        longitude=_optional_number(payload, "coord.lon"),
        wind_gust=_optional_number(payload, "wind.gust"),
        cloudiness=_optional_integer(payload, "clouds.all"),
        visibility=_optional_integer(payload, "visibility"),
        observed_at=observed_at,
    )
    logging.debug(f"Parsed snapshot for {snapshot.city_name}: {snapshot.temperature}K, {snapshot.description}")
    return snapshot


def parse_forecast_reading(item: Any) -> ForecastReading:
    """Parse one element of the forecast 'list' array."""
    if not isinstance(item, dict):
        raise ParseError("list[]", "Forecast entry is not a JSON object")
    return ForecastReading(
        time=_timestamp(item, "dt"),
        temperature=_number(item, "main.temp"),
        temp_min=_number(item, "main.temp_min"),
        temp_max=_number(item, "main.temp_max"),
        condition=primary_condition(item),
        humidity=_optional_integer(item, "main.humidity"),
        wind_speed=_optional_number(item, "wind.speed"),
        wind_degrees=_optional_integer(item, "wind.deg"),
        precipitation_probability=_optional_number(item, "pop"),
    )


def parse_forecast_series(payload: Any) -> ForecastSeries:
    """Parse the forecast envelope; list items are validated later, one by one."""
    if not isinstance(payload, dict):
        raise ParseError("<root>", "Response is not a JSON object")
    items = _lookup(payload, "list")
    if not isinstance(items, list):
        raise ParseError("list", "Response missing 'list' array")
    _block(payload, "city")

    sunrise = sunset = None
    if _optional_number(payload, "city.sunrise") is not None:
        sunrise = _timestamp(payload, "city.sunrise")
    if _optional_number(payload, "city.sunset") is not None:
        sunset = _timestamp(payload, "city.sunset")
    country = _lookup(payload, "city.country")

    return ForecastSeries(
        city_name=_string(payload, "city.name"),
        timezone_offset=_integer(payload, "city.timezone"),
        items=tuple(items),
        country=country if isinstance(country, str) else None,
        sunrise=sunrise,
        sunset=sunset,
    )


def parse_error_payload(payload: Any) -> RemoteApiError:
    """Interpret the API's {cod, message} error body."""
    if not isinstance(payload, dict):
        raise ParseError("<root>", "Response is not a JSON object")
    message = _lookup(payload, "message")
    code = _lookup(payload, "cod")
    if not isinstance(message, str):
        raise ParseError("message")
    if code is _MISSING or code is None:
        raise ParseError("cod")
    return RemoteApiError(message, code=str(code))


def decode_json(body: Body) -> Any:
    """Decode a response body; dicts are passed through unchanged."""
    if isinstance(body, dict):
        return body
    if body is None:
        raise NoDataError()
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError("<body>", f"Response is not valid UTF-8: {e}") from e
    if not body.strip():
        raise NoDataError()
    try:
        return json.loads(body)
    except ValueError as e:
        logging.debug(f"Non-JSON response body (truncated): {body[:200]}")
        raise ParseError("<body>", f"Response is not valid JSON: {e}") from e


def _decode(body: Body, parse: Callable[[Any], T]) -> T:
    data = decode_json(body)
    try:
        return parse(data)
    except ParseError as parse_error:
        try:
            remote_error = parse_error_payload(data)
        except ParseError:
            logging.error(f"Failed to parse API response: {parse_error}")
            raise parse_error
        logging.error(f"API error {remote_error.code}: {remote_error}")
        raise remote_error from parse_error


def decode_weather_response(body: Body) -> WeatherSnapshot:
    """
    Decode a current-weather response.

    The success shape is tried first; on failure the {cod, message} error
    shape is tried before the parse failure is reported.

    Raises:
        NoDataError: empty body
        RemoteApiError: body is the API's error shape
        ParseError: anything else that does not match
    """
    return _decode(body, parse_weather)


def decode_forecast_response(body: Body) -> ForecastSeries:
    """Same as decode_weather_response, for the forecast endpoint."""
    return _decode(body, parse_forecast_series)
