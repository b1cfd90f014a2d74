"""Tests for the terminal front end."""
import json
import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, patch
import main
from units import TemperatureUnit
from weather_data import WeatherSnapshot, WeatherState

CURRENT = {
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {
        "temp": 293.15,
        "feels_like": 291.15,
        "temp_min": 288.15,
        "temp_max": 298.15,
        "pressure": 1013,
        "humidity": 65,
    },
    "wind": {"speed": 5.2, "deg": 180},
    "sys": {"country": "US", "sunrise": 1714568400, "sunset": 1714618200},
    "timezone": -28800,
    "name": "San Francisco",
}

FORECAST = {
    "list": [
        {"dt": 1714521600 + h * 3600, "main": {"temp": 290.0, "temp_min": 289.0, "temp_max": 291.0},
         "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}]}
        for h in range(0, 24, 3)
    ],
    "city": {"name": "San Francisco", "country": "US", "timezone": -28800},
}


def fake_get(url, params=None, timeout=None):
    payload = FORECAST if url.endswith("/forecast") else CURRENT
    response = Mock()
    response.status_code = 200
    response.ok = True
    response.content = json.dumps(payload).encode("utf-8")
    return response


@pytest.fixture(autouse=True)
def quiet(monkeypatch):
    monkeypatch.setattr(main, "setup_logging", lambda log_file, verbose: None)
    monkeypatch.setattr("config.load_dotenv", lambda: None)
    for name in ("WEATHER_API_KEY", "WEATHER_LAT", "WEATHER_LON", "WEATHER_BASE_URL", "WEATHER_FORECAST_URL"):
        monkeypatch.delenv(name, raising=False)


def test_parse_args_requires_target():
    with pytest.raises(SystemExit):
        main.parse_args([])


def test_parse_args_city():
    args = main.parse_args(["--city", "Paris", "--units", "F"])

    assert args.city == "Paris"
    assert args.units == "F"
    assert args.here is False


def test_render_error_state():
    lines = main.render_state(WeatherState(error_message="City not found"), TemperatureUnit.CELSIUS)
    assert lines == ["Error: City not found"]


def test_render_forecast_error():
    snapshot = WeatherSnapshot(
        city_name="Testville", temperature=293.15, feels_like=293.15, temp_max=293.15,
        temp_min=293.15, humidity=50, pressure=1000, wind_speed=1.0, wind_degrees=0,
        description="clear sky", icon_code="01d",
        sunrise=datetime(2024, 5, 1, 5, tzinfo=timezone.utc),
        sunset=datetime(2024, 5, 1, 19, tzinfo=timezone.utc),
        timezone_offset=0,
    )
    lines = main.render_state(
        WeatherState(snapshot=snapshot, forecast_error="No data received"),
        TemperatureUnit.CELSIUS,
    )

    assert lines[0] == "Testville"
    assert lines[-1] == "Forecast unavailable: No data received"


def test_main_missing_api_key(capsys):
    assert main.main(["--city", "Paris"]) == 2
    assert "WEATHER_API_KEY" in capsys.readouterr().out


def test_main_city_lookup(monkeypatch, capsys):
    monkeypatch.setenv("WEATHER_API_KEY", "test_key")

    with patch("openweather_provider.requests.get", side_effect=fake_get):
        code = main.main(["--city", "San Francisco"])

    out = capsys.readouterr().out
    assert code == 0
    assert "San Francisco, US" in out
    assert "20.0°C  Clear Sky" in out
    assert "Wind 5.2 m/s S" in out


def test_main_here_without_coordinates(monkeypatch, capsys):
    monkeypatch.setenv("WEATHER_API_KEY", "test_key")

    with patch("openweather_provider.requests.get") as mock_get:
        code = main.main(["--here"])
        mock_get.assert_not_called()

    assert code == 1
    assert "Error:" in capsys.readouterr().out


def test_main_here_with_coordinates(monkeypatch, capsys):
    monkeypatch.setenv("WEATHER_API_KEY", "test_key")
    monkeypatch.setenv("WEATHER_LAT", "37.77")
    monkeypatch.setenv("WEATHER_LON", "-122.42")

    with patch("openweather_provider.requests.get", side_effect=fake_get) as mock_get:
        code = main.main(["--here", "--no-forecast"])

    assert code == 0
    assert mock_get.call_count == 1
    assert mock_get.call_args.kwargs["params"]["lat"] == 37.77
