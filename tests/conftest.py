import pytest
from datetime import datetime, timezone
from pathlib import Path

from metgen.airports.directory import AirportDirectory
from metgen.models.observation import WeatherObservation
from metgen.models.station import Region, StationRef

# 2024-03-12 18:51 UTC
OBSERVATION_EPOCH = 1710269460


@pytest.fixture
def test_assets_dir() -> Path:
    """Return the path to the test assets directory."""
    return Path(__file__).parent / 'assets'


@pytest.fixture
def airports_csv(test_assets_dir) -> Path:
    return test_assets_dir / 'airports_test.csv'


@pytest.fixture
def directory(airports_csv) -> AirportDirectory:
    return AirportDirectory.from_csv(airports_csv)


@pytest.fixture
def observed_at() -> datetime:
    return datetime(2024, 3, 12, 18, 51, tzinfo=timezone.utc)


@pytest.fixture
def na_station() -> StationRef:
    return StationRef(identifier="KXXX", latitude=40.0, longitude=-100.0,
                      region=Region.NORTH_AMERICA)


@pytest.fixture
def intl_station() -> StationRef:
    return StationRef(identifier="EGLL", latitude=51.4706, longitude=-0.461941,
                      region=Region.INTERNATIONAL)


@pytest.fixture
def winter_observation(observed_at) -> WeatherObservation:
    """Clear, cold and gusty: KXXX 121851Z 27012G18KT 10SM SKC M02/M05 A2992."""
    return WeatherObservation(
        timestamp_utc=observed_at,
        temperature_c=-2.0,
        dewpoint_c=-5.0,
        altimeter_hpa=1013.25,
        wind_dir_deg=270,
        wind_speed_kt=12.0,
        wind_gust_kt=18.0,
    )


@pytest.fixture
def basic_payload() -> dict:
    """OpenWeather 2.5 current weather response."""
    return {
        "coord": {"lon": -73.78, "lat": 40.64},
        "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01n"}],
        "base": "stations",
        "main": {"temp": 271.15, "feels_like": 264.2, "pressure": 1013.25, "humidity": 80},
        "visibility": 10000,
        "wind": {"speed": 6.3, "deg": 270, "gust": 9.5},
        "clouds": {"all": 0},
        "dt": OBSERVATION_EPOCH,
        "sys": {"country": "US"},
        "name": "Jamaica",
        "cod": 200,
    }


@pytest.fixture
def extended_payload() -> dict:
    """OpenWeather One Call 3.0 response with light rain and mist."""
    return {
        "lat": 51.47,
        "lon": -0.45,
        "timezone": "Europe/London",
        "current": {
            "dt": OBSERVATION_EPOCH,
            "temp": 283.15,
            "pressure": 1002,
            "humidity": 87,
            "dew_point": 281.15,
            "clouds": 75,
            "visibility": 6000,
            "wind_speed": 5.1,
            "wind_deg": 184,
            "wind_gust": 5.0,
            "weather": [
                {"id": 500, "main": "Rain", "description": "light rain"},
                {"id": 701, "main": "Mist", "description": "mist"},
            ],
            "rain": {"1h": 0.4},
        },
        "hourly": [
            {
                "dt": OBSERVATION_EPOCH + 540,  # 19:00
                "temp": 283.0,
                "pressure": 1001,
                "wind_speed": 6.0,
                "wind_deg": 190,
                "visibility": 8000,
                "weather": [{"id": 803, "main": "Clouds"}],
            },
            {
                "dt": OBSERVATION_EPOCH + 4140,  # 20:00
                "temp": 282.5,
                "pressure": 999,
                "wind_speed": 8.0,
                "wind_deg": 200,
                "wind_gust": 14.0,
                "visibility": 4000,
                "weather": [{"id": 501, "main": "Rain"}],
            },
            {
                "dt": OBSERVATION_EPOCH + 7740,  # 21:00
                "temp": 282.0,
                "pressure": 997,
                "wind_speed": 8.5,
                "wind_deg": 210,
                "visibility": 10000,
                "weather": [{"id": 804, "main": "Clouds"}],
            },
        ],
    }
