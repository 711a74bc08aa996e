"""Provider payloads to the canonical WeatherObservation."""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from metgen.errors import MalformedPayload
from metgen.models.observation import (
    CloudLayer,
    ForecastPoint,
    PrecipitationFlags,
    WeatherObservation,
    WeatherPhenomenon,
)
from metgen.utils.units import UnitConverter
from metgen.weather.codes import phenomenon_for_condition

logger = logging.getLogger(__name__)


class SchemaKind(Enum):
    """
    Provider payload variants.

    BASIC: current conditions only.
    EXTENDED: current conditions plus hourly/daily forecast.
    """

    BASIC = "basic"
    EXTENDED = "extended"


FieldPath = Tuple[str, ...]

BASIC_FIELDS: Dict[str, FieldPath] = {
    'timestamp': ('dt',),
    'temperature_k': ('main', 'temp'),
    'pressure_hpa': ('main', 'pressure'),
    'humidity_pct': ('main', 'humidity'),
    'wind_speed_mps': ('wind', 'speed'),
    'wind_dir_deg': ('wind', 'deg'),
    'wind_gust_mps': ('wind', 'gust'),
    'visibility_m': ('visibility',),
    'cloud_pct': ('clouds', 'all'),
    'conditions': ('weather',),
    'rain_1h_mm': ('rain', '1h'),
    'snow_1h_mm': ('snow', '1h'),
}

EXTENDED_FIELDS: Dict[str, FieldPath] = {
    'timestamp': ('current', 'dt'),
    'temperature_k': ('current', 'temp'),
    'dewpoint_k': ('current', 'dew_point'),
    'pressure_hpa': ('current', 'pressure'),
    'humidity_pct': ('current', 'humidity'),
    'wind_speed_mps': ('current', 'wind_speed'),
    'wind_dir_deg': ('current', 'wind_deg'),
    'wind_gust_mps': ('current', 'wind_gust'),
    'visibility_m': ('current', 'visibility'),
    'cloud_pct': ('current', 'clouds'),
    'conditions': ('current', 'weather'),
    'rain_1h_mm': ('current', 'rain', '1h'),
    'snow_1h_mm': ('current', 'snow', '1h'),
}

HOURLY_FIELDS: Dict[str, FieldPath] = {
    'timestamp': ('dt',),
    'temperature_k': ('temp',),
    'pressure_hpa': ('pressure',),
    'wind_speed_mps': ('wind_speed',),
    'wind_dir_deg': ('wind_deg',),
    'wind_gust_mps': ('wind_gust',),
    'visibility_m': ('visibility',),
    'conditions': ('weather',),
}

SCHEMA_FIELDS = {
    SchemaKind.BASIC: BASIC_FIELDS,
    SchemaKind.EXTENDED: EXTENDED_FIELDS,
}

REQUIRED_FIELDS = ('timestamp', 'temperature_k', 'pressure_hpa')

# Providers cap visibility here; at the cap it means "10 km or more"
PROVIDER_VISIBILITY_CAP_M = 10000

# Cloud cover percentage upper bounds
COVERAGE_BANDS = (
    (25, "FEW"),
    (50, "SCT"),
    (87, "BKN"),
    (100, "OVC"),
)

# Cloud base estimate from the temperature/dewpoint spread
CLOUD_BASE_M_PER_DEG = 125.0
MIN_CLOUD_BASE_M = 30.0
DEFAULT_CLOUD_BASE_M = 1500.0


def _lookup(payload: Mapping[str, Any], path: FieldPath) -> Any:
    value: Any = payload
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
        if value is None:
            return None
    return value


class WeatherNormalizer:
    """
    Map provider payloads onto WeatherObservation.

    Each schema kind has its own field table; nothing is probed
    dynamically. Temperatures arrive in Kelvin, wind in m/s, pressure in hPa
    and visibility in meters.

    Example:
        observation = WeatherNormalizer.normalize(payload, SchemaKind.BASIC)
    """

    @classmethod
    def normalize(cls, payload: Any, kind: SchemaKind) -> WeatherObservation:
        """
        Normalize the current conditions of a payload.

        Raises:
            MalformedPayload: timestamp, temperature or pressure is missing
                or not numeric
        """
        if not isinstance(payload, Mapping):
            raise MalformedPayload(f"{kind.value} payload is not a JSON object")
        fields = cls._extract(payload, SCHEMA_FIELDS[kind])
        missing = [name for name in REQUIRED_FIELDS if fields.get(name) is None]
        if missing:
            raise MalformedPayload(
                f"{kind.value} payload is missing required fields: {', '.join(missing)}"
            )

        timestamp = cls._timestamp(fields['timestamp'])
        temperature = UnitConverter.kelvin_to_celsius(fields['temperature_k'])
        dewpoint = cls._dewpoint(temperature, fields)

        wind_speed = cls._knots(fields.get('wind_speed_mps'))
        wind_dir = fields.get('wind_dir_deg') if wind_speed is not None else None
        wind_gust = cls._knots(fields.get('wind_gust_mps'))

        weather = cls._present_weather(fields.get('conditions'))
        precipitation = PrecipitationFlags.from_phenomena(weather)
        if (fields.get('rain_1h_mm') or 0) > 0 and not precipitation.rain:
            precipitation = replace(precipitation, rain=True)
        if (fields.get('snow_1h_mm') or 0) > 0 and not precipitation.snow:
            precipitation = replace(precipitation, snow=True)

        observation = WeatherObservation(
            timestamp_utc=timestamp,
            temperature_c=temperature,
            dewpoint_c=dewpoint,
            altimeter_hpa=float(fields['pressure_hpa']),
            wind_dir_deg=wind_dir,
            wind_speed_kt=wind_speed,
            wind_gust_kt=wind_gust,
            visibility_m=cls._visibility(fields.get('visibility_m'), precipitation),
            cloud_layers=cls._cloud_layers(fields.get('cloud_pct'), temperature, dewpoint),
            present_weather=frozenset(weather),
            precipitation=precipitation,
        )
        logger.debug("Normalized %s payload observed at %s", kind.value, timestamp.isoformat())
        return observation

    @classmethod
    def forecast(cls, payload: Any, kind: SchemaKind) -> List[ForecastPoint]:
        """
        Hourly forecast points, oldest first.

        Basic payloads have no forecast. Entries without a timestamp are
        skipped rather than rejected since the forecast is optional.
        """
        if kind is not SchemaKind.EXTENDED or not isinstance(payload, Mapping):
            return []
        hourly = payload.get('hourly')
        if not isinstance(hourly, Sequence):
            return []

        points = []
        for entry in hourly:
            if not isinstance(entry, Mapping):
                continue
            try:
                fields = cls._extract(entry, HOURLY_FIELDS)
                if fields.get('timestamp') is None:
                    continue
                timestamp = cls._timestamp(fields['timestamp'])
            except MalformedPayload:
                logger.debug("Skipping malformed forecast entry: %s", entry)
                continue
            temperature_k = fields.get('temperature_k')
            weather = cls._present_weather(fields.get('conditions'))
            points.append(ForecastPoint(
                timestamp_utc=timestamp,
                pressure_hpa=fields.get('pressure_hpa'),
                temperature_c=(
                    UnitConverter.kelvin_to_celsius(temperature_k)
                    if temperature_k is not None else None
                ),
                wind_dir_deg=fields.get('wind_dir_deg'),
                wind_speed_kt=cls._knots(fields.get('wind_speed_mps')),
                wind_gust_kt=cls._knots(fields.get('wind_gust_mps')),
                visibility_m=cls._visibility(
                    fields.get('visibility_m'), PrecipitationFlags.from_phenomena(weather)
                ),
                present_weather=frozenset(weather),
            ))
        return sorted(points, key=lambda p: p.timestamp_utc)

    # --- Field helpers ---

    @staticmethod
    def _extract(payload: Mapping[str, Any], table: Dict[str, FieldPath]) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for name, path in table.items():
            value = _lookup(payload, path)
            if value is None or name == 'conditions':
                fields[name] = value
                continue
            if isinstance(value, bool):
                raise MalformedPayload(f"Field {'.'.join(path)} is not numeric: {value!r}")
            try:
                fields[name] = float(value)
            except (TypeError, ValueError) as e:
                raise MalformedPayload(f"Field {'.'.join(path)} is not numeric: {value!r}") from e
        return fields

    @staticmethod
    def _timestamp(epoch: float) -> datetime:
        try:
            return datetime.fromtimestamp(int(epoch), tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedPayload(f"Invalid timestamp {epoch!r}") from e

    @staticmethod
    def _knots(mps: Optional[float]) -> Optional[float]:
        if mps is None:
            return None
        return UnitConverter.mps_to_knots(max(mps, 0.0))

    @staticmethod
    def _dewpoint(temperature_c: float, fields: Mapping[str, Any]) -> Optional[float]:
        if fields.get('dewpoint_k') is not None:
            return UnitConverter.kelvin_to_celsius(fields['dewpoint_k'])
        if fields.get('humidity_pct') is not None:
            return UnitConverter.dewpoint_from_humidity(temperature_c, fields['humidity_pct'])
        return None

    @staticmethod
    def _present_weather(conditions: Any) -> List[WeatherPhenomenon]:
        if not isinstance(conditions, Sequence) or isinstance(conditions, str):
            return []
        weather = []
        for condition in conditions:
            if not isinstance(condition, Mapping):
                continue
            try:
                condition_id = int(condition.get('id'))
            except (TypeError, ValueError):
                continue
            phenomenon = phenomenon_for_condition(condition_id)
            if phenomenon is not None:
                weather.append(phenomenon)
        return weather

    @staticmethod
    def _visibility(meters: Optional[float], precipitation: PrecipitationFlags) -> Optional[float]:
        if meters is None:
            return None
        if meters >= PROVIDER_VISIBILITY_CAP_M and not precipitation.reduces_visibility:
            return None
        return max(meters, 0.0)

    @staticmethod
    def _cloud_layers(
        cloud_pct: Optional[float],
        temperature_c: float,
        dewpoint_c: Optional[float],
    ) -> Tuple[CloudLayer, ...]:
        if cloud_pct is None or cloud_pct <= 0:
            return ()
        coverage = "OVC"
        for upper, code in COVERAGE_BANDS:
            if cloud_pct <= upper:
                coverage = code
                break
        if dewpoint_c is None:
            base = DEFAULT_CLOUD_BASE_M
        else:
            base = max((temperature_c - dewpoint_c) * CLOUD_BASE_M_PER_DEG, MIN_CLOUD_BASE_M)
        return (CloudLayer(coverage=coverage, base_height_m=base),)
