"""Encode a WeatherObservation as a METAR string."""

import logging
import math
from datetime import datetime, timezone
from typing import List, Optional

from metgen.errors import FormattingImpossible
from metgen.models.observation import ForecastPoint, WeatherObservation
from metgen.models.report import TrendRemark
from metgen.models.station import Region, StationRef
from metgen.utils.units import UnitConverter

logger = logging.getLogger(__name__)

CLEAR_SKY = "SKC"
MISSING_WIND = "/////KT"
MISSING_DEWPOINT = "//"


class METARFormatter:
    """
    Deterministic METAR encoder.

    Groups are emitted in a fixed order:
    station, day/time, wind, visibility, present weather, clouds,
    temperature/dewpoint, altimeter or QNH, remarks.

    The station region picks statute miles and inches of mercury
    (NORTH_AMERICA) or metric visibility and QNH (INTERNATIONAL). Cloud
    heights are always in hundreds of feet and wind always in knots.

    Example:
        text = METARFormatter.format(station, observation)
        # "KXXX 121851Z 27012G18KT 10SM SKC M02/M05 A2992"
    """

    @classmethod
    def format(
        cls,
        station: StationRef,
        observation: WeatherObservation,
        trend: Optional[TrendRemark] = None,
    ) -> str:
        """
        Encode a normalized observation.

        Raises:
            FormattingImpossible: the observation breaks invariants that
                normalization guarantees (non-finite values, unsorted clouds)
        """
        cls._check(observation)
        region = station.region

        groups: List[str] = [
            station.identifier.upper(),
            cls.time_group(observation.timestamp_utc),
            cls.wind_group(
                observation.wind_dir_deg,
                observation.wind_speed_kt,
                observation.wind_gust_kt,
            ),
            UnitConverter.visibility_group(observation.visibility_m, region),
        ]
        groups.extend(wx.code for wx in observation.sorted_weather())
        groups.extend(cls.cloud_groups(observation))
        groups.append(cls.temperature_group(observation.temperature_c, observation.dewpoint_c))
        groups.append(UnitConverter.pressure_group(observation.altimeter_hpa, region))

        remarks = cls.remarks(trend, region)
        if remarks:
            groups.append("RMK")
            groups.extend(remarks)
        return " ".join(groups)

    # --- Groups ---

    @staticmethod
    def time_group(timestamp: datetime) -> str:
        """DDHHMMZ; naive datetimes are taken as UTC."""
        return _as_utc(timestamp).strftime("%d%H%MZ")

    @staticmethod
    def wind_group(
        direction: Optional[float],
        speed_kt: Optional[float],
        gust_kt: Optional[float] = None,
    ) -> str:
        """
        dddff[Gfff]KT, VRB for a variable direction, 00000KT when calm.

        Gusts are only reported when they exceed the mean wind.
        """
        if speed_kt is None:
            return MISSING_WIND
        speed = UnitConverter.wind_speed(speed_kt)
        if speed == 0:
            return "00000KT"
        heading = "VRB" if direction is None else f"{UnitConverter.wind_direction(direction):03d}"
        gust = ""
        if gust_kt is not None:
            gust_speed = UnitConverter.wind_speed(gust_kt)
            if gust_speed > speed:
                gust = f"G{gust_speed:02d}"
        return f"{heading}{speed:02d}{gust}KT"

    @staticmethod
    def cloud_groups(observation: WeatherObservation) -> List[str]:
        if not observation.cloud_layers:
            return [CLEAR_SKY]
        return [
            f"{layer.coverage}{UnitConverter.cloud_height(layer.base_height_m)}"
            for layer in observation.cloud_layers
        ]

    @staticmethod
    def temperature_group(temperature_c: float, dewpoint_c: Optional[float]) -> str:
        dewpoint = MISSING_DEWPOINT if dewpoint_c is None else UnitConverter.temperature(dewpoint_c)
        return f"{UnitConverter.temperature(temperature_c)}/{dewpoint}"

    @classmethod
    def remarks(cls, trend: Optional[TrendRemark], region: Region) -> List[str]:
        if trend is None or trend.is_empty:
            return []
        tokens: List[str] = []
        if trend.pressure_tendency is not None:
            tokens.append(trend.pressure_tendency.value)
        if trend.forecast is not None:
            tokens.extend(cls.forecast_group(trend.forecast, region))
        return tokens

    @classmethod
    def forecast_group(cls, point: ForecastPoint, region: Region) -> List[str]:
        """FCST HHMMZ followed by wind, visibility and weather for that hour."""
        tokens = ["FCST", _as_utc(point.timestamp_utc).strftime("%H%MZ")]
        if point.wind_speed_kt is not None:
            tokens.append(cls.wind_group(point.wind_dir_deg, point.wind_speed_kt, point.wind_gust_kt))
        tokens.append(UnitConverter.visibility_group(point.visibility_m, region))
        tokens.extend(wx.code for wx in point.sorted_weather())
        return tokens

    # --- Invariants ---

    @staticmethod
    def _check(observation: WeatherObservation) -> None:
        values = {
            'temperature': observation.temperature_c,
            'altimeter': observation.altimeter_hpa,
            'dewpoint': observation.dewpoint_c,
            'wind speed': observation.wind_speed_kt,
            'wind gust': observation.wind_gust_kt,
            'wind direction': observation.wind_dir_deg,
            'visibility': observation.visibility_m,
        }
        for name, value in values.items():
            if value is not None and not math.isfinite(value):
                raise FormattingImpossible(f"{name} is not a finite number: {value!r}")
        if observation.wind_speed_kt is not None and observation.wind_speed_kt < 0:
            raise FormattingImpossible(f"Negative wind speed {observation.wind_speed_kt}")
        if observation.altimeter_hpa <= 0:
            raise FormattingImpossible(f"Non-positive pressure {observation.altimeter_hpa}")
        heights = [layer.base_height_m for layer in observation.cloud_layers]
        if heights != sorted(heights):
            raise FormattingImpossible("Cloud layers are not sorted by height")


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)
