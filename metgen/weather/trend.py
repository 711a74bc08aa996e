"""Short-term trend remarks from forecast data."""

import logging
from datetime import timedelta
from typing import List, Optional, Sequence

from metgen.models.observation import ForecastPoint, WeatherObservation
from metgen.models.report import PressureTendency, TrendRemark
from metgen.utils.units import UnitConverter

logger = logging.getLogger(__name__)


class TrendAnalyzer:
    """
    Derive a trend remark by comparing forecast points with the current
    observation.

    Two remarks can come out of the comparison:
    - a pressure tendency (PRESRR/PRESFR) when pressure is forecast to
      change by at least 1 hPa per hour within the next three hours
    - a forecast group for the first point in the next two hours that
      brings present weather, gusts, reduced visibility or a marked wind
      increase

    No remark is produced when the forecast is too thin to judge.
    """

    PRESSURE_RATE_HPA_PER_HOUR = 1.0
    PRESSURE_LOOKAHEAD = timedelta(hours=3)
    FORECAST_HORIZON = timedelta(hours=2)
    SIGNIFICANT_VISIBILITY_M = 5000
    WIND_INCREASE_KT = 10.0

    @classmethod
    def derive_trend(
        cls,
        observation: WeatherObservation,
        forecast_window: Sequence[ForecastPoint],
    ) -> Optional[TrendRemark]:
        """
        Args:
            observation: Current normalized observation
            forecast_window: Hourly forecast points in any order

        Returns:
            TrendRemark, or None if nothing significant can be derived
        """
        upcoming = cls._upcoming(observation, forecast_window)
        if not upcoming:
            logger.debug("No forecast points after %s, no trend", observation.timestamp_utc)
            return None

        tendency = cls.pressure_tendency(observation, upcoming)
        forecast = cls.significant_forecast(observation, upcoming)
        if tendency is None and forecast is None:
            return None
        return TrendRemark(pressure_tendency=tendency, forecast=forecast)

    @staticmethod
    def _upcoming(
        observation: WeatherObservation,
        forecast_window: Sequence[ForecastPoint],
    ) -> List[ForecastPoint]:
        return sorted(
            (p for p in forecast_window if p.timestamp_utc > observation.timestamp_utc),
            key=lambda p: p.timestamp_utc,
        )

    @classmethod
    def pressure_tendency(
        cls,
        observation: WeatherObservation,
        upcoming: Sequence[ForecastPoint],
    ) -> Optional[PressureTendency]:
        """Rate of change to the last forecast pressure within the lookahead."""
        limit = observation.timestamp_utc + cls.PRESSURE_LOOKAHEAD
        last = None
        for point in upcoming:
            if point.timestamp_utc > limit:
                break
            if point.pressure_hpa is not None:
                last = point
        if last is None:
            return None
        hours = (last.timestamp_utc - observation.timestamp_utc).total_seconds() / 3600.0
        rate = (last.pressure_hpa - observation.altimeter_hpa) / hours
        if rate >= cls.PRESSURE_RATE_HPA_PER_HOUR:
            return PressureTendency.RISING_RAPIDLY
        if rate <= -cls.PRESSURE_RATE_HPA_PER_HOUR:
            return PressureTendency.FALLING_RAPIDLY
        return None

    @classmethod
    def significant_forecast(
        cls,
        observation: WeatherObservation,
        upcoming: Sequence[ForecastPoint],
    ) -> Optional[ForecastPoint]:
        limit = observation.timestamp_utc + cls.FORECAST_HORIZON
        for point in upcoming:
            if point.timestamp_utc > limit:
                break
            if cls._is_significant(observation, point):
                return point
        return None

    @classmethod
    def _is_significant(cls, observation: WeatherObservation, point: ForecastPoint) -> bool:
        if point.present_weather:
            return True
        if point.visibility_m is not None and point.visibility_m < cls.SIGNIFICANT_VISIBILITY_M:
            return True
        speed = point.wind_speed_kt
        # Same rule as the wind group: a gust only counts once it reports
        if point.wind_gust_kt is not None and speed is not None \
                and UnitConverter.wind_speed(point.wind_gust_kt) > UnitConverter.wind_speed(speed):
            return True
        if speed is not None and observation.wind_speed_kt is not None:
            return speed - observation.wind_speed_kt >= cls.WIND_INCREASE_KT
        return False
