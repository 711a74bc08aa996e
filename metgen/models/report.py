"""METAR report models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from metgen.models.observation import ForecastPoint, WeatherObservation
from metgen.models.station import StationRef


class PressureTendency(Enum):
    """Remark codes for rapid pressure change."""

    RISING_RAPIDLY = "PRESRR"
    FALLING_RAPIDLY = "PRESFR"


@dataclass(frozen=True)
class TrendRemark:
    """
    Short-term trend derived from forecast data.

    Rendering is left to the formatter so the region conventions apply to
    the forecast group as well.
    """

    pressure_tendency: Optional[PressureTendency] = None
    forecast: Optional[ForecastPoint] = None

    @property
    def is_empty(self) -> bool:
        return self.pressure_tendency is None and self.forecast is None


class ReportSource(Enum):
    SYNTHESIZED = "synthesized"
    OBSERVED = "observed"


@dataclass(frozen=True)
class METARReport:
    """
    Final output of the pipeline.

    Observed reports are real METARs passed through verbatim; they carry no
    observation or trend.
    """

    station: StationRef
    rendered_text: str
    observation: Optional[WeatherObservation] = None
    trend_remark: Optional[TrendRemark] = None
    source: ReportSource = ReportSource.SYNTHESIZED

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        obs = self.observation
        return {
            'station': {
                'identifier': self.station.identifier,
                'name': self.station.name,
                'latitude': self.station.latitude,
                'longitude': self.station.longitude,
                'elevation_m': self.station.elevation_m,
                'region': self.station.region.value,
                'synthetic': self.station.synthetic,
            },
            'source': self.source.value,
            'metar': self.rendered_text,
            'observation_time': obs.timestamp_utc.isoformat() if obs else None,
            'trend': {
                'pressure_tendency': (
                    self.trend_remark.pressure_tendency.value
                    if self.trend_remark.pressure_tendency else None
                ),
                'forecast_time': (
                    self.trend_remark.forecast.timestamp_utc.isoformat()
                    if self.trend_remark.forecast else None
                ),
            } if self.trend_remark else None,
        }

    def __str__(self) -> str:
        return self.rendered_text
