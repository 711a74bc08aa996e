"""Data models shared across the METAR pipeline."""

from metgen.models.station import Region, StationRef, RawLocation, LocationKind
from metgen.models.observation import (
    CloudLayer,
    WeatherPhenomenon,
    PrecipitationFlags,
    WeatherObservation,
    ForecastPoint,
)
from metgen.models.report import METARReport, TrendRemark, PressureTendency, ReportSource

__all__ = [
    'Region',
    'StationRef',
    'RawLocation',
    'LocationKind',
    'CloudLayer',
    'WeatherPhenomenon',
    'PrecipitationFlags',
    'WeatherObservation',
    'ForecastPoint',
    'METARReport',
    'TrendRemark',
    'PressureTendency',
    'ReportSource',
]
