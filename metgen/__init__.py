"""
Synthesized METAR generation for locations without an official feed.

This package resolves a location to a station, normalizes weather provider
payloads and encodes them as METAR text using North American or
international conventions.

The main public API includes:
- MetarGenerator: End to end pipeline
- MetgenConfig: File and environment configuration
- RawLocation, StationRef, Region: Location and station models
- WeatherObservation, METARReport: Observation and report models
- METARFormatter: Observation to METAR encoder
"""

from metgen.config import MetgenConfig
from metgen.errors import MetgenError
from metgen.models import METARReport, RawLocation, Region, StationRef, WeatherObservation
from metgen.pipeline import MetarGenerator
from metgen.weather import METARFormatter

__version__ = '0.1.0'
__all__ = [
    'MetarGenerator',
    'MetgenConfig',
    'MetgenError',
    'RawLocation',
    'StationRef',
    'Region',
    'WeatherObservation',
    'METARReport',
    'METARFormatter',
]
