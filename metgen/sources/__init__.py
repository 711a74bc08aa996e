"""External collaborators: weather provider, geocoder and station feed."""

from metgen.sources.base import HttpSource
from metgen.sources.openweather import OpenWeatherSource, GeocodeResult
from metgen.sources.aviationweather import AviationWeatherSource, StationMetadata

__all__ = [
    'HttpSource',
    'OpenWeatherSource',
    'GeocodeResult',
    'AviationWeatherSource',
    'StationMetadata',
]
