"""
Weather normalization, trend analysis and METAR encoding.

Provides:
- SchemaKind: BASIC/EXTENDED provider payload variants
- WeatherNormalizer: Provider payload -> WeatherObservation
- TrendAnalyzer: Forecast -> optional TrendRemark
- METARFormatter: StationRef + WeatherObservation -> METAR text
- MetarDecoder: METAR text -> DecodedMetar (pass-through validation)

Example:
    from metgen.weather import WeatherNormalizer, METARFormatter, SchemaKind

    observation = WeatherNormalizer.normalize(payload, SchemaKind.BASIC)
    print(METARFormatter.format(station, observation))
"""

from metgen.weather.normalizer import WeatherNormalizer, SchemaKind
from metgen.weather.trend import TrendAnalyzer
from metgen.weather.formatter import METARFormatter
from metgen.weather.decoder import MetarDecoder, DecodedMetar

__all__ = [
    'SchemaKind',
    'WeatherNormalizer',
    'TrendAnalyzer',
    'METARFormatter',
    'MetarDecoder',
    'DecodedMetar',
]
