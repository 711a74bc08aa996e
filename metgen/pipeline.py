"""
METAR generation pipeline.

input -> LocationResolver -> weather fetch -> WeatherNormalizer
      -> TrendAnalyzer (extended schema) -> METARFormatter -> METARReport
"""

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional, Union

import requests

from metgen.airports.directory import AirportDirectory
from metgen.errors import ProviderUnavailable
from metgen.models.report import METARReport, ReportSource
from metgen.models.station import RawLocation, Region, StationRef
from metgen.resolver import LocationResolver
from metgen.sources.aviationweather import AviationWeatherSource
from metgen.sources.openweather import OpenWeatherSource
from metgen.weather.decoder import MetarDecoder
from metgen.weather.formatter import METARFormatter
from metgen.weather.normalizer import SchemaKind, WeatherNormalizer
from metgen.weather.trend import TrendAnalyzer

if TYPE_CHECKING:
    from metgen.config import MetgenConfig

logger = logging.getLogger(__name__)


class MetarGenerator:
    """
    Run one generation request end to end.

    The generator keeps no per-request state, so one instance can serve
    concurrent requests; the airport directory it holds is read-only.

    When the weather provider is unavailable and the station is a real
    one, the latest real METAR from the station feed is passed through
    verbatim instead. Any other failure propagates as a MetgenError.

    Example:
        generator = MetarGenerator.from_config(MetgenConfig.load())
        report = generator.generate("KJFK")
        print(report.rendered_text)
    """

    def __init__(
        self,
        resolver: LocationResolver,
        weather_source: OpenWeatherSource,
        station_service: Optional[AviationWeatherSource] = None,
        schema: SchemaKind = SchemaKind.BASIC,
        region: Optional[Region] = None,
        prefer_observed: bool = False,
    ):
        """
        Args:
            resolver: Location resolver
            weather_source: Provider of Basic/Extended payloads
            station_service: Source of real METARs for the pass-through fallback
            schema: Payload variant to request
            region: Reporting convention forced on every station
            prefer_observed: Try a real METAR before synthesizing one
        """
        self.resolver = resolver
        self.weather_source = weather_source
        self.station_service = station_service
        self.schema = schema
        self.region = region
        self.prefer_observed = prefer_observed

    @classmethod
    def from_config(cls, config: 'MetgenConfig',
                    session: Optional[requests.Session] = None) -> 'MetarGenerator':
        directory = (
            AirportDirectory.from_csv(config.airports_csv)
            if config.airports_csv else AirportDirectory()
        )
        http = dict(
            session=session,
            timeout=config.timeout,
            retries=config.retries,
            backoff_factor=config.backoff_factor,
        )
        weather = OpenWeatherSource(
            api_key=config.api_key,
            one_call_api_key=config.one_call_api_key,
            **http,
        )
        stations = AviationWeatherSource(**http)
        return cls(
            resolver=LocationResolver(directory, geocoder=weather, station_service=stations),
            weather_source=weather,
            station_service=stations,
            schema=config.schema,
            region=config.region,
            prefer_observed=config.prefer_observed,
        )

    def generate(self, location: Union[RawLocation, str]) -> METARReport:
        """
        Generate a METAR for a location.

        Args:
            location: RawLocation, or free text classified with RawLocation.parse

        Raises:
            MetgenError: resolution, fetch, normalization or formatting failed
        """
        if isinstance(location, str):
            location = RawLocation.parse(location)

        station = self.resolver.resolve(location)
        if self.region is not None and station.region is not self.region:
            station = replace(station, region=self.region)
        logger.info("Resolved %s to %s (%.4f, %.4f, %s)", location.value, station.identifier,
                    station.latitude, station.longitude, station.region.value)

        if self.prefer_observed and not station.synthetic:
            report = self.observed(station)
            if report is not None:
                return report

        try:
            payload = self.weather_source.fetch(station.latitude, station.longitude, self.schema)
        except ProviderUnavailable as e:
            logger.warning("Weather provider unavailable for %s: %s", station.identifier, e)
            report = None if station.synthetic else self.observed(station)
            if report is None:
                raise
            return report

        return self.synthesize(station, payload)

    def synthesize(self, station: StationRef, payload: dict) -> METARReport:
        """Normalize a provider payload and encode it for the station."""
        observation = WeatherNormalizer.normalize(payload, self.schema)
        trend = None
        if self.schema is SchemaKind.EXTENDED:
            forecast = WeatherNormalizer.forecast(payload, self.schema)
            trend = TrendAnalyzer.derive_trend(observation, forecast)
        text = METARFormatter.format(station, observation, trend)
        logger.info("Generated METAR for %s: %s", station.identifier, text)
        return METARReport(
            station=station,
            rendered_text=text,
            observation=observation,
            trend_remark=trend,
        )

    def observed(self, station: StationRef) -> Optional[METARReport]:
        """
        Latest real METAR for a station, passed through verbatim.

        Returns None when there is no station feed, no recent report, or the
        report does not decode as a METAR for this station.
        """
        if self.station_service is None:
            return None
        try:
            raw = self.station_service.latest_metar(station.identifier)
        except ProviderUnavailable as e:
            logger.warning("Station feed unavailable for %s: %s", station.identifier, e)
            return None
        if not raw:
            logger.debug("No recent METAR for %s", station.identifier)
            return None

        decoded = MetarDecoder.decode(raw)
        if decoded is None or decoded.station.upper() != station.identifier.upper():
            logger.warning("Discarding unusable METAR for %s: %s", station.identifier, raw)
            return None
        logger.info("Using observed METAR for %s", station.identifier)
        return METARReport(
            station=station,
            rendered_text=decoded.raw_text,
            source=ReportSource.OBSERVED,
        )
