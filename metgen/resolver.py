"""
Location resolution: ICAO code, coordinate pair or place name -> StationRef.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from metgen.airports.directory import AirportDirectory
from metgen.errors import GeocodeFailed, InvalidInput, NoCoordinates, ProviderUnavailable
from metgen.models.station import LocationKind, RawLocation, Region, StationRef
from metgen.utils.regions import (
    is_ambiguous,
    region_from_coordinates,
    region_from_country,
    region_from_icao,
)
from metgen.utils.units import UnitConverter

if TYPE_CHECKING:
    from metgen.sources.aviationweather import AviationWeatherSource
    from metgen.sources.openweather import OpenWeatherSource

logger = logging.getLogger(__name__)

# Identifier used when an ICAO code is unknown everywhere but a position
# could still be found for it
PLACEHOLDER_IDENTIFIER = "ZZZZ"

ResolutionStep = Callable[[str], Optional[StationRef]]


class LocationResolver:
    """
    Resolve user input to a StationRef.

    ICAO codes go through an ordered chain of lookups (local directory,
    station metadata service, geocoded placeholder) and the first one that
    produces a station wins. Coordinates are validated and given a region
    and a synthetic identifier. Place names are geocoded and then handled
    as coordinates.

    Example:
        resolver = LocationResolver(directory, geocoder=openweather,
                                    station_service=aviationweather)
        station = resolver.resolve(RawLocation.parse("EGLL"))
    """

    def __init__(
        self,
        directory: AirportDirectory,
        geocoder: Optional['OpenWeatherSource'] = None,
        station_service: Optional['AviationWeatherSource'] = None,
    ):
        self.directory = directory
        self.geocoder = geocoder
        self.station_service = station_service

    def resolve(self, location: RawLocation) -> StationRef:
        """
        Args:
            location: Classified user input

        Returns:
            StationRef for the location

        Raises:
            InvalidInput: malformed code or coordinates
            GeocodeFailed: place name could not be geocoded
            NoCoordinates: ICAO code unknown and no position found for it
        """
        if location.kind is LocationKind.ICAO:
            return self._resolve_icao(location.value)
        if location.kind is LocationKind.COORDINATES:
            if location.latitude is None or location.longitude is None:
                raise InvalidInput(f"Coordinates missing for '{location.value}'")
            return self._resolve_coordinates(location.latitude, location.longitude,
                                             identifier=location.identifier)
        return self._resolve_text(location.value, identifier=location.identifier)

    # --- ICAO ---

    def _resolve_icao(self, code: str) -> StationRef:
        if not RawLocation.looks_like_icao(code):
            raise InvalidInput(f"'{code}' is not a four character ICAO code")
        code = code.strip().upper()

        steps: Sequence[ResolutionStep] = (
            self._from_directory,
            self._from_station_service,
            self._from_geocoded_code,
        )
        for step in steps:
            station = step(code)
            if station is not None:
                logger.debug("Resolved %s via %s", code, step.__name__)
                return station
        raise NoCoordinates(f"No coordinates found for {code}")

    def _from_directory(self, code: str) -> Optional[StationRef]:
        return self.directory.lookup(code)

    def _from_station_service(self, code: str) -> Optional[StationRef]:
        if self.station_service is None:
            return None
        try:
            metadata = self.station_service.station(code)
        except ProviderUnavailable as e:
            logger.warning("Station metadata unavailable for %s: %s", code, e)
            return None
        if metadata is None:
            return None
        region = (
            region_from_icao(metadata.icao)
            or region_from_country(metadata.country)
            or self.region_for(metadata.latitude, metadata.longitude)
        )
        return StationRef(
            identifier=metadata.icao,
            latitude=metadata.latitude,
            longitude=metadata.longitude,
            region=region,
            elevation_m=metadata.elevation_m,
            name=metadata.name,
        )

    def _from_geocoded_code(self, code: str) -> Optional[StationRef]:
        if self.geocoder is None:
            return None
        try:
            candidates = self.geocoder.geocode(code)
        except ProviderUnavailable as e:
            logger.warning("Geocoding unavailable for %s: %s", code, e)
            return None
        if not candidates:
            return None
        best = candidates[0]
        return StationRef(
            identifier=PLACEHOLDER_IDENTIFIER,
            latitude=best.latitude,
            longitude=best.longitude,
            region=self.region_for(best.latitude, best.longitude),
            name=best.name,
            synthetic=True,
        )

    # --- Coordinates and place names ---

    def _resolve_coordinates(self, latitude: float, longitude: float,
                             identifier: Optional[str] = None,
                             name: Optional[str] = None) -> StationRef:
        self.validate_coordinates(latitude, longitude)
        if identifier:
            identifier = identifier.strip().upper()
        return StationRef(
            identifier=identifier or self.synthetic_identifier(latitude, longitude),
            latitude=latitude,
            longitude=longitude,
            region=self.region_for(latitude, longitude),
            name=name,
            synthetic=not identifier,
        )

    def _resolve_text(self, place: str, identifier: Optional[str] = None) -> StationRef:
        if not place:
            raise InvalidInput("Empty location")
        if self.geocoder is None:
            raise GeocodeFailed(f"No geocoder configured to resolve '{place}'")
        candidates = self.geocoder.geocode(place)
        if not candidates:
            raise GeocodeFailed(f"Could not geocode '{place}'")
        best = candidates[0]
        logger.debug("Geocoded '%s' to %s (%.4f, %.4f)", place, best.name,
                     best.latitude, best.longitude)
        return self._resolve_coordinates(best.latitude, best.longitude,
                                         identifier=identifier, name=best.name)

    def region_for(self, latitude: float, longitude: float) -> Region:
        """
        Region for a point: bounding box, or the nearest known airport's
        region when the point sits close to the box edge.
        """
        region = region_from_coordinates(latitude, longitude)
        if is_ambiguous(latitude, longitude):
            nearest = self.directory.nearest(latitude, longitude)
            if nearest is not None:
                logger.debug("Ambiguous region at %.2f,%.2f, using %s (%s)",
                             latitude, longitude, nearest.identifier, nearest.region.value)
                return nearest.region
        return region

    @staticmethod
    def validate_coordinates(latitude: float, longitude: float) -> None:
        if not -90.0 <= latitude <= 90.0:
            raise InvalidInput(f"Latitude {latitude} outside [-90, 90]")
        if not -180.0 <= longitude <= 180.0:
            raise InvalidInput(f"Longitude {longitude} outside [-180, 180]")

    @staticmethod
    def synthetic_identifier(latitude: float, longitude: float) -> str:
        """Rounded whole degrees, e.g. 40.64,-73.78 -> '41N074W'."""
        lat = int(UnitConverter.round_half_away(abs(latitude)))
        lon = int(UnitConverter.round_half_away(abs(longitude)))
        ns = 'N' if latitude >= 0 else 'S'
        ew = 'E' if longitude >= 0 else 'W'
        return f"{lat:02d}{ns}{lon:03d}{ew}"
