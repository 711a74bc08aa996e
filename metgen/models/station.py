"""Station and location data models."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Region(Enum):
    """
    Reporting convention used when encoding a METAR.

    NORTH_AMERICA: statute-mile visibility, altimeter in inches of mercury.
    INTERNATIONAL: metric visibility, QNH in hectopascals.
    """

    NORTH_AMERICA = "north_america"
    INTERNATIONAL = "international"


@dataclass(frozen=True)
class StationRef:
    """
    A resolved reporting station.

    Attributes:
        identifier: ICAO code, or a synthetic identifier for locations
            without a real station
        latitude: Decimal degrees, -90 to +90
        longitude: Decimal degrees, -180 to +180
        region: Reporting convention for this station
        elevation_m: Station elevation in meters, if known
        name: Display name, if known
        synthetic: True when the identifier is not a real station
    """

    identifier: str
    latitude: float
    longitude: float
    region: Region
    elevation_m: Optional[float] = None
    name: Optional[str] = None
    synthetic: bool = False

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


class LocationKind(Enum):
    """How a raw location string should be interpreted."""

    ICAO = "icao"
    COORDINATES = "coordinates"
    TEXT = "text"


_ICAO_RE = re.compile(r'^[A-Za-z0-9]{4}$')
_COORDS_RE = re.compile(r'^\s*([-+]?\d+(?:\.\d+)?)\s*[,\s]\s*([-+]?\d+(?:\.\d+)?)\s*$')


@dataclass(frozen=True)
class RawLocation:
    """
    User supplied location before resolution.

    `identifier` optionally names the station for coordinate or text input,
    e.g. a private strip that has no ICAO entry anywhere.
    """

    kind: LocationKind
    value: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    identifier: Optional[str] = None

    @classmethod
    def icao(cls, code: str) -> 'RawLocation':
        return cls(kind=LocationKind.ICAO, value=code.strip())

    @classmethod
    def coordinates(cls, latitude: float, longitude: float,
                    identifier: Optional[str] = None) -> 'RawLocation':
        return cls(
            kind=LocationKind.COORDINATES,
            value=f"{latitude},{longitude}",
            latitude=latitude,
            longitude=longitude,
            identifier=identifier,
        )

    @classmethod
    def text(cls, place: str, identifier: Optional[str] = None) -> 'RawLocation':
        return cls(kind=LocationKind.TEXT, value=place.strip(), identifier=identifier)

    @classmethod
    def parse(cls, text: str, identifier: Optional[str] = None) -> 'RawLocation':
        """
        Classify free-form input.

        Four alphanumeric characters are an ICAO code, a pair of decimal
        numbers separated by a comma or whitespace is a coordinate pair,
        anything else is a place name.
        """
        stripped = text.strip()
        if _ICAO_RE.match(stripped):
            return cls.icao(stripped)
        match = _COORDS_RE.match(stripped)
        if match:
            return cls.coordinates(float(match.group(1)), float(match.group(2)), identifier)
        return cls.text(stripped, identifier)

    @staticmethod
    def looks_like_icao(code: str) -> bool:
        return bool(_ICAO_RE.match(code.strip()))
