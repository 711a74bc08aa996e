"""
Region heuristics for stations and coordinates.

North American reporting (statute miles, inches of mercury) is used by the
US, Canada, Mexico and a handful of Caribbean territories; everything else
reports in metric with QNH.
"""

import logging
import math
from typing import Optional

from metgen.models.station import Region

logger = logging.getLogger(__name__)

# ICAO prefixes of states that report in North American units
NORTH_AMERICA_PREFIXES = (
    'K',   # contiguous United States
    'C',   # Canada
    'PA',  # Alaska
    'PF',  # Alaska (north)
    'PH',  # Hawaii
    'PG',  # Guam, Northern Marianas
    'MM',  # Mexico
    'MY',  # Bahamas
    'TJ',  # Puerto Rico
    'TI',  # US Virgin Islands
)

# Region hints accepted from airport datasets. 'NA' is the OurAirports
# continent code for North America.
REGION_HINTS = {
    'NA': Region.NORTH_AMERICA,
    'NORTH_AMERICA': Region.NORTH_AMERICA,
    'NORTHAMERICA': Region.NORTH_AMERICA,
    'INTERNATIONAL': Region.INTERNATIONAL,
    'INTL': Region.INTERNATIONAL,
    'AF': Region.INTERNATIONAL,
    'AN': Region.INTERNATIONAL,
    'AS': Region.INTERNATIONAL,
    'EU': Region.INTERNATIONAL,
    'OC': Region.INTERNATIONAL,
    'SA': Region.INTERNATIONAL,
}

# (min_lat, max_lat, min_lon, max_lon) for North American reporting
NORTH_AMERICA_BOX = (14.0, 84.0, -170.0, -52.0)

# Points closer than this to the box edge are ambiguous
AMBIGUITY_MARGIN_DEG = 2.0

EARTH_RADIUS_NM = 3440.065


def region_from_hint(hint: Optional[str]) -> Optional[Region]:
    if hint is None:
        return None
    key = str(hint).strip().upper().replace(' ', '_')
    if not key:
        return None
    return REGION_HINTS.get(key)


def region_from_icao(code: str) -> Optional[Region]:
    """Region implied by the ICAO prefix, None when the prefix says nothing."""
    code = code.strip().upper()
    if len(code) != 4:
        return None
    if code.startswith(NORTH_AMERICA_PREFIXES):
        return Region.NORTH_AMERICA
    return None


def _edge_distance(latitude: float, longitude: float) -> float:
    """Degrees from the nearest edge of the North American box."""
    min_lat, max_lat, min_lon, max_lon = NORTH_AMERICA_BOX
    return min(
        abs(latitude - min_lat),
        abs(latitude - max_lat),
        abs(longitude - min_lon),
        abs(longitude - max_lon),
    )


def in_north_america(latitude: float, longitude: float) -> bool:
    min_lat, max_lat, min_lon, max_lon = NORTH_AMERICA_BOX
    return min_lat <= latitude <= max_lat and min_lon <= longitude <= max_lon


def is_ambiguous(latitude: float, longitude: float) -> bool:
    """True near the boundary of the North American box."""
    return _edge_distance(latitude, longitude) < AMBIGUITY_MARGIN_DEG


def region_from_coordinates(latitude: float, longitude: float) -> Region:
    if in_north_america(latitude, longitude):
        return Region.NORTH_AMERICA
    return Region.INTERNATIONAL


def great_circle_nm(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in nautical miles."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_NM * math.asin(math.sqrt(min(a, 1.0)))


# ISO country codes reporting in North American units
NORTH_AMERICA_COUNTRIES = ('US', 'CA', 'MX', 'PR', 'VI', 'GU', 'MP', 'BS')


def region_from_country(country: Optional[str]) -> Optional[Region]:
    if not country:
        return None
    if country.strip().upper() in NORTH_AMERICA_COUNTRIES:
        return Region.NORTH_AMERICA
    return Region.INTERNATIONAL
