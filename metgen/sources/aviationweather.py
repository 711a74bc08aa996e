"""Aviation Weather (aviationweather.gov) station metadata and live METARs."""

import logging
from dataclasses import dataclass
from typing import Optional

from metgen.errors import Stage
from metgen.sources.base import HttpSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StationMetadata:
    """Station record as published by aviationweather.gov."""

    icao: str
    latitude: float
    longitude: float
    elevation_m: Optional[float] = None
    name: Optional[str] = None
    country: Optional[str] = None


class AviationWeatherSource(HttpSource):
    """
    Station metadata and real METARs from the aviationweather.gov API.

    Example:
        source = AviationWeatherSource()
        station = source.station("KJFK")
        metar = source.latest_metar("KJFK")
    """

    name = "aviationweather"
    BASE_URL = "https://aviationweather.gov/api/data"

    def station(self, icao: str) -> Optional[StationMetadata]:
        """
        Look up a station by ICAO code.

        Returns:
            StationMetadata, or None if the station is unknown
        """
        data = self._get_json(f"{self.BASE_URL}/airport", {
            "ids": icao.strip().upper(),
            "format": "json",
        }, stage=Stage.RESOLVE)
        if not isinstance(data, list) or not data:
            return None

        record = data[0]
        try:
            latitude = float(record["lat"])
            longitude = float(record["lon"])
        except (KeyError, TypeError, ValueError):
            logger.debug("Station record for %s has no coordinates: %s", icao, record)
            return None
        elevation = record.get("elev")
        return StationMetadata(
            icao=(record.get("icaoId") or icao).strip().upper(),
            latitude=latitude,
            longitude=longitude,
            elevation_m=float(elevation) if elevation is not None else None,
            name=record.get("name"),
            country=record.get("country"),
        )

    def latest_metar(self, icao: str) -> Optional[str]:
        """
        Most recent raw METAR for a station.

        Returns:
            Raw METAR text, or None if the station has no recent report
        """
        raw = self._get_text(f"{self.BASE_URL}/metar", {
            "ids": icao.strip().upper(),
            "format": "raw",
            "hours": "2",
        })
        for line in raw.splitlines():
            line = line.strip()
            if line:
                return line
        return None
