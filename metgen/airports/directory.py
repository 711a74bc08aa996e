"""In-memory airport directory used to resolve ICAO codes."""

import io
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Union

import pandas as pd

from metgen.models.station import StationRef
from metgen.utils.regions import (
    great_circle_nm,
    region_from_coordinates,
    region_from_country,
    region_from_hint,
    region_from_icao,
)
from metgen.utils.units import FEET_PER_METER

logger = logging.getLogger(__name__)

# Column aliases, mapped onto the canonical record fields
COLUMN_ALIASES = {
    'lat': 'latitude',
    'latitude_deg': 'latitude',
    'lon': 'longitude',
    'longitude_deg': 'longitude',
    'elevation': 'elevation_m',
    'elevation_m': 'elevation_m',
    'iso_country': 'country',
}

# Identifier columns in order of preference; OurAirports carries all of
# them and `ident` is only an ICAO code for airports that have one
IDENT_COLUMNS = ('icao_code', 'gps_code', 'icao', 'ident')

# Airport types that never get a METAR
EXCLUDED_TYPES = ('heliport', 'closed')


class AirportDirectory:
    """
    Read-only lookup of station identifiers to StationRef records.

    Built once from a reference dataset and never mutated afterwards, so a
    single instance can be shared between concurrent requests.

    Example:
        directory = AirportDirectory.from_csv("airports.csv")
        station = directory.lookup("EGLL")
    """

    def __init__(self, stations: Iterable[StationRef] = ()):
        self._stations: Dict[str, StationRef] = {}
        for station in stations:
            self._stations.setdefault(station.identifier.upper(), station)

    def lookup(self, code: str) -> Optional[StationRef]:
        """
        Find a station by ICAO code (case insensitive).

        Returns:
            StationRef or None when the code is not in the directory
        """
        return self._stations.get(code.strip().upper())

    def nearest(self, latitude: float, longitude: float) -> Optional[StationRef]:
        """Closest station to a point, None for an empty directory."""
        if not self._stations:
            return None
        return min(
            self._stations.values(),
            key=lambda s: great_circle_nm(latitude, longitude, s.latitude, s.longitude),
        )

    def __contains__(self, code: str) -> bool:
        return self.lookup(code) is not None

    def __len__(self) -> int:
        return len(self._stations)

    def __iter__(self) -> Iterator[StationRef]:
        return iter(self._stations.values())

    # --- Construction ---

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> 'AirportDirectory':
        """
        Build a directory from mapping records.

        Records use the canonical field names `ident`, `name`, `latitude`,
        `longitude`, `elevation_m`, `region_hint`, `country`, `continent`
        (aliases such as `lat`, `lon`, `iso_country` are accepted). The
        identifier is the first of `icao_code`, `gps_code`, `icao`, `ident`
        that has a value. Region comes from the hint, then the country, the ICAO
        prefix, the continent and finally the coordinates. Records without an
        identifier or coordinates are skipped.
        """
        stations = []
        skipped = 0
        for record in records:
            station = cls._station_from_record(record)
            if station is None:
                skipped += 1
                continue
            stations.append(station)
        if skipped:
            logger.debug("Skipped %d airport records without identifier or coordinates", skipped)
        return cls(stations)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> 'AirportDirectory':
        # Never rename onto a column that already exists
        renames = {}
        for column in df.columns:
            target = COLUMN_ALIASES.get(column)
            if target and target != column and target not in df.columns \
                    and target not in renames.values():
                renames[column] = target
        df = df.rename(columns=renames)
        if 'elevation_ft' in df.columns and 'elevation_m' not in df.columns:
            df['elevation_m'] = df['elevation_ft'] / FEET_PER_METER
        if 'type' in df.columns:
            df = df[~df['type'].isin(EXCLUDED_TYPES)]
        records = (
            {key: cls._safe_get(row, key) for key in row.index}
            for _, row in df.iterrows()
        )
        return cls.from_records(records)

    @classmethod
    def from_csv(cls, path: Union[str, Path]) -> 'AirportDirectory':
        """
        Load a directory from a CSV file.

        Lines starting with '//' are treated as comments (licence headers).
        """
        path = Path(path)
        with open(path, encoding='utf-8-sig') as f:
            lines = [line for line in f if not line.lstrip().startswith('//') and line.strip()]
        # 'NA' is the North America continent code, not a missing value
        df = pd.read_csv(io.StringIO(''.join(lines)), keep_default_na=False, na_values=[''])
        directory = cls.from_dataframe(df)
        logger.info("Loaded %d stations from %s", len(directory), path)
        return directory

    @staticmethod
    def _safe_get(row: pd.Series, key: str) -> Any:
        """Get a value from a pandas row, converting nan to None."""
        value = row.get(key)
        if pd.isna(value):
            return None
        return value

    @staticmethod
    def _station_from_record(record: Mapping[str, Any]) -> Optional[StationRef]:
        normalized = dict(record)
        for key, value in record.items():
            normalized.setdefault(COLUMN_ALIASES.get(key, key), value)
        ident = next((record[c] for c in IDENT_COLUMNS if record.get(c)), None)
        lat = normalized.get('latitude')
        lon = normalized.get('longitude')
        if not ident or lat is None or lon is None:
            return None
        ident = str(ident).strip().upper()
        lat, lon = float(lat), float(lon)
        region = (
            region_from_hint(normalized.get('region_hint'))
            or region_from_country(normalized.get('country'))
            or region_from_icao(ident)
            or region_from_hint(normalized.get('continent'))
            or region_from_coordinates(lat, lon)
        )
        elevation = normalized.get('elevation_m')
        name = normalized.get('name')
        return StationRef(
            identifier=ident,
            latitude=lat,
            longitude=lon,
            region=region,
            elevation_m=float(elevation) if elevation is not None else None,
            name=str(name) if name is not None else None,
        )
