"""METAR decoding wrapping the metar_taf_parser library."""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedMetar:
    """
    The handful of fields needed to sanity check a METAR.

    Attributes:
        station: Station identifier
        day: Day of month of the observation
        hour: Observation hour (UTC)
        minute: Observation minute
        wind_direction: Degrees, None if variable or missing
        wind_speed: Knots
        wind_gust: Knots
        temperature: Celsius
        dewpoint: Celsius
        raw_text: Report text as decoded
    """

    station: str
    raw_text: str
    day: Optional[int] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    wind_direction: Optional[int] = None
    wind_speed: Optional[int] = None
    wind_gust: Optional[int] = None
    temperature: Optional[int] = None
    dewpoint: Optional[int] = None


class MetarDecoder:
    """
    Decode METAR text into DecodedMetar.

    Used to make sure a report passed through verbatim from a station feed
    is actually a METAR before it is handed to the user.

    Example:
        decoded = MetarDecoder.decode("KJFK 121851Z 27012G18KT 10SM SKC M02/M05 A2992")
        decoded.wind_gust  # 18
    """

    @classmethod
    def decode(cls, raw_text: str) -> Optional[DecodedMetar]:
        """
        Args:
            raw_text: Raw METAR text (may include "METAR" or "SPECI" prefix)

        Returns:
            DecodedMetar or None if the text is not a usable METAR
        """
        from metar_taf_parser.parser.parser import MetarParser

        text = raw_text.strip()
        if not text:
            return None

        clean = text
        for prefix in ("METAR", "SPECI"):
            if clean.upper().startswith(prefix):
                clean = clean[len(prefix):].strip()
                break
        if clean.upper().startswith("COR"):
            clean = clean[3:].strip()

        if "NIL" in clean.upper().split():
            return None

        try:
            parsed = MetarParser().parse(clean)
        except Exception as e:
            logger.debug("Failed to parse METAR: %s - %s", raw_text[:80], e)
            return None

        if getattr(parsed, 'nil', False) or not parsed.station:
            return None

        wind = getattr(parsed, 'wind', None)
        obs_time = getattr(parsed, 'time', None)
        return DecodedMetar(
            station=parsed.station,
            raw_text=text,
            day=getattr(parsed, 'day', None),
            hour=obs_time.hour if obs_time is not None else None,
            minute=obs_time.minute if obs_time is not None else None,
            wind_direction=getattr(wind, 'degrees', None) if wind else None,
            wind_speed=getattr(wind, 'speed', None) if wind else None,
            wind_gust=getattr(wind, 'gust', None) if wind else None,
            temperature=getattr(parsed, 'temperature', None),
            dewpoint=getattr(parsed, 'dew_point', None),
        )
