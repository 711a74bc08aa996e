"""
Unit conversions and METAR rounding rules.

Every rounding rule here shows up directly in the encoded report, so each
conversion states the rule it applies:

- temperatures round to the nearest degree, halves away from zero
- wind directions round to the nearest 10 degrees, halves away from zero
- wind speeds truncate to whole knots so wind is never overstated
- statute-mile visibility snaps to the nearest reportable value, ties
  going to the lower value
- metric visibility rounds down (50 m steps below 5000 m, whole km above)
- pressures round to the nearest unit, halves away from zero
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import List, Optional, Tuple

from metgen.models.station import Region

KELVIN_OFFSET = 273.15
MPS_TO_KNOTS = 1.943844
METERS_PER_STATUTE_MILE = 1609.344
FEET_PER_METER = 3.28084
HPA_TO_INHG = 0.0295299830714

# Metric visibility at or above this is reported as 9999
METRIC_VISIBILITY_UNLIMITED_M = 10000
# Statute-mile ceiling of the reportable ladder
STATUTE_VISIBILITY_MAX_SM = 10


def _build_statute_ladder() -> List[Fraction]:
    quarters = [Fraction(n, 4) for n in range(0, 13)]  # 0 .. 3 in quarter miles
    whole = [Fraction(n) for n in range(4, STATUTE_VISIBILITY_MAX_SM + 1)]
    return quarters + whole


STATUTE_LADDER: Tuple[Fraction, ...] = tuple(_build_statute_ladder())


class UnitConverter:
    """Stateless conversions used by normalization and formatting."""

    # --- Plain conversions ---

    @staticmethod
    def kelvin_to_celsius(kelvin: float) -> float:
        # two decimals are plenty and keep float noise out of the rounding
        return round(kelvin - KELVIN_OFFSET, 2)

    @staticmethod
    def mps_to_knots(mps: float) -> float:
        return round(mps * MPS_TO_KNOTS, 3)

    @staticmethod
    def meters_to_statute_miles(meters: float) -> float:
        return meters / METERS_PER_STATUTE_MILE

    @staticmethod
    def meters_to_feet(meters: float) -> float:
        return meters * FEET_PER_METER

    @staticmethod
    def hpa_to_inhg(hpa: float) -> float:
        return hpa * HPA_TO_INHG

    @staticmethod
    def dewpoint_from_humidity(temperature_c: float, humidity_pct: float) -> Optional[float]:
        """
        Dewpoint from relative humidity using the Magnus approximation.

        Returns None for humidity values that cannot produce a dewpoint.
        """
        if humidity_pct is None or humidity_pct <= 0:
            return None
        a, b = 17.62, 243.12
        gamma = math.log(min(humidity_pct, 100.0) / 100.0) + (a * temperature_c) / (b + temperature_c)
        return round(b * gamma / (a - gamma), 2)

    # --- Rounding primitives ---

    @staticmethod
    def round_half_away(value: float) -> int:
        """Round to the nearest integer, halves away from zero (-0.5 -> -1)."""
        return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    @staticmethod
    def truncate(value: float) -> int:
        """Truncate toward zero, tolerating float noise just below an integer."""
        return int(math.floor(value + 1e-9)) if value >= 0 else -int(math.floor(-value + 1e-9))

    # --- METAR group values ---

    @classmethod
    def temperature(cls, celsius: float) -> str:
        """
        Two digit temperature with an M prefix below zero.

        The sign comes from the measured value, so -0.4 encodes as M00.
        """
        magnitude = abs(cls.round_half_away(celsius))
        prefix = "M" if celsius < 0 else ""
        return f"{prefix}{magnitude:02d}"

    @classmethod
    def wind_direction(cls, degrees: float) -> int:
        """Nearest 10 degrees; north is 360, never 000."""
        rounded = cls.round_half_away((degrees % 360) / 10.0) * 10
        if rounded == 0:
            return 360
        return rounded

    @classmethod
    def wind_speed(cls, knots: float) -> int:
        """Whole knots, truncated."""
        return max(cls.truncate(knots), 0)

    @classmethod
    def statute_miles(cls, meters: Optional[float]) -> str:
        """
        Reportable statute-mile visibility without the SM suffix.

        None (unlimited) and anything past the ladder collapse to "10".
        """
        if meters is None:
            return str(STATUTE_VISIBILITY_MAX_SM)
        miles = Fraction(cls.meters_to_statute_miles(max(meters, 0.0))).limit_denominator(10000)
        if miles >= STATUTE_VISIBILITY_MAX_SM:
            return str(STATUTE_VISIBILITY_MAX_SM)
        nearest = min(STATUTE_LADDER, key=lambda rung: (abs(rung - miles), rung))
        return cls._format_fraction(nearest)

    @staticmethod
    def _format_fraction(value: Fraction) -> str:
        whole = value.numerator // value.denominator
        remainder = value - whole
        if remainder == 0:
            return str(whole)
        fraction = f"{remainder.numerator}/{remainder.denominator}"
        if whole == 0:
            return fraction
        return f"{whole} {fraction}"

    @classmethod
    def metric_visibility(cls, meters: Optional[float]) -> str:
        """Four digit visibility in meters, 9999 for 10 km or more."""
        if meters is None or meters >= METRIC_VISIBILITY_UNLIMITED_M:
            return "9999"
        meters = max(meters, 0.0)
        if meters < 5000:
            value = int(meters // 50) * 50
        else:
            value = int(meters // 1000) * 1000
        return f"{value:04d}"

    @classmethod
    def altimeter_inches(cls, hpa: float) -> str:
        """Inches of mercury times 100, e.g. 1013.25 hPa -> 2992."""
        return f"{cls.round_half_away(cls.hpa_to_inhg(hpa) * 100):04d}"

    @classmethod
    def qnh(cls, hpa: float) -> str:
        return f"{cls.round_half_away(hpa):04d}"

    @classmethod
    def cloud_height(cls, meters: float) -> str:
        """Height in hundreds of feet, three digits, whatever the region."""
        hundreds = cls.round_half_away(cls.meters_to_feet(meters) / 100.0)
        return f"{min(max(hundreds, 0), 999):03d}"

    # --- Region aware groups ---

    @classmethod
    def visibility_group(cls, meters: Optional[float], region: Region) -> str:
        if region is Region.NORTH_AMERICA:
            return f"{cls.statute_miles(meters)}SM"
        return cls.metric_visibility(meters)

    @classmethod
    def pressure_group(cls, hpa: Optional[float], region: Region) -> str:
        prefix = "A" if region is Region.NORTH_AMERICA else "Q"
        if hpa is None:
            return f"{prefix}////"
        if region is Region.NORTH_AMERICA:
            return f"{prefix}{cls.altimeter_inches(hpa)}"
        return f"{prefix}{cls.qnh(hpa)}"
