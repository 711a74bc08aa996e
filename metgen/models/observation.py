"""Canonical weather observation model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Iterable, Optional, Tuple


# format is "coverage code": octas (upper bound)
CLOUD_COVERAGE = {
    "FEW": 2,
    "SCT": 4,
    "BKN": 7,
    "OVC": 8,
}

CEILING_COVERAGE = ("BKN", "OVC")

PRECIPITATION_CODES = ("DZ", "RA", "SN", "SG", "IC", "PL", "GR", "GS", "UP")
OBSCURATION_CODES = ("BR", "FG", "FU", "VA", "DU", "SA", "HZ", "PY")


@dataclass(frozen=True)
class CloudLayer:
    """A single cloud layer. Heights are above ground level."""

    coverage: str
    base_height_m: float

    def __post_init__(self):
        if self.coverage not in CLOUD_COVERAGE:
            raise ValueError(f"Unknown cloud coverage {self.coverage!r}")
        if self.base_height_m < 0:
            raise ValueError(f"Cloud base must not be negative, got {self.base_height_m}")

    @property
    def is_ceiling(self) -> bool:
        return self.coverage in CEILING_COVERAGE


@dataclass(frozen=True)
class WeatherPhenomenon:
    """
    One present weather group, e.g. ``-SHRA`` or ``BR``.

    Attributes:
        phenomena: Two letter codes (RA, SN, BR, ...), may be empty for a
            bare descriptor such as ``TS``
        intensity: "", "-", "+" or "VC"
        descriptor: "", "TS", "SH", "FZ", "BL", "DR", "MI", "BC", "PR"
    """

    phenomena: Tuple[str, ...] = ()
    intensity: str = ""
    descriptor: str = ""

    @property
    def code(self) -> str:
        return f"{self.intensity}{self.descriptor}{''.join(self.phenomena)}"

    @property
    def category(self) -> int:
        """0 precipitation or thunderstorm, 1 obscuration, 2 anything else."""
        if not self.phenomena or any(p in PRECIPITATION_CODES for p in self.phenomena):
            return 0
        if any(p in OBSCURATION_CODES for p in self.phenomena):
            return 1
        return 2

    def sort_key(self) -> tuple:
        return (self.category, self.descriptor, self.phenomena, self.intensity)


@dataclass(frozen=True)
class PrecipitationFlags:
    rain: bool = False
    snow: bool = False
    drizzle: bool = False
    thunderstorm: bool = False
    freezing: bool = False
    obscuration: bool = False

    @property
    def reduces_visibility(self) -> bool:
        return any((self.rain, self.snow, self.drizzle, self.thunderstorm,
                    self.freezing, self.obscuration))

    @classmethod
    def from_phenomena(cls, phenomena: Iterable[WeatherPhenomenon]) -> 'PrecipitationFlags':
        rain = snow = drizzle = thunderstorm = freezing = obscuration = False
        for wx in phenomena:
            rain = rain or "RA" in wx.phenomena
            snow = snow or any(p in ("SN", "SG", "PL", "IC") for p in wx.phenomena)
            drizzle = drizzle or "DZ" in wx.phenomena
            thunderstorm = thunderstorm or wx.descriptor == "TS"
            freezing = freezing or wx.descriptor == "FZ"
            obscuration = obscuration or wx.category == 1
        return cls(rain, snow, drizzle, thunderstorm, freezing, obscuration)


@dataclass(frozen=True)
class WeatherObservation:
    """
    Normalized weather reading, independent of the provider.

    Optional fields use None for "absent": a missing gust means no gust, a
    missing visibility means unlimited, a missing wind direction means
    variable and a missing wind speed means not reported. Zero is always a
    real measurement.

    Cloud layers are kept sorted by base height. A dewpoint above the
    temperature is clamped to the temperature.
    """

    timestamp_utc: datetime
    temperature_c: float
    altimeter_hpa: float
    dewpoint_c: Optional[float] = None
    wind_dir_deg: Optional[float] = None
    wind_speed_kt: Optional[float] = None
    wind_gust_kt: Optional[float] = None
    visibility_m: Optional[float] = None
    cloud_layers: Tuple[CloudLayer, ...] = ()
    present_weather: FrozenSet[WeatherPhenomenon] = frozenset()
    precipitation: PrecipitationFlags = field(default_factory=PrecipitationFlags)

    def __post_init__(self):
        layers = tuple(sorted(self.cloud_layers, key=lambda layer: layer.base_height_m))
        object.__setattr__(self, 'cloud_layers', layers)
        object.__setattr__(self, 'present_weather', frozenset(self.present_weather))
        if self.dewpoint_c is not None and self.dewpoint_c > self.temperature_c:
            # supersaturated readings are sensor noise
            object.__setattr__(self, 'dewpoint_c', self.temperature_c)

    @property
    def is_variable_wind(self) -> bool:
        return self.wind_dir_deg is None

    @property
    def ceiling_m(self) -> Optional[float]:
        """Base of the lowest broken or overcast layer."""
        for layer in self.cloud_layers:
            if layer.is_ceiling:
                return layer.base_height_m
        return None

    def sorted_weather(self) -> Tuple[WeatherPhenomenon, ...]:
        return tuple(sorted(self.present_weather, key=WeatherPhenomenon.sort_key))


@dataclass(frozen=True)
class ForecastPoint:
    """One hourly forecast entry used for trend remarks."""

    timestamp_utc: datetime
    pressure_hpa: Optional[float] = None
    temperature_c: Optional[float] = None
    wind_dir_deg: Optional[float] = None
    wind_speed_kt: Optional[float] = None
    wind_gust_kt: Optional[float] = None
    visibility_m: Optional[float] = None
    present_weather: FrozenSet[WeatherPhenomenon] = frozenset()

    def sorted_weather(self) -> Tuple[WeatherPhenomenon, ...]:
        return tuple(sorted(self.present_weather, key=WeatherPhenomenon.sort_key))
