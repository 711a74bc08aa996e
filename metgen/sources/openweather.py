"""OpenWeather current weather, One Call and geocoding endpoints."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from metgen.errors import MalformedPayload, ProviderUnavailable, Stage
from metgen.sources.base import HttpSource
from metgen.weather.normalizer import SchemaKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """One geocoding candidate."""

    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None


class OpenWeatherSource(HttpSource):
    """
    Fetch weather payloads and geocode place names from OpenWeather.

    Payloads are requested in standard units (Kelvin, m/s, hPa) and
    returned as decoded JSON for WeatherNormalizer.

    Example:
        source = OpenWeatherSource(api_key="...")
        payload = source.fetch(51.47, -0.45, SchemaKind.BASIC)
    """

    name = "openweather"
    CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
    ONE_CALL_URL = "https://api.openweathermap.org/data/3.0/onecall"
    GEOCODING_URL = "https://api.openweathermap.org/geo/1.0/direct"
    GEOCODING_LIMIT = 5

    def __init__(
        self,
        api_key: str = "",
        one_call_api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = HttpSource.DEFAULT_TIMEOUT,
        retries: int = 1,
        backoff_factor: float = 0.5,
    ):
        """
        Args:
            api_key: Key for the current weather and geocoding endpoints.
            one_call_api_key: Key for One Call; falls back to api_key.
        """
        super().__init__(session=session, timeout=timeout, retries=retries,
                         backoff_factor=backoff_factor)
        self.api_key = api_key
        self.one_call_api_key = one_call_api_key or api_key

    def fetch(self, latitude: float, longitude: float, kind: SchemaKind) -> Dict[str, Any]:
        if kind is SchemaKind.EXTENDED:
            return self.one_call(latitude, longitude)
        return self.current(latitude, longitude)

    def current(self, latitude: float, longitude: float) -> Dict[str, Any]:
        """Basic payload: current conditions only."""
        return self._weather(self.CURRENT_URL, self.api_key, {
            "lat": latitude,
            "lon": longitude,
        })

    def one_call(self, latitude: float, longitude: float) -> Dict[str, Any]:
        """Extended payload: current conditions plus hourly and daily forecast."""
        return self._weather(self.ONE_CALL_URL, self.one_call_api_key, {
            "lat": latitude,
            "lon": longitude,
            "exclude": "minutely",
        })

    def geocode(self, place: str) -> List[GeocodeResult]:
        """
        Resolve a place name to candidate coordinates, best match first.

        Returns an empty list when nothing matches.
        """
        if not self.api_key:
            raise ProviderUnavailable("Geocoding API key is missing", stage=Stage.RESOLVE)
        data = self._get_json(self.GEOCODING_URL, {
            "q": place,
            "limit": self.GEOCODING_LIMIT,
            "appid": self.api_key,
        }, stage=Stage.RESOLVE)
        if not isinstance(data, list):
            return []

        results = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                results.append(GeocodeResult(
                    name=item.get("name") or place,
                    latitude=float(item["lat"]),
                    longitude=float(item["lon"]),
                    country=item.get("country"),
                ))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping geocoding candidate without coordinates: %s", item)
        return results

    def _weather(self, url: str, api_key: str, params: dict) -> Dict[str, Any]:
        if not api_key:
            raise ProviderUnavailable(f"{self.name} API key is missing")
        data = self._get_json(url, dict(params, appid=api_key))
        if data is None:
            raise ProviderUnavailable(f"{self.name} returned no data for {params['lat']},{params['lon']}")
        if not isinstance(data, dict):
            raise MalformedPayload(f"{self.name} payload is not a JSON object")
        return data
