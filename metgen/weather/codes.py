"""Provider condition ids to METAR present weather."""

from typing import Dict, Optional

from metgen.models.observation import WeatherPhenomenon

INTENSITIES = ("VC", "-", "+")
DESCRIPTORS = ("MI", "PR", "BC", "DR", "BL", "SH", "TS", "FZ")

# OpenWeather condition id -> METAR present weather group.
# 8xx ids describe cloud cover and never map to present weather.
CONDITION_CODES = {
    200: "-TSRA", 201: "TSRA", 202: "+TSRA",
    210: "TS", 211: "TS", 212: "TS", 221: "TS",
    230: "-TSRA", 231: "TSRA", 232: "+TSRA",
    300: "-DZ", 301: "DZ", 302: "+DZ",
    310: "-DZRA", 311: "DZRA", 312: "+DZRA",
    313: "SHRA", 314: "+SHRA", 321: "SHRA",
    500: "-RA", 501: "RA", 502: "+RA", 503: "+RA", 504: "+RA",
    511: "FZRA",
    520: "-SHRA", 521: "SHRA", 522: "+SHRA", 531: "SHRA",
    600: "-SN", 601: "SN", 602: "+SN",
    611: "PL", 612: "-SHPL", 613: "SHPL",
    615: "-RASN", 616: "RASN",
    620: "-SHSN", 621: "SHSN", 622: "+SHSN",
    701: "BR", 711: "FU", 721: "HZ", 731: "PO", 741: "FG",
    751: "SA", 761: "DU", 762: "VA", 771: "SQ", 781: "+FC",
}


def parse_phenomenon(code: str) -> WeatherPhenomenon:
    """
    Split a present weather group into intensity, descriptor and phenomena.

    >>> parse_phenomenon("-SHRA").code
    '-SHRA'
    """
    rest = code.strip().upper()
    intensity = ""
    for prefix in INTENSITIES:
        if rest.startswith(prefix):
            intensity, rest = prefix, rest[len(prefix):]
            break
    descriptor = ""
    if rest[:2] in DESCRIPTORS:
        descriptor, rest = rest[:2], rest[2:]
    if len(rest) % 2:
        raise ValueError(f"Malformed present weather group {code!r}")
    phenomena = tuple(rest[i:i + 2] for i in range(0, len(rest), 2))
    return WeatherPhenomenon(phenomena=phenomena, intensity=intensity, descriptor=descriptor)


PHENOMENA: Dict[int, WeatherPhenomenon] = {
    condition_id: parse_phenomenon(code) for condition_id, code in CONDITION_CODES.items()
}


def phenomenon_for_condition(condition_id: int) -> Optional[WeatherPhenomenon]:
    """Present weather for a provider condition id, None for clouds or unknown ids."""
    return PHENOMENA.get(condition_id)
