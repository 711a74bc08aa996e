"""
Configuration for METAR generation.

Settings come from a JSON file and/or METGEN_* environment variables;
environment values win over the file.
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from metgen.models.station import Region
from metgen.weather.normalizer import SchemaKind

logger = logging.getLogger(__name__)

ENV_PREFIX = "METGEN_"

TRUE_VALUES = ('1', 'true', 'yes', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'off', '')


@dataclass(frozen=True)
class MetgenConfig:
    """
    Attributes:
        api_key: OpenWeather key for current weather and geocoding
        one_call_api_key: OpenWeather One Call key (extended schema)
        schema: Provider payload variant to request
        timeout: Per request timeout in seconds
        retries: Retries per request after the first attempt
        backoff_factor: urllib3 backoff factor between retries
        airports_csv: Airport reference dataset
        region: Force a reporting convention for every station
        prefer_observed: Use a real METAR verbatim when one exists
    """

    api_key: str = ""
    one_call_api_key: Optional[str] = None
    schema: SchemaKind = SchemaKind.BASIC
    timeout: float = 10.0
    retries: int = 1
    backoff_factor: float = 0.5
    airports_csv: Optional[Path] = None
    region: Optional[Region] = None
    prefer_observed: bool = False

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.retries < 0:
            raise ValueError(f"retries must not be negative, got {self.retries}")
        if self.backoff_factor < 0:
            raise ValueError(f"backoff_factor must not be negative, got {self.backoff_factor}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'MetgenConfig':
        """Build a config from plain values, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        return cls(**cls._coerce({k: v for k, v in data.items() if k in known}))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'MetgenConfig':
        path = Path(path)
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        logger.debug("Loaded config from %s", path)
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'MetgenConfig':
        return cls.from_dict(cls._env_values(environ))

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None,
             environ: Optional[Mapping[str, str]] = None) -> 'MetgenConfig':
        """Config file (if any) overlaid with environment variables."""
        config = cls.from_file(path) if path else cls()
        overrides = cls._coerce(cls._env_values(environ))
        if overrides:
            logger.debug("Config overridden from environment: %s", ", ".join(sorted(overrides)))
            config = replace(config, **overrides)
        return config

    @classmethod
    def _env_values(cls, environ: Optional[Mapping[str, str]]) -> Dict[str, str]:
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            if key in environ:
                values[f.name] = environ[key]
        return values

    @staticmethod
    def _coerce(values: Mapping[str, Any]) -> Dict[str, Any]:
        """Convert raw file/env values to field types, ValueError when invalid."""
        result: Dict[str, Any] = {}
        for name, value in values.items():
            if name == 'schema':
                result[name] = value if isinstance(value, SchemaKind) else SchemaKind(str(value).strip().lower())
            elif name == 'region':
                if value in (None, ''):
                    result[name] = None
                else:
                    result[name] = value if isinstance(value, Region) else Region(str(value).strip().lower())
            elif name == 'timeout' or name == 'backoff_factor':
                result[name] = float(value)
            elif name == 'retries':
                result[name] = int(value)
            elif name == 'prefer_observed':
                result[name] = _parse_bool(name, value)
            elif name == 'airports_csv':
                result[name] = Path(value).expanduser() if value else None
            elif name == 'one_call_api_key':
                result[name] = str(value) if value else None
            else:
                result[name] = '' if value is None else str(value)
        return result


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
