"""
Error taxonomy for METAR generation.

Every error names the pipeline stage it came from so callers can report a
structured failure instead of a partial METAR.
"""

from enum import Enum
from typing import Optional


class Stage(Enum):
    RESOLVE = "resolve"
    FETCH = "fetch"
    NORMALIZE = "normalize"
    FORMAT = "format"


class MetgenError(Exception):
    """Base error for all pipeline failures."""

    default_stage: Stage = Stage.RESOLVE

    def __init__(self, message: str, stage: Optional[Stage] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage

    @property
    def kind(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'stage': self.stage.value,
            'message': self.message,
        }

    def __str__(self) -> str:
        return f"{self.kind} ({self.stage.value}): {self.message}"


class InvalidInput(MetgenError):
    """Malformed ICAO code or out of range coordinates."""


class GeocodeFailed(MetgenError):
    """Free text could not be turned into coordinates."""


class NoCoordinates(MetgenError):
    """No usable coordinates after every fallback."""


class ProviderUnavailable(MetgenError):
    """Network, authentication or quota failure talking to a provider."""

    default_stage = Stage.FETCH


class MalformedPayload(MetgenError):
    """Provider payload is missing required fields or is not JSON."""

    default_stage = Stage.NORMALIZE


class FormattingImpossible(MetgenError):
    """Observation violates invariants that normalization should guarantee."""

    default_stage = Stage.FORMAT


__all__ = [
    'Stage',
    'MetgenError',
    'InvalidInput',
    'GeocodeFailed',
    'NoCoordinates',
    'ProviderUnavailable',
    'MalformedPayload',
    'FormattingImpossible',
]
