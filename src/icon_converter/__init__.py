"""Resize one source image into icon sets for browsers, macOS, Windows and websites."""

from .converter import ConversionRequest, Converter, build_request
from .errors import (
    DestinationExists,
    DirectoryCreateError,
    IconConverterError,
    SourceDecodeError,
    SourceNotFound,
    WriteError,
)
from .profiles import PROFILES, Profile
from .resample import produce

__all__ = [
    "ConversionRequest",
    "Converter",
    "DestinationExists",
    "DirectoryCreateError",
    "IconConverterError",
    "PROFILES",
    "Profile",
    "SourceDecodeError",
    "SourceNotFound",
    "WriteError",
    "build_request",
    "produce",
]
