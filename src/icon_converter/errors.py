from __future__ import annotations

from pathlib import Path
from typing import Optional

FORCE_HINT = "Use -f or --force flag to overwrite"


class IconConverterError(Exception):
    """Fatal error for the profile in which it is raised."""

    hint = ""

    def __init__(self, message: str, path: Optional[Path] = None, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
        if hint is not None:
            self.hint = hint

    def __str__(self) -> str:
        message = super().__str__()
        if self.hint:
            return f"{message}. {self.hint}"
        return message


class SourceNotFound(IconConverterError):
    hint = "Check the input image path"


class SourceDecodeError(IconConverterError):
    hint = "Input must be an image Pillow can read (PNG, JPEG, ...)"


class DestinationExists(IconConverterError):
    hint = FORCE_HINT


class DirectoryCreateError(IconConverterError):
    hint = "Check permissions on the output directory"


class WriteError(IconConverterError):
    pass
