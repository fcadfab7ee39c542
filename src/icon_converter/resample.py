from __future__ import annotations

import logging
import os
from pathlib import Path
import tempfile
from typing import Union

from PIL import Image, UnidentifiedImageError

from .errors import DestinationExists, SourceDecodeError, SourceNotFound, WriteError

RESAMPLE_FILTER = Image.Resampling.LANCZOS

OUTPUT_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".gif": "GIF",
    ".bmp": "BMP",
    ".tif": "TIFF",
    ".tiff": "TIFF",
}
# formats without an alpha channel
FLATTEN_FORMATS = {"JPEG"}
# mkstemp creates 0600 files
FILE_MODE = 0o644

logger = logging.getLogger("icon-converter")


def output_format(path: Union[str, Path]) -> str:
    suffix = Path(path).suffix.lower()
    try:
        return OUTPUT_FORMATS[suffix]
    except KeyError:
        raise WriteError(
            f"unsupported output format '{suffix or '(none)'}' for {path}",
            path=Path(path),
            hint="Supported extensions: " + ", ".join(sorted(OUTPUT_FORMATS)),
        ) from None


def _load_source(source: Path) -> Image.Image:
    try:
        with Image.open(source) as img:
            img.load()
            return img.convert("RGBA")
    except FileNotFoundError as exc:
        raise SourceNotFound(f"input file does not exist: {source}", path=source) from exc
    except (IsADirectoryError, PermissionError) as exc:
        raise SourceNotFound(f"input file cannot be read: {source}: {exc}", path=source) from exc
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise SourceDecodeError(f"failed to open image {source}: {exc}", path=source) from exc


def _flatten(img: Image.Image) -> Image.Image:
    background = Image.new("RGB", img.size, (255, 255, 255))
    background.paste(img, mask=img.split()[3])
    return background


def produce(
    source: Union[str, Path],
    size: int,
    destination: Union[str, Path],
    overwrite: bool = False,
) -> Path:
    """Resize ``source`` to ``size`` x ``size`` and write it to ``destination``.

    The format is taken from the destination extension. An existing
    destination is rejected with :class:`DestinationExists` before the
    source is decoded unless ``overwrite`` is set. The file is written
    through a temporary sibling and moved into place, so a failed write
    never leaves a partial file behind.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ValueError(f"size must be a positive integer, got {size!r}")

    source = Path(source)
    destination = Path(destination)
    fmt = output_format(destination)

    if not destination.parent.is_dir():
        raise WriteError(
            f"output directory does not exist: {destination.parent}",
            path=destination,
        )
    try:
        exists = destination.exists()
    except OSError as exc:
        raise WriteError(f"invalid output path {destination}: {exc}", path=destination) from exc
    if exists and not overwrite:
        raise DestinationExists(f"output file already exists: {destination}", path=destination)

    resized = _load_source(source).resize((size, size), RESAMPLE_FILTER)
    if fmt in FLATTEN_FORMATS:
        resized = _flatten(resized)

    tmp_path = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.stem}.",
            suffix=destination.suffix,
            dir=destination.parent,
        )
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as fh:
            resized.save(fh, format=fmt)
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, destination)
    except (OSError, ValueError) as exc:
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass
        raise WriteError(
            f"failed to save resized image to {destination}: {exc}",
            path=destination,
        ) from exc

    logger.debug("wrote %s (%sx%s %s)", destination, size, size, fmt)
    return destination
