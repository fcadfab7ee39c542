from __future__ import annotations

from dataclasses import dataclass, field
import enum
import logging
from pathlib import Path
import shutil
import subprocess
from typing import Iterable, Optional, Union

DEFAULT_ICONUTIL = "iconutil"
DEFAULT_MAGICK = "magick"
OUTPUT_SNIPPET_CHARS = 2000

logger = logging.getLogger("icon-converter")


class PackStatus(enum.Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


@dataclass(frozen=True)
class PackResult:
    status: PackStatus
    path: Optional[Path] = None
    detail: str = ""
    command: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is PackStatus.OK


def _format_output(stdout: Optional[str], stderr: Optional[str]) -> str:
    text = "\n".join(part.strip() for part in (stdout, stderr) if part and part.strip())
    if len(text) > OUTPUT_SNIPPET_CHARS:
        text = text[:OUTPUT_SNIPPET_CHARS] + "..."
    return text


def _run_tool(
    command: list[str],
    output_path: Path,
    timeout_seconds: Optional[float],
) -> PackResult:
    binary = command[0]
    resolved = shutil.which(binary)
    if resolved is None:
        logger.info("%s not found in PATH", binary)
        return PackResult(PackStatus.UNAVAILABLE, detail=f"{binary} not found in PATH", command=command)

    logger.info("Running %s", " ".join(command))
    try:
        proc = subprocess.run(
            [resolved] + command[1:],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout_seconds or None,
        )
    except subprocess.TimeoutExpired as exc:
        return PackResult(
            PackStatus.FAILED,
            detail=f"{binary} timed out after {exc.timeout}s",
            command=command,
        )
    except OSError as exc:
        return PackResult(PackStatus.UNAVAILABLE, detail=f"{binary} could not be started: {exc}", command=command)

    output = _format_output(proc.stdout, proc.stderr)
    if proc.returncode != 0:
        detail = f"{binary} exited with status {proc.returncode}"
        if output:
            detail = f"{detail}\n{output}"
        return PackResult(PackStatus.FAILED, detail=detail, command=command)
    if not output_path.is_file():
        return PackResult(
            PackStatus.FAILED,
            detail=f"{binary} reported success but {output_path} was not created",
            command=command,
        )
    return PackResult(PackStatus.OK, path=output_path, detail=output, command=command)


def pack_iconset(
    iconset_dir: Union[str, Path],
    output_path: Union[str, Path],
    *,
    binary: str = DEFAULT_ICONUTIL,
    timeout_seconds: Optional[float] = None,
) -> PackResult:
    """Pack a macOS ``.iconset`` directory into an ``.icns`` file with iconutil."""
    output_path = Path(output_path)
    command = [binary, "-c", "icns", "-o", str(output_path), str(iconset_dir)]
    return _run_tool(command, output_path, timeout_seconds)


def pack_multi_res(
    png_paths: Iterable[Union[str, Path]],
    output_path: Union[str, Path],
    *,
    binary: str = DEFAULT_MAGICK,
    timeout_seconds: Optional[float] = None,
) -> PackResult:
    """Bundle several PNGs into one multi-resolution ``.ico`` with ImageMagick."""
    output_path = Path(output_path)
    inputs = [str(p) for p in png_paths]
    if not inputs:
        return PackResult(PackStatus.FAILED, detail="no input images to pack")
    command = [binary, "convert"] + inputs + [str(output_path)]
    return _run_tool(command, output_path, timeout_seconds)
