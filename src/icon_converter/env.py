from __future__ import annotations

from dataclasses import dataclass
import io
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values

from .packers import DEFAULT_ICONUTIL, DEFAULT_MAGICK

ENV_NAMES = {
    "ICON_CONVERTER_ICONUTIL": ["ICONUTIL_BIN"],
    "ICON_CONVERTER_MAGICK": ["MAGICK_BIN"],
    "ICON_CONVERTER_TOOL_TIMEOUT_SECONDS": [],
    "ICON_CONVERTER_LOG_DIR": [],
    "ICON_CONVERTER_LOG_LEVEL": [],
    "ICON_CONVERTER_FORCE": [],
}

DEFAULT_TOOL_TIMEOUT_SECONDS = 120
DEFAULT_LOG_LEVEL = "INFO"
TRUE_VALUES = ("1", "true", "yes", "y", "on")
FALSE_VALUES = ("0", "false", "no", "n", "off")


@dataclass(frozen=True)
class Settings:
    iconutil_bin: str = DEFAULT_ICONUTIL
    magick_bin: str = DEFAULT_MAGICK
    # 0 waits for the external tool without a limit
    tool_timeout_seconds: int = DEFAULT_TOOL_TIMEOUT_SECONDS
    log_dir: Optional[Path] = None
    log_level: str = DEFAULT_LOG_LEVEL
    force: bool = False


def _read_env_text(env_path: Path) -> str:
    data = env_path.read_bytes()
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = data.decode("latin-1")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _known_env_names() -> set[str]:
    names = set(ENV_NAMES)
    for aliases in ENV_NAMES.values():
        names.update(aliases)
    return names


def load_env_from_cwd(cwd: Optional[Path] = None) -> Path:
    """Fill unset icon-converter variables from ``.env`` in the working directory.

    Other keys in the file are ignored, so a project ``.env`` shared with
    other tools does not leak into this process.
    """
    env_path = (cwd or Path.cwd()) / ".env"
    if not env_path.is_file():
        return env_path

    known = _known_env_names()
    values = dotenv_values(stream=io.StringIO(_read_env_text(env_path)))
    for key, value in values.items():
        if value is None or key not in known:
            continue
        os.environ.setdefault(key, value)
    return env_path


def _get_env_value(name: str) -> str:
    for candidate in [name] + ENV_NAMES.get(name, []):
        value = os.getenv(candidate)
        if value and value.strip():
            return value.strip()
    return ""


def _parse_int_env(name: str, default: int) -> int:
    raw = _get_env_value(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer for {name}: {raw}") from exc


def _parse_bool_env(name: str, default: bool) -> bool:
    raw = _get_env_value(name).lower()
    if not raw:
        return default
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw}")


def load_settings() -> Settings:
    timeout = _parse_int_env("ICON_CONVERTER_TOOL_TIMEOUT_SECONDS", DEFAULT_TOOL_TIMEOUT_SECONDS)
    if timeout < 0:
        raise ValueError("ICON_CONVERTER_TOOL_TIMEOUT_SECONDS must be >= 0")

    log_level = (_get_env_value("ICON_CONVERTER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Invalid log level for ICON_CONVERTER_LOG_LEVEL: {log_level}")

    log_dir_raw = _get_env_value("ICON_CONVERTER_LOG_DIR")
    log_dir = Path(log_dir_raw).expanduser() if log_dir_raw else Path.cwd() / "logs"

    return Settings(
        iconutil_bin=_get_env_value("ICON_CONVERTER_ICONUTIL") or DEFAULT_ICONUTIL,
        magick_bin=_get_env_value("ICON_CONVERTER_MAGICK") or DEFAULT_MAGICK,
        tool_timeout_seconds=timeout,
        log_dir=log_dir,
        log_level=log_level,
        force=_parse_bool_env("ICON_CONVERTER_FORCE", False),
    )
