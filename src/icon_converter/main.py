from __future__ import annotations

import argparse
import importlib.metadata
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence

from .converter import Converter, build_request, summary_lines
from .env import Settings, load_env_from_cwd, load_settings
from .profiles import PROFILE_ORDER, Profile

LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 5
EXIT_PROFILE_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_SOURCE_ERROR = 3
EXIT_OUTPUT_ERROR = 4

PROFILE_FLAGS = {
    Profile.BROWSER_EXTENSION: ("-b", "--browser-extension", "Convert for browser extension requirements"),
    Profile.MAC_APP: ("-m", "--mac-app", "Convert for macOS application requirements"),
    Profile.WINDOWS_APP: ("-w", "--windows-app", "Convert for Windows application requirements"),
    Profile.FAVICON: ("-i", "--favicon", "Generate website favicons (PNG set and favicon.ico)"),
}


def _setup_logging(settings: Settings) -> logging.Logger:
    logger = logging.getLogger("icon-converter")
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level)
    logger.propagate = False

    log_dir = settings.log_dir or Path.cwd() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "icon-converter.log"

    handler = RotatingFileHandler(
        log_path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def _get_version() -> str:
    try:
        return importlib.metadata.version("icon-converter")
    except Exception:
        return "unknown"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icon-converter",
        description=(
            "Convert an icon to the sizes and formats required by browser "
            "extensions, macOS applications, Windows applications and websites."
        ),
    )
    parser.add_argument("input", help="Path to the source image")
    parser.add_argument("output", help="Directory where the icons are written")
    for profile in PROFILE_ORDER:
        short, long, help_text = PROFILE_FLAGS[profile]
        parser.add_argument(
            short,
            long,
            dest=profile.name.lower(),
            action="store_true",
            help=help_text,
        )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        default=None,
        help="Force overwrite existing files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_version()}")
    return parser


def _selected_profiles(args: argparse.Namespace) -> list[Profile]:
    return [p for p in PROFILE_ORDER if getattr(args, p.name.lower())]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    env_path = load_env_from_cwd()

    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"ERROR: {exc}")
        return EXIT_CONFIG_ERROR

    try:
        logger = _setup_logging(settings)
    except OSError as exc:
        print(f"ERROR: failed to open log directory {settings.log_dir}: {exc}")
        return EXIT_CONFIG_ERROR

    logger.info(
        "icon-converter %s (env_path=%s)",
        _get_version(),
        env_path if env_path.exists() else "not found",
    )

    input_path = Path(args.input)
    output_dir = Path(args.output)

    if not input_path.exists():
        message = f"ERROR: input file does not exist: {input_path}"
        print(message)
        logger.error(message)
        return EXIT_SOURCE_ERROR

    profiles = _selected_profiles(args)
    if not profiles:
        print("WARNING: no output type specified, nothing to do")
        print("Hint: use -b, -m, -w or -i to choose output types, or --help for usage")
        logger.warning("No profile selected; nothing converted")
        return 0

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        message = f"ERROR: failed to create output directory {output_dir}: {exc}"
        print(message)
        logger.error(message)
        return EXIT_OUTPUT_ERROR

    overwrite = settings.force if args.force is None else args.force
    request = build_request(input_path, output_dir, overwrite=overwrite, profiles=profiles)
    logger.info(
        "Converting %s -> %s profiles=%s overwrite=%s",
        request.source,
        request.output_dir,
        ",".join(p.value for p in request.profiles),
        request.overwrite,
    )

    report = Converter(request, settings=settings, logger=logger).run()

    print()
    for line in summary_lines(report):
        print(line)

    if not report.ok:
        failed = ", ".join(r.profile.value for r in report.failures)
        message = f"ERROR: {len(report.failures)} profile(s) failed: {failed}"
        print(message)
        logger.error(message)
        return EXIT_PROFILE_ERROR
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
