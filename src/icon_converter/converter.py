from __future__ import annotations

from dataclasses import dataclass, field
import enum
import logging
import os
from pathlib import Path
from typing import Optional

from .env import Settings
from .errors import DirectoryCreateError, IconConverterError
from .packers import PackResult, PackStatus, pack_iconset, pack_multi_res
from .profiles import ICNS_NAME, ICO_NAME, MAC_RESOURCES_DIR, Profile, ProfileSpec, get_spec
from .resample import produce


@dataclass(frozen=True)
class ConversionRequest:
    source: Path
    output_dir: Path
    overwrite: bool = False
    profiles: tuple[Profile, ...] = ()


class ProfileState(enum.Enum):
    NOT_STARTED = "not_started"
    DIRECTORY_ENSURED = "directory_ensured"
    ASSETS_WRITTEN = "assets_written"
    POST_PROCESSED = "post_processed"
    DONE = "done"


@dataclass
class ProfileResult:
    profile: Profile
    directory: Path
    state: ProfileState = ProfileState.NOT_STARTED
    written: list[Path] = field(default_factory=list)
    container: Optional[PackResult] = None
    messages: list[str] = field(default_factory=list)
    error: Optional[IconConverterError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.state is ProfileState.DONE


@dataclass
class RunReport:
    output_dir: Path
    results: list[ProfileResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def failures(self) -> list[ProfileResult]:
        return [r for r in self.results if not r.ok]


def build_request(
    source,
    output_dir,
    *,
    overwrite: bool = False,
    profiles=(),
) -> ConversionRequest:
    unique: list[Profile] = []
    for p in profiles:
        p = Profile(p)
        if p not in unique:
            unique.append(p)
    return ConversionRequest(
        source=Path(source),
        output_dir=Path(output_dir),
        overwrite=bool(overwrite),
        profiles=tuple(unique),
    )


class Converter:
    """Generates every requested platform profile from one source image.

    Profiles run one at a time in request order. A fatal error stops only
    the profile it happens in; output of other profiles is kept.
    """

    def __init__(
        self,
        request: ConversionRequest,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.request = request
        self.settings = settings or Settings()
        self.logger = logger or logging.getLogger("icon-converter")

    def run(self) -> RunReport:
        report = RunReport(output_dir=self.request.output_dir)
        for profile in self.request.profiles:
            report.results.append(self.run_profile(profile))
        return report

    def run_profile(self, profile: Profile) -> ProfileResult:
        spec = get_spec(profile)
        result = ProfileResult(profile=profile, directory=self.request.output_dir / spec.directory)
        self.logger.info("Profile %s started (dir=%s)", profile.value, result.directory)

        try:
            self._ensure_directories(spec, result)
            pack_inputs = self._write_assets(spec, result)
        except IconConverterError as exc:
            result.error = exc
            message = f"ERROR: {spec.label} icons failed: {exc}"
            print(message)
            self.logger.error(message)
            return result

        if spec.container == "icns":
            self._pack_icns(spec, result)
            result.state = ProfileState.POST_PROCESSED
        elif spec.container == "ico":
            self._pack_ico(pack_inputs, result)
            result.state = ProfileState.POST_PROCESSED
        elif spec.note:
            self._report(result, spec.note)

        result.state = ProfileState.DONE
        self.logger.info(
            "Profile %s done (files=%s, container=%s)",
            profile.value,
            len(result.written),
            result.container.status.value if result.container else "-",
        )
        return result

    def _report(self, result: ProfileResult, message: str, level: int = logging.INFO) -> None:
        print(message)
        self.logger.log(level, message)
        result.messages.append(message)

    def _asset_dir(self, spec: ProfileSpec, result: ProfileResult) -> Path:
        return result.directory / spec.asset_dir if spec.asset_dir else result.directory

    def _ensure_directories(self, spec: ProfileSpec, result: ProfileResult) -> None:
        dirs = [result.directory]
        dirs += [result.directory / d for d in spec.extra_dirs]
        dirs.append(self._asset_dir(spec, result))
        for d in dirs:
            try:
                d.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise DirectoryCreateError(
                    f"failed to create {spec.label} directory {d}: {exc}",
                    path=d,
                ) from exc
        result.state = ProfileState.DIRECTORY_ENSURED

    def _write_assets(self, spec: ProfileSpec, result: ProfileResult) -> list[Path]:
        asset_dir = self._asset_dir(spec, result)
        pack_inputs = []
        for entry in spec.entries:
            out_path = produce(
                self.request.source,
                entry.size,
                asset_dir / entry.filename,
                overwrite=self.request.overwrite,
            )
            result.written.append(out_path)
            if entry.pack_input:
                pack_inputs.append(out_path)
        result.state = ProfileState.ASSETS_WRITTEN
        self._report(result, f"{spec.label} icons generated in: {asset_dir}")
        return pack_inputs

    def _timeout(self) -> Optional[int]:
        return self.settings.tool_timeout_seconds or None

    def _pack_icns(self, spec: ProfileSpec, result: ProfileResult) -> None:
        iconset_dir = self._asset_dir(spec, result)
        tmp_icns = result.directory / ICNS_NAME
        final_icns = result.directory / MAC_RESOURCES_DIR / ICNS_NAME

        if final_icns.exists() and not self.request.overwrite:
            self._report(
                result,
                f"Skipping .icns generation: {final_icns} already exists. Use -f to overwrite.",
            )
            return

        self._report(result, "Attempting to convert .iconset to .icns using iconutil...")
        packed = pack_iconset(
            iconset_dir,
            tmp_icns,
            binary=self.settings.iconutil_bin,
            timeout_seconds=self._timeout(),
        )
        result.container = packed

        if not packed.ok:
            reason = (
                "Check if iconutil is installed and in your PATH."
                if packed.status is PackStatus.UNAVAILABLE
                else packed.detail
            )
            self._report(result, f"Automatic conversion failed. {reason}", logging.WARNING)
            self._report(
                result,
                f'To create .icns file manually, run: cd "{result.directory}" '
                f"&& iconutil -c icns {spec.asset_dir}",
            )
            self._report(result, f"Then place the resulting .icns file at: {final_icns}")
            return

        try:
            os.replace(tmp_icns, final_icns)
        except OSError as exc:
            self._report(
                result,
                f"Created .icns file but failed to move it to Resources directory: {exc}",
                logging.WARNING,
            )
            self._report(result, f"Please manually move {tmp_icns} to {final_icns}")
            return

        result.container = PackResult(
            PackStatus.OK,
            path=final_icns,
            detail=packed.detail,
            command=packed.command,
        )
        self._report(result, f"Successfully created and placed .icns file at: {final_icns}")
        self._report(result, f"Complete macOS app directory structure created at: {result.directory}")

    def _pack_ico(self, pack_inputs: list[Path], result: ProfileResult) -> None:
        ico_path = result.directory / ICO_NAME

        if ico_path.exists() and not self.request.overwrite:
            self._report(
                result,
                f"Skipping {ICO_NAME} generation: {ico_path} already exists. Use -f to overwrite.",
            )
            return

        self._report(result, f"Attempting to generate {ICO_NAME} using ImageMagick (magick command)...")
        packed = pack_multi_res(
            pack_inputs,
            ico_path,
            binary=self.settings.magick_bin,
            timeout_seconds=self._timeout(),
        )
        result.container = packed

        if packed.ok:
            self._report(result, f"Successfully generated {ICO_NAME} at: {ico_path}")
            return

        self._report(result, f"Failed to generate {ICO_NAME} using magick command.", logging.WARNING)
        if packed.detail:
            self._report(result, f"ImageMagick output:\n{packed.detail}")
        self._report(
            result,
            "Please ensure ImageMagick is installed and the 'magick' command is in your PATH.",
        )
        self._report(
            result,
            f"You may need to generate the {ICO_NAME} manually from the generated PNGs.",
        )


def summary_lines(report: RunReport) -> list[str]:
    """Directory summary of a run, paths relative to the output root."""
    lines = [f"Output directory: {report.output_dir}"]
    for r in report.results:
        status = "ok" if r.ok else "FAILED"
        lines.append(f"  {r.profile.value}/ [{status}]")
        files = list(r.written)
        if r.container and r.container.ok and r.container.path:
            files.append(r.container.path)
        for path in files:
            try:
                rel = path.relative_to(report.output_dir)
            except ValueError:
                rel = path
            lines.append(f"    {rel.as_posix()}")
    return lines
