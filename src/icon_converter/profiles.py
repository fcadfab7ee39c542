from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Optional


class Profile(enum.Enum):
    BROWSER_EXTENSION = "browser-extension"
    MAC_APP = "mac-app"
    WINDOWS_APP = "windows-app"
    FAVICON = "favicon"


@dataclass(frozen=True)
class IconEntry:
    size: int
    filename: str
    scale: Optional[int] = None  # 1 or 2 (@2x) for iconset entries
    pack_input: bool = False


@dataclass(frozen=True)
class ProfileSpec:
    profile: Profile
    label: str
    directory: str
    entries: tuple[IconEntry, ...]
    asset_dir: str = ""
    extra_dirs: tuple[str, ...] = ()
    container: Optional[str] = None
    note: str = ""


BROWSER_EXT_SIZES = (16, 32, 48, 128)
WINDOWS_APP_SIZES = (16, 32, 48, 64, 128, 256)
FAVICON_PACK_SIZES = (16, 32, 48, 64)
FAVICON_OTHER_SIZES = (192, 512)
APPLE_TOUCH_ICON_SIZE = 180

ICONSET_DIR = "AppIcon.iconset"
MAC_RESOURCES_DIR = "Contents/Resources"
ICNS_NAME = "AppIcon.icns"
ICO_NAME = "favicon.ico"


def icon_filename(size: int) -> str:
    return f"icon_{size}x{size}.png"


def favicon_filename(size: int) -> str:
    return f"favicon-{size}x{size}.png"


def _iconset_entries() -> tuple[IconEntry, ...]:
    # Apple naming: icon_NxN.png is N px, icon_NxN@2x.png is 2N px
    entries = []
    for nominal in (16, 32, 128, 256, 512):
        entries.append(IconEntry(nominal, f"icon_{nominal}x{nominal}.png", scale=1))
        entries.append(IconEntry(nominal * 2, f"icon_{nominal}x{nominal}@2x.png", scale=2))
    return tuple(entries)


PROFILES = {
    Profile.BROWSER_EXTENSION: ProfileSpec(
        profile=Profile.BROWSER_EXTENSION,
        label="Browser extension",
        directory="browser-extension",
        entries=tuple(IconEntry(s, icon_filename(s)) for s in BROWSER_EXT_SIZES),
    ),
    Profile.MAC_APP: ProfileSpec(
        profile=Profile.MAC_APP,
        label="macOS app",
        directory="mac-app",
        asset_dir=ICONSET_DIR,
        extra_dirs=(MAC_RESOURCES_DIR,),
        entries=_iconset_entries(),
        container="icns",
    ),
    Profile.WINDOWS_APP: ProfileSpec(
        profile=Profile.WINDOWS_APP,
        label="Windows app",
        directory="windows-app",
        entries=tuple(IconEntry(s, icon_filename(s)) for s in WINDOWS_APP_SIZES),
        note="To create .ico file, use a third-party tool with these images",
    ),
    Profile.FAVICON: ProfileSpec(
        profile=Profile.FAVICON,
        label="Favicon",
        directory="favicon",
        entries=(
            tuple(IconEntry(s, favicon_filename(s), pack_input=True) for s in FAVICON_PACK_SIZES)
            + tuple(IconEntry(s, favicon_filename(s)) for s in FAVICON_OTHER_SIZES)
            + (IconEntry(APPLE_TOUCH_ICON_SIZE, "apple-touch-icon.png"),)
        ),
        container="ico",
    ),
}

# order used when several profiles are selected on the command line
PROFILE_ORDER = (
    Profile.BROWSER_EXTENSION,
    Profile.MAC_APP,
    Profile.WINDOWS_APP,
    Profile.FAVICON,
)


def get_spec(profile: Profile) -> ProfileSpec:
    return PROFILES[profile]
