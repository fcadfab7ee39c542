from __future__ import annotations

from pathlib import Path
import sys
import unittest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from icon_converter.profiles import PROFILE_ORDER, PROFILES, Profile  # noqa: E402


class ProfileTableTests(unittest.TestCase):
    def test_every_profile_has_a_spec(self) -> None:
        self.assertEqual(set(Profile), set(PROFILES))
        self.assertEqual(set(Profile), set(PROFILE_ORDER))

    def test_browser_extension_entries(self) -> None:
        spec = PROFILES[Profile.BROWSER_EXTENSION]
        self.assertEqual("browser-extension", spec.directory)
        self.assertEqual(
            [(16, "icon_16x16.png"), (32, "icon_32x32.png"), (48, "icon_48x48.png"), (128, "icon_128x128.png")],
            [(e.size, e.filename) for e in spec.entries],
        )
        self.assertIsNone(spec.container)

    def test_mac_iconset_naming(self) -> None:
        spec = PROFILES[Profile.MAC_APP]
        self.assertEqual("AppIcon.iconset", spec.asset_dir)
        self.assertEqual(("Contents/Resources",), spec.extra_dirs)
        self.assertEqual("icns", spec.container)
        self.assertEqual(10, len(spec.entries))
        self.assertEqual({16, 32, 64, 128, 256, 512, 1024}, {e.size for e in spec.entries})

        by_name = {e.filename: e for e in spec.entries}
        self.assertEqual(32, by_name["icon_16x16@2x.png"].size)
        self.assertEqual(2, by_name["icon_16x16@2x.png"].scale)
        self.assertEqual(32, by_name["icon_32x32.png"].size)
        self.assertEqual(1, by_name["icon_32x32.png"].scale)
        self.assertEqual(1024, by_name["icon_512x512@2x.png"].size)

    def test_windows_entries(self) -> None:
        spec = PROFILES[Profile.WINDOWS_APP]
        self.assertEqual([16, 32, 48, 64, 128, 256], [e.size for e in spec.entries])
        self.assertTrue(spec.note)

    def test_favicon_pack_inputs(self) -> None:
        spec = PROFILES[Profile.FAVICON]
        self.assertEqual("ico", spec.container)
        self.assertEqual(
            ["favicon-16x16.png", "favicon-32x32.png", "favicon-48x48.png", "favicon-64x64.png"],
            [e.filename for e in spec.entries if e.pack_input],
        )
        self.assertEqual(180, spec.entries[-1].size)
        self.assertEqual("apple-touch-icon.png", spec.entries[-1].filename)
        self.assertEqual(7, len(spec.entries))


if __name__ == "__main__":
    unittest.main()
