from __future__ import annotations

from pathlib import Path
import struct
import sys
import tempfile
import unittest
import zlib
from unittest.mock import patch

from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from icon_converter.errors import (  # noqa: E402
    DestinationExists,
    SourceDecodeError,
    SourceNotFound,
    WriteError,
)
from icon_converter.resample import output_format, produce  # noqa: E402


def _make_image(path: Path, size=(64, 64), color=(200, 30, 30, 255)) -> Path:
    Image.new("RGBA", size, color).save(path)
    return path


class ProduceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.source = _make_image(self.tmp / "source.png", size=(512, 512))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_output_is_exact_square_size(self) -> None:
        for size in (16, 48, 180, 1024):
            out = produce(self.source, size, self.tmp / f"out_{size}.png")
            with Image.open(out) as img:
                self.assertEqual((size, size), img.size)
                self.assertEqual("PNG", img.format)

    def test_non_square_source_is_stretched_to_square(self) -> None:
        wide = _make_image(self.tmp / "wide.png", size=(300, 120))
        out = produce(wide, 32, self.tmp / "wide_32.png")
        with Image.open(out) as img:
            self.assertEqual((32, 32), img.size)

    def test_existing_destination_fails_before_decoding(self) -> None:
        dest = self.tmp / "icon.png"
        dest.write_bytes(b"original")

        with patch("icon_converter.resample.Image.open") as mock_open:
            with self.assertRaises(DestinationExists) as ctx:
                produce(self.source, 16, dest, overwrite=False)

        mock_open.assert_not_called()
        self.assertEqual(b"original", dest.read_bytes())
        self.assertEqual(dest, ctx.exception.path)
        self.assertIn("--force", str(ctx.exception))

    def test_overwrite_replaces_existing_destination(self) -> None:
        dest = self.tmp / "icon.png"
        dest.write_bytes(b"original")

        produce(self.source, 16, dest, overwrite=True)

        with Image.open(dest) as img:
            self.assertEqual((16, 16), img.size)

    def test_missing_source(self) -> None:
        with self.assertRaises(SourceNotFound):
            produce(self.tmp / "missing.png", 16, self.tmp / "out.png")
        self.assertFalse((self.tmp / "out.png").exists())

    def test_undecodable_source(self) -> None:
        bogus = self.tmp / "bogus.png"
        bogus.write_bytes(b"this is not an image")
        with self.assertRaises(SourceDecodeError):
            produce(bogus, 16, self.tmp / "out.png")
        self.assertFalse((self.tmp / "out.png").exists())

    def test_destination_directory_must_exist(self) -> None:
        with self.assertRaises(WriteError):
            produce(self.source, 16, self.tmp / "nope" / "out.png")

    def test_invalid_size(self) -> None:
        for size in (0, -16, True, 16.0):
            with self.assertRaises(ValueError):
                produce(self.source, size, self.tmp / "out.png")

    def test_encodes_by_extension(self) -> None:
        out = produce(self.source, 32, self.tmp / "out.jpg")
        with Image.open(out) as img:
            self.assertEqual("JPEG", img.format)
            self.assertEqual("RGB", img.mode)

        out = produce(self.source, 32, self.tmp / "out.bmp")
        with Image.open(out) as img:
            self.assertEqual("BMP", img.format)

    def test_unknown_extension_is_rejected(self) -> None:
        with self.assertRaises(WriteError):
            produce(self.source, 32, self.tmp / "out.xyz")
        self.assertEqual("TIFF", output_format("a/b/icon.TIF"))

    def test_failed_write_leaves_no_partial_file(self) -> None:
        out_dir = self.tmp / "out"
        out_dir.mkdir()
        dest = out_dir / "icon.png"
        dest.write_bytes(b"original")

        with patch.object(Image.Image, "save", side_effect=OSError("disk full")):
            with self.assertRaises(WriteError):
                produce(self.source, 16, dest, overwrite=True)

        self.assertEqual(["icon.png"], [p.name for p in out_dir.iterdir()])
        self.assertEqual(b"original", dest.read_bytes())

    def test_temp_file_creation_failure_is_write_error(self) -> None:
        with patch(
            "icon_converter.resample.tempfile.mkstemp",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with self.assertRaises(WriteError) as ctx:
                produce(self.source, 16, self.tmp / "out.png")

        self.assertEqual(self.tmp / "out.png", ctx.exception.path)
        self.assertIsInstance(ctx.exception.__cause__, PermissionError)

    def test_overlong_file_name_is_write_error(self) -> None:
        with self.assertRaises(WriteError):
            produce(self.source, 16, self.tmp / ("a" * 300 + ".png"))

    def test_oversized_source_is_decode_error(self) -> None:
        def _chunk(kind: bytes, data: bytes) -> bytes:
            crc = zlib.crc32(kind + data) & 0xFFFFFFFF
            return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)

        huge = self.tmp / "huge.png"
        huge.write_bytes(
            b"\x89PNG\r\n\x1a\n"
            + _chunk(b"IHDR", struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0))
            + _chunk(b"IEND", b"")
        )

        with self.assertRaises(SourceDecodeError):
            produce(huge, 16, self.tmp / "out.png")
        self.assertFalse((self.tmp / "out.png").exists())


if __name__ == "__main__":
    unittest.main()
