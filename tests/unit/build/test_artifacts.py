"""Unit tests for build artifact extraction."""

import tempfile
from pathlib import Path

import pytest

from smartblock.build.artifacts import ArtifactFormat, ArtifactNotFoundError, find_artifact


class TestFindArtifact:
    """Test cases for find_artifact."""

    def test_hex_preferred_over_bin(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            out = Path(temp_dir)
            (out / "sketch.ino.bin").write_bytes(b"bin")
            (out / "sketch.ino.hex").write_bytes(b"hex")

            artifact = find_artifact(out)

            assert artifact.format is ArtifactFormat.HEX
            assert artifact.data == b"hex"
            assert artifact.file_path == out / "sketch.ino.hex"

    def test_bin_fallback(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            out = Path(temp_dir)
            (out / "sketch.ino.elf").write_bytes(b"elf")
            (out / "sketch.ino.bin").write_bytes(b"\x00\xff")

            artifact = find_artifact(out)

            assert artifact.format is ArtifactFormat.BIN
            assert artifact.data == b"\x00\xff"

    def test_first_hex_in_listing_order(self):
        """AVR builds also export a with_bootloader.hex; the plain one sorts first."""
        with tempfile.TemporaryDirectory() as temp_dir:
            out = Path(temp_dir)
            (out / "sketch.ino.with_bootloader.hex").write_bytes(b"boot")
            (out / "sketch.ino.hex").write_bytes(b"app")

            assert find_artifact(out).data == b"app"

    def test_not_recursive(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            out = Path(temp_dir)
            (out / "nested").mkdir()
            (out / "nested" / "sketch.ino.hex").write_bytes(b"x")

            with pytest.raises(ArtifactNotFoundError):
                find_artifact(out)

    def test_no_artifact(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            out = Path(temp_dir)
            (out / "sketch.ino.elf").write_bytes(b"elf")
            (out / "sketch.ino.map").write_text("map")

            with pytest.raises(ArtifactNotFoundError, match=r"no \.hex or \.bin"):
                find_artifact(out)

    def test_missing_directory(self):
        with pytest.raises(ArtifactNotFoundError, match="not found"):
            find_artifact(Path("/no/such/output/dir"))
