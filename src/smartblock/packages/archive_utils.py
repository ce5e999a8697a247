"""Archive Extraction Utilities.

This module extracts the downloaded arduino-cli distribution. Extraction is
delegated to the platform's own decompression tools:

    - .tar.gz: ``tar -xzf`` (Linux and macOS)
    - .zip:    PowerShell ``Expand-Archive`` on Windows, ``unzip`` elsewhere

After extraction, find_binary() walks the extracted tree looking for the
executable with the exact platform name.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

from smartblock.errors import AgentError


class ExtractionError(AgentError):
    """Raised when archive extraction fails."""

    pass


def powershell_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal.

    Embedded single quotes are escaped by doubling them.
    """
    return "'" + value.replace("'", "''") + "'"


class ArchiveExtractor:
    """Base class for format-specific extractors."""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize extractor.

        Args:
            timeout: Maximum seconds the helper tool may run
        """
        self.timeout = timeout

    def build_command(self, archive_path: Path, dest_dir: Path) -> List[str]:
        raise NotImplementedError

    def extract(self, archive_path: Path, dest_dir: Path) -> Path:
        """Extract ``archive_path`` into ``dest_dir``.

        Returns:
            Path to the destination directory

        Raises:
            ExtractionError: If the archive is missing or the helper fails
        """
        archive_path = Path(archive_path)
        dest_dir = Path(dest_dir)

        if not archive_path.exists():
            raise ExtractionError(f"Archive not found: {archive_path}")

        dest_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(archive_path, dest_dir)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ExtractionError(f"Extraction of {archive_path.name} timed out")
        except OSError as e:
            raise ExtractionError(f"Failed to run {cmd[0]}: {e}")

        if result.returncode != 0:
            raise ExtractionError(
                f"{cmd[0]} failed to extract {archive_path.name} "
                + f"(exit {result.returncode}): {result.stderr.strip()}"
            )

        return dest_dir


class TarGzExtractor(ArchiveExtractor):
    """Extracts gzipped tarballs with the system ``tar``."""

    def build_command(self, archive_path: Path, dest_dir: Path) -> List[str]:
        return ["tar", "-xzf", str(archive_path), "-C", str(dest_dir)]


class ZipExtractor(ArchiveExtractor):
    """Extracts ZIP archives with Expand-Archive (Windows) or ``unzip``."""

    def __init__(self, windows: bool, timeout: Optional[float] = None):
        super().__init__(timeout=timeout)
        self.windows = windows

    def build_command(self, archive_path: Path, dest_dir: Path) -> List[str]:
        if self.windows:
            script = (
                f"Expand-Archive -LiteralPath {powershell_quote(str(archive_path))} "
                + f"-DestinationPath {powershell_quote(str(dest_dir))} -Force"
            )
            return ["powershell", "-NoProfile", "-Command", script]
        return ["unzip", "-o", str(archive_path), "-d", str(dest_dir)]


def extractor_for(archive_ext: str, windows: bool, timeout: Optional[float] = None) -> ArchiveExtractor:
    """Pick the extractor for an archive extension ('.zip' or '.tar.gz')."""
    if archive_ext == ".zip":
        return ZipExtractor(windows=windows, timeout=timeout)
    if archive_ext in (".tar.gz", ".tgz"):
        return TarGzExtractor(timeout=timeout)
    raise ExtractionError(f"Unsupported archive format: {archive_ext}")


def find_binary(root: Path, binary_name: str) -> Optional[Path]:
    """Depth-first search for a file named exactly ``binary_name``.

    Entries are visited in sorted order and a directory is searched fully
    before its later siblings. Only exact name matches count, so
    ``arduino-cli`` never matches ``arduino-cli.exe`` and vice versa.

    Returns:
        Path to the first match, or None if the tree has no such file
    """
    try:
        entries = sorted(Path(root).iterdir())
    except OSError:
        return None

    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            found = find_binary(entry, binary_name)
            if found is not None:
                return found
        elif entry.is_file() and entry.name == binary_name:
            return entry

    return None
