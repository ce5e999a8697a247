"""Build artifact extraction.

After a successful compile, arduino-cli exports the firmware into the
workspace's output directory. This module picks the artifact to return:
the first ``*.hex`` file, else the first ``*.bin`` file.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from smartblock.errors import AgentError


class ArtifactNotFoundError(AgentError):
    """Raised when a compile succeeded but produced no recognizable firmware."""

    pass


class ArtifactFormat(Enum):
    """Recognized firmware formats, in order of preference."""

    HEX = "hex"
    BIN = "bin"

    @property
    def suffix(self) -> str:
        return f".{self.value}"


@dataclass
class BuildArtifact:
    """Firmware file loaded from a workspace."""

    file_path: Path
    format: ArtifactFormat
    data: bytes


def find_artifact(output_dir: Path) -> BuildArtifact:
    """Load the firmware artifact from ``output_dir`` (non-recursive).

    Files are considered in sorted name order. ``.hex`` takes precedence over
    ``.bin``; exactly one artifact is returned.

    Raises:
        ArtifactNotFoundError: If neither a .hex nor a .bin file exists
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        raise ArtifactNotFoundError(f"Build output directory not found: {output_dir}")

    files = sorted(p for p in output_dir.iterdir() if p.is_file())

    for fmt in ArtifactFormat:
        for path in files:
            if path.name.endswith(fmt.suffix):
                return BuildArtifact(file_path=path, format=fmt, data=path.read_bytes())

    raise ArtifactNotFoundError(
        f"Compile succeeded but no .hex or .bin file was found in {output_dir}"
    )
