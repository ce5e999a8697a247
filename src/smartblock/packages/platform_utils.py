"""Platform Detection Utilities.

This module maps the host operating system and CPU architecture to an
arduino-cli distribution.

Supported Platforms:
    - macOS: ARM64 (Apple Silicon), x86_64 (Intel)
    - Windows: x86_64
    - Linux: x86_64

Any other combination raises UnsupportedPlatformError before anything touches
the network or the filesystem.
"""

import platform
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from smartblock.errors import AgentError


class UnsupportedPlatformError(AgentError):
    """Raised when no arduino-cli distribution exists for the host."""

    pass


# Base URL for arduino-cli release downloads
BASE_URL = "https://downloads.arduino.cc/arduino-cli"

# (system, machine) -> release tag used in the archive name
_PLATFORM_TAGS: Dict[Tuple[str, str], str] = {
    ("darwin", "arm64"): "macOS_ARM64",
    ("darwin", "x86_64"): "macOS_64bit",
    ("windows", "x86_64"): "Windows_64bit",
    ("linux", "x86_64"): "Linux_64bit",
}

_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "x86-64": "x86_64",
    "aarch64": "arm64",
    "armv8": "arm64",
}


@dataclass(frozen=True)
class PlatformProfile:
    """Read-only facts about the host, fixed at process start."""

    system: str
    machine: str

    @classmethod
    def current(cls) -> "PlatformProfile":
        """Build a profile from the running interpreter's host."""
        return cls.from_names(platform.system(), platform.machine())

    @classmethod
    def from_names(cls, system: str, machine: str) -> "PlatformProfile":
        """Normalize raw OS/CPU names (e.g. 'Windows', 'AMD64')."""
        system = system.strip().lower()
        if system.startswith(("win", "cygwin", "msys")):
            system = "windows"
        machine = machine.strip().lower()
        machine = _MACHINE_ALIASES.get(machine, machine)
        return cls(system=system, machine=machine)

    @property
    def is_windows(self) -> bool:
        return self.system == "windows"


@dataclass(frozen=True)
class PlatformTarget:
    """Distribution selected for a PlatformProfile.

    Attributes:
        tag: Stable platform tag, also used as install-path suffix
        url: Download URL of the arduino-cli archive
        archive_ext: '.zip' on Windows, '.tar.gz' elsewhere
        binary_name: Executable name expected inside the archive
    """

    tag: str
    url: str
    archive_ext: str
    binary_name: str

    @property
    def archive_name(self) -> str:
        return f"arduino-cli{self.archive_ext}"


class PlatformResolver:
    """Resolves the arduino-cli distribution for a host profile."""

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url.rstrip("/")

    def resolve(self, profile: Optional[PlatformProfile] = None) -> PlatformTarget:
        """Return the distribution for ``profile`` (the current host by default).

        Raises:
            UnsupportedPlatformError: If the combination is not in the supported set
        """
        profile = profile or PlatformProfile.current()
        tag = _PLATFORM_TAGS.get((profile.system, profile.machine))
        if tag is None:
            raise UnsupportedPlatformError(
                f"Unsupported platform: {profile.system} {profile.machine}. "
                + f"Supported: {', '.join(sorted(_PLATFORM_TAGS.values()))}"
            )

        if profile.is_windows:
            archive_ext = ".zip"
            binary_name = "arduino-cli.exe"
        else:
            archive_ext = ".tar.gz"
            binary_name = "arduino-cli"

        return PlatformTarget(
            tag=tag,
            url=f"{self.base_url}/arduino-cli_latest_{tag}{archive_ext}",
            archive_ext=archive_ext,
            binary_name=binary_name,
        )

    @staticmethod
    def get_platform_info(profile: Optional[PlatformProfile] = None) -> dict:
        """Get platform facts for the health endpoint.

        Returns:
            Dictionary with the normalized system and machine names
        """
        profile = profile or PlatformProfile.current()
        return {
            "platform": profile.system,
            "arch": profile.machine,
        }
