"""arduino-cli toolchain location and installation.

This module finds a usable arduino-cli executable, or downloads and installs
one at the canonical per-platform path.

Resolution order (first match wins):
    1. Explicit override path (``SMARTBLOCK_ARDUINO_CLI``), if it exists
    2. Canonical install path under the install root, if it exists
    3. ``arduino-cli`` on the system PATH
    4. Download, extract and install to the canonical path
       (skipped in search-only mode, where ToolchainNotFoundError is raised)

Installation is serialized by an in-process lock. Callers arriving while an
install is running wait for it and then reuse its result.
"""

import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Optional

from smartblock.errors import AgentError

from .archive_utils import extractor_for, find_binary
from .cache import Cache
from .downloader import PackageDownloader
from .platform_utils import PlatformProfile, PlatformResolver, PlatformTarget

# Executable name looked up on the system PATH
CLI_NAME = "arduino-cli"


class ToolchainError(AgentError):
    """Raised when toolchain operations fail."""

    pass


class ToolchainNotFoundError(ToolchainError):
    """Raised in search-only mode when no arduino-cli can be found."""

    status_code = 503


class ToolchainNotFoundInArchiveError(ToolchainError):
    """Raised when the downloaded archive has no arduino-cli executable."""

    pass


class Toolchain:
    """Locates or installs the arduino-cli executable."""

    def __init__(
        self,
        cache: Cache,
        resolver: Optional[PlatformResolver] = None,
        profile: Optional[PlatformProfile] = None,
        downloader: Optional[PackageDownloader] = None,
        cli_path: Optional[Path] = None,
        auto_install: bool = True,
        extract_timeout: Optional[float] = None,
    ):
        """Initialize toolchain manager.

        Args:
            cache: Install layout
            resolver: Platform resolver (default resolver if None)
            profile: Host profile (detected if None)
            downloader: Downloader used for installs
            cli_path: Explicit override path to an arduino-cli binary
            auto_install: Whether a missing toolchain is downloaded (False = search only)
            extract_timeout: Maximum seconds the archive helper may run
        """
        self.cache = cache
        self.resolver = resolver or PlatformResolver()
        self.profile = profile or PlatformProfile.current()
        self.downloader = downloader or PackageDownloader()
        self.cli_path = Path(cli_path).expanduser() if cli_path else None
        self.auto_install = auto_install
        self.extract_timeout = extract_timeout
        self._install_lock = threading.Lock()

    def get_target(self) -> PlatformTarget:
        """Resolve the distribution for the host.

        Raises:
            UnsupportedPlatformError: If the host is not supported
        """
        return self.resolver.resolve(self.profile)

    def find_existing(self, target: Optional[PlatformTarget] = None) -> Optional[Path]:
        """Search for an existing arduino-cli without installing anything.

        Returns:
            Path to the executable, or None if none is found
        """
        target = target or self.get_target()

        if self.cli_path is not None:
            if self.cli_path.exists():
                return self.cli_path
            logging.warning(f"Configured arduino-cli override not found: {self.cli_path}")

        canonical = self.cache.get_binary_path(target)
        if canonical.is_file():
            return canonical

        on_path = shutil.which(CLI_NAME)
        if on_path:
            return Path(on_path)

        return None

    def locate(self) -> Path:
        """Return a usable arduino-cli, installing it if allowed.

        Returns:
            Path to the arduino-cli executable

        Raises:
            UnsupportedPlatformError: If the host is not supported
            ToolchainNotFoundError: In search-only mode when nothing is found
            NetworkError: If the download fails
            ExtractionError: If the archive cannot be extracted
            ToolchainNotFoundInArchiveError: If the archive has no executable
        """
        target = self.get_target()

        existing = self.find_existing(target)
        if existing is not None:
            return existing

        if not self.auto_install:
            raise ToolchainNotFoundError(
                "arduino-cli not found. Install it and add it to PATH, "
                + "or set SMARTBLOCK_ARDUINO_CLI to its location."
            )

        with self._install_lock:
            # Another caller may have finished installing while we waited
            canonical = self.cache.get_binary_path(target)
            if canonical.is_file():
                return canonical
            return self._install(target)

    def _install(self, target: PlatformTarget) -> Path:
        """Download, extract and place arduino-cli at the canonical path."""
        binary_path = self.cache.get_binary_path(target)
        # Scratch must share a filesystem with binary_path for os.replace
        scratch_dir = self.cache.create_scratch_dir(target)
        partial_path = scratch_dir / (binary_path.name + ".partial")

        try:
            archive_path = scratch_dir / target.archive_name
            logging.info(f"Downloading arduino-cli from {target.url}")
            self.downloader.download(target.url, archive_path)

            extract_dir = scratch_dir / "extracted"
            logging.info(f"Extracting {archive_path.name}")
            extractor = extractor_for(
                target.archive_ext,
                windows=self.profile.is_windows,
                timeout=self.extract_timeout,
            )
            extractor.extract(archive_path, extract_dir)

            found = find_binary(extract_dir, target.binary_name)
            if found is None:
                raise ToolchainNotFoundInArchiveError(
                    f"{target.binary_name} not found inside {target.archive_name}"
                )

            shutil.copyfile(found, partial_path)
            if not self.profile.is_windows:
                partial_path.chmod(0o755)
            os.replace(partial_path, binary_path)

        finally:
            try:
                shutil.rmtree(scratch_dir)
            except OSError as e:
                logging.warning(f"Failed to remove install scratch dir {scratch_dir}: {e}")

        logging.info(f"arduino-cli installed at {binary_path}")
        return binary_path
