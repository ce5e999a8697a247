"""Install directory layout for the SmartBlock agent.

Everything the agent persists lives under one per-user root, separate from
the temporary directories used per request.

Layout:
    ~/.smartblock/
    ├── arduino-cli/
    │   └── {platform_tag}/         # e.g. Linux_64bit, Windows_64bit
    │       ├── arduino-cli[.exe]   # canonical install path
    │       └── _tmp-*/             # per-install download + extraction scratch, removed after install
    └── logs/
        └── agent.log
"""

import tempfile
from pathlib import Path
from typing import Optional

from .platform_utils import PlatformTarget

# Name prefix of per-install scratch directories
SCRATCH_PREFIX = "_tmp-"


class Cache:
    """Manages the agent's persistent directory structure.

    The root defaults to ``~/.smartblock`` and can be moved through the
    ``install_root`` setting (``SMARTBLOCK_HOME``).
    """

    def __init__(self, install_root: Optional[Path] = None):
        """Initialize the layout.

        Args:
            install_root: Root directory. If None, uses ~/.smartblock.
        """
        if install_root is None:
            install_root = Path.home() / ".smartblock"

        self.install_root = Path(install_root).expanduser().resolve()

    @property
    def toolchains_dir(self) -> Path:
        """Directory holding one arduino-cli install per platform tag."""
        return self.install_root / "arduino-cli"

    @property
    def logs_dir(self) -> Path:
        """Directory for the rotating agent log."""
        return self.install_root / "logs"

    def get_toolchain_dir(self, target: PlatformTarget) -> Path:
        """Get the install directory for a platform's distribution."""
        return self.toolchains_dir / target.tag

    def get_binary_path(self, target: PlatformTarget) -> Path:
        """Get the canonical install path of the arduino-cli executable."""
        return self.get_toolchain_dir(target) / target.binary_name

    def create_scratch_dir(self, target: PlatformTarget) -> Path:
        """Create a fresh download/extraction scratch directory for one install.

        Each call gets its own directory, so installs running in separate
        processes against the same root never share scratch space.
        """
        toolchain_dir = self.get_toolchain_dir(target)
        toolchain_dir.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=toolchain_dir))
