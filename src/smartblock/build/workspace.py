"""Ephemeral per-request build workspaces.

Each compile or upload request gets its own temporary directory tree:

    smartblock-XXXXXX/
    ├── sketch/
    │   └── sketch.ino      # the request's only source file
    └── out/                # compiled binaries (compile flows only)

The tree is removed when the request ends, whatever the outcome. Removal is
best-effort: a failure is logged and never replaces the request's own result.
"""

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

# arduino-cli requires the main .ino to match its directory name
SKETCH_NAME = "sketch"


@dataclass
class Workspace:
    """Directories of one request's workspace."""

    root_dir: Path
    sketch_dir: Path
    output_dir: Optional[Path] = None

    @property
    def sketch_file(self) -> Path:
        return self.sketch_dir / f"{SKETCH_NAME}.ino"

    def write_sketch(self, source: str) -> Path:
        """Write the sketch source, replacing any previous content."""
        self.sketch_file.write_text(source, encoding="utf-8")
        return self.sketch_file


class WorkspaceManager:
    """Creates and destroys temporary build workspaces."""

    def __init__(self, base_dir: Optional[Path] = None, prefix: str = "smartblock-"):
        """Initialize workspace manager.

        Args:
            base_dir: Parent directory for workspaces (system temp dir if None)
            prefix: Name prefix of each workspace root
        """
        self.base_dir = Path(base_dir) if base_dir else None
        self.prefix = prefix

    def create(self, with_output: bool = True) -> Workspace:
        """Allocate a fresh, uniquely named workspace.

        Args:
            with_output: Whether to create the ``out`` directory
        """
        if self.base_dir is not None:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        root_dir = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.base_dir))

        try:
            sketch_dir = root_dir / SKETCH_NAME
            sketch_dir.mkdir()
            output_dir = None
            if with_output:
                output_dir = root_dir / "out"
                output_dir.mkdir()
        except OSError:
            shutil.rmtree(root_dir, ignore_errors=True)
            raise

        return Workspace(root_dir=root_dir, sketch_dir=sketch_dir, output_dir=output_dir)

    def destroy(self, workspace: Workspace) -> None:
        """Recursively remove a workspace. Failures are logged, never raised."""
        try:
            shutil.rmtree(workspace.root_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            logging.warning(f"Failed to remove workspace {workspace.root_dir}: {e}")

    @contextmanager
    def session(self, with_output: bool = True) -> Iterator[Workspace]:
        """Context manager yielding a workspace that is destroyed on exit."""
        workspace = self.create(with_output=with_output)
        try:
            yield workspace
        finally:
            self.destroy(workspace)
