"""Unit tests for the workspace manager."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from smartblock.build.workspace import WorkspaceManager


class TestWorkspaceManager:
    """Test cases for WorkspaceManager."""

    def test_create_layout(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            manager = WorkspaceManager(base_dir=Path(temp_dir))
            workspace = manager.create()

            assert workspace.root_dir.parent == Path(temp_dir)
            assert workspace.root_dir.name.startswith("smartblock-")
            assert workspace.sketch_dir == workspace.root_dir / "sketch"
            assert workspace.sketch_dir.is_dir()
            assert workspace.output_dir == workspace.root_dir / "out"
            assert workspace.output_dir.is_dir()

    def test_create_without_output(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            workspace = WorkspaceManager(base_dir=Path(temp_dir)).create(with_output=False)
            assert workspace.output_dir is None
            assert not (workspace.root_dir / "out").exists()

    def test_unique_roots(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            manager = WorkspaceManager(base_dir=Path(temp_dir))
            assert manager.create().root_dir != manager.create().root_dir

    def test_write_sketch(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            workspace = WorkspaceManager(base_dir=Path(temp_dir)).create()
            path = workspace.write_sketch("void setup(){} void loop(){}")

            assert path == workspace.sketch_dir / "sketch.ino"
            assert path.read_text(encoding="utf-8") == "void setup(){} void loop(){}"
            assert list(workspace.sketch_dir.iterdir()) == [path]

    def test_destroy_removes_tree(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            manager = WorkspaceManager(base_dir=Path(temp_dir))
            workspace = manager.create()
            workspace.write_sketch("x")
            (workspace.output_dir / "sketch.ino.hex").write_bytes(b"\x01")

            manager.destroy(workspace)

            assert not workspace.root_dir.exists()

    def test_destroy_twice_is_quiet(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            manager = WorkspaceManager(base_dir=Path(temp_dir))
            workspace = manager.create()
            manager.destroy(workspace)
            manager.destroy(workspace)

    def test_destroy_failure_is_logged_not_raised(self, caplog):
        with tempfile.TemporaryDirectory() as temp_dir:
            manager = WorkspaceManager(base_dir=Path(temp_dir))
            workspace = manager.create()

            with patch("smartblock.build.workspace.shutil.rmtree", side_effect=PermissionError("busy")):
                manager.destroy(workspace)

            assert "Failed to remove workspace" in caplog.text

    def test_session_cleans_up_on_error(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            manager = WorkspaceManager(base_dir=Path(temp_dir))

            with pytest.raises(RuntimeError):
                with manager.session() as workspace:
                    root = workspace.root_dir
                    raise RuntimeError("compile failed")

            assert not root.exists()

    def test_session_cleanup_failure_does_not_mask_error(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            manager = WorkspaceManager(base_dir=Path(temp_dir))

            with patch("smartblock.build.workspace.shutil.rmtree", side_effect=OSError("locked")):
                with pytest.raises(RuntimeError, match="compile failed"):
                    with manager.session():
                        raise RuntimeError("compile failed")
