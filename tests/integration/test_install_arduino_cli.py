"""
Integration test: download and run a real arduino-cli.

Requires network access. Run with `pytest --full`.
"""

import sys
from pathlib import Path

import pytest

from smartblock.config.settings import AgentConfig
from smartblock.packages.platform_utils import PlatformProfile, PlatformResolver, UnsupportedPlatformError
from smartblock.service import AgentService


def _host_supported() -> bool:
    try:
        PlatformResolver().resolve(PlatformProfile.current())
        return True
    except UnsupportedPlatformError:
        return False


@pytest.mark.integration
@pytest.mark.skipif(not _host_supported(), reason="arduino-cli has no build for this host")
class TestInstallArduinoCli:
    def test_install_and_version(self, tmp_path: Path):
        config = AgentConfig(install_root=tmp_path)
        service = AgentService(config)

        with pytest.MonkeyPatch.context() as mp:
            mp.setattr("shutil.which", lambda name: None)
            path = service.prepare()

        expected_name = "arduino-cli.exe" if sys.platform == "win32" else "arduino-cli"
        assert path.name == expected_name
        assert path.is_relative_to(tmp_path.resolve())
        assert "Version" in service.version()
