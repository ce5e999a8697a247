"""Agent service: the request pipelines behind every endpoint.

Each operation follows the same sequence:

    validate input -> locate/install arduino-cli -> stage workspace
        -> run arduino-cli -> extract artifact -> destroy workspace

The HTTP layer only parses requests and serializes results; everything else
happens here.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from smartblock.build.artifacts import BuildArtifact, find_artifact
from smartblock.build.cli_executor import ArduinoCli, ProcessResult
from smartblock.build.workspace import WorkspaceManager
from smartblock.config.settings import AgentConfig
from smartblock.errors import ClientError
from smartblock.packages.cache import Cache
from smartblock.packages.downloader import PackageDownloader
from smartblock.packages.platform_utils import PlatformProfile, PlatformResolver
from smartblock.packages.toolchain import Toolchain

AGENT_NAME = "smartblock"


class MissingRequiredFieldError(ClientError):
    """Raised when a request lacks a required field."""

    def __init__(self, *fields: str):
        super().__init__(f"missing {'/'.join(fields)}")
        self.fields = fields


@dataclass
class CompileResult:
    """Outcome of a compile request."""

    artifact: BuildArtifact
    stdout: str

    @property
    def format(self) -> str:
        return self.artifact.format.value


@dataclass
class UploadResult:
    """Outcome of a compile-and-upload request."""

    compile_stdout: str
    upload_stdout: str


def _require(**fields: Any) -> None:
    missing = [name for name, value in fields.items() if not value or not isinstance(value, str)]
    if missing:
        raise MissingRequiredFieldError(*missing)


class AgentService:
    """Orchestrates toolchain location, workspaces and arduino-cli runs."""

    def __init__(
        self,
        config: AgentConfig,
        toolchain: Optional[Toolchain] = None,
        workspaces: Optional[WorkspaceManager] = None,
        cli_factory: Optional[Callable[[Path], ArduinoCli]] = None,
        profile: Optional[PlatformProfile] = None,
    ):
        """Initialize the service.

        Args:
            config: Agent configuration
            toolchain: Toolchain manager (built from config if None)
            workspaces: Workspace manager (system temp dir if None)
            cli_factory: Builds an executor for a located binary
            profile: Host profile (detected if None)
        """
        self.config = config
        self.profile = profile or PlatformProfile.current()
        self.toolchain = toolchain or Toolchain(
            cache=Cache(config.install_root),
            resolver=PlatformResolver(),
            profile=self.profile,
            downloader=PackageDownloader(timeout=config.download_timeout),
            cli_path=config.cli_path,
            auto_install=config.auto_install,
            extract_timeout=config.process_timeout,
        )
        self.workspaces = workspaces or WorkspaceManager()
        self.cli_factory = cli_factory or (
            lambda path: ArduinoCli(path, timeout=config.process_timeout)
        )

    def _cli(self) -> ArduinoCli:
        return self.cli_factory(self.toolchain.locate())

    def health(self) -> Dict[str, Any]:
        """Platform facts, without side effects."""
        info = {"ok": True, "agent": AGENT_NAME, "port": self.config.port}
        info.update(PlatformResolver.get_platform_info(self.profile))
        return info

    def prepare(self) -> Path:
        """Locate arduino-cli, installing it if needed."""
        return self.toolchain.locate()

    def version(self) -> str:
        return self._cli().version()

    def initialize(self) -> None:
        """Write the arduino-cli config and refresh the package index."""
        cli = self._cli()
        cli.init_config()
        cli.update_index()

    def install_core(self, core: Optional[str]) -> ProcessResult:
        _require(core=core)
        return self._cli().install_core(core)

    def list_boards(self) -> Any:
        return self._cli().list_boards()

    def compile(self, ino: Optional[str], fqbn: Optional[str]) -> CompileResult:
        """Compile a sketch and return its firmware.

        Raises:
            MissingRequiredFieldError: If ``ino`` or ``fqbn`` is missing
            ProcessError: If arduino-cli fails
            ArtifactNotFoundError: If no .hex/.bin was produced
        """
        _require(ino=ino, fqbn=fqbn)
        cli = self._cli()

        with self.workspaces.session(with_output=True) as workspace:
            workspace.write_sketch(ino)
            result = cli.compile(fqbn, workspace.sketch_dir, output_dir=workspace.output_dir)
            artifact = find_artifact(workspace.output_dir)
            logging.info(
                f"Compiled {fqbn}: {artifact.file_path.name} ({len(artifact.data)} bytes)"
            )
            return CompileResult(artifact=artifact, stdout=result.stdout)

    def compile_and_upload(
        self, ino: Optional[str], fqbn: Optional[str], port: Optional[str]
    ) -> UploadResult:
        """Compile a sketch and upload it to the board on ``port``.

        Raises:
            MissingRequiredFieldError: If ``ino``, ``fqbn`` or ``port`` is missing
            ProcessError: If compile or upload fails
        """
        _require(ino=ino, fqbn=fqbn, port=port)
        cli = self._cli()

        with self.workspaces.session(with_output=True) as workspace:
            workspace.write_sketch(ino)
            compiled = cli.compile(fqbn, workspace.sketch_dir, output_dir=workspace.output_dir)
            uploaded = cli.upload(
                port, fqbn, workspace.sketch_dir, input_dir=workspace.output_dir
            )
            logging.info(f"Uploaded {fqbn} to {port}")
            return UploadResult(compile_stdout=compiled.stdout, upload_stdout=uploaded.stdout)
