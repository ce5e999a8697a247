"""Build pipeline pieces for SmartBlock.

This package stages per-request workspaces, drives arduino-cli and extracts
the compiled firmware.
"""

from .artifacts import ArtifactFormat, ArtifactNotFoundError, BuildArtifact, find_artifact
from .cli_executor import ArduinoCli, ProcessError, ProcessResult
from .workspace import Workspace, WorkspaceManager

__all__ = [
    "ArduinoCli",
    "ProcessError",
    "ProcessResult",
    "ArtifactFormat",
    "ArtifactNotFoundError",
    "BuildArtifact",
    "find_artifact",
    "Workspace",
    "WorkspaceManager",
]
