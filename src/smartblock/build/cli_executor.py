"""arduino-cli Executor.

This module runs arduino-cli as a subprocess and maps its outcome onto a
ProcessResult or a ProcessError.

Design:
    - Arguments are always passed as a list, never through a shell, so sketch
      content, board names and port names cannot inject commands
    - stdout and stderr are captured as text
    - A timeout terminates the whole process tree (arduino-cli spawns
      compilers and uploaders of its own)
"""

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import psutil

from smartblock.errors import AgentError


@dataclass
class ProcessResult:
    """Captured outcome of one arduino-cli invocation."""

    stdout: str
    stderr: str
    returncode: int


class ProcessError(AgentError):
    """Raised when arduino-cli exits non-zero, times out, or cannot start.

    Attributes:
        stdout: Captured standard output
        stderr: Captured standard error
        returncode: Exit status (-1 if the process never ran to completion)
    """

    def __init__(self, message: str, stdout: str = "", stderr: str = "", returncode: int = -1):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode

    @property
    def diagnostic(self) -> str:
        """Most useful text for the caller: stderr, then stdout, then the message."""
        return self.stderr.strip() or self.stdout.strip() or self.message


def kill_process_tree(pid: int) -> None:
    """Terminate a process and all of its children, force killing stragglers."""
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return

    procs = parent.children(recursive=True) + [parent]
    for proc in procs:
        try:
            proc.terminate()
        except psutil.NoSuchProcess:
            pass

    _, alive = psutil.wait_procs(procs, timeout=3)
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass


class ArduinoCli:
    """Runs arduino-cli subcommands against one executable."""

    def __init__(self, binary_path: Path, timeout: Optional[float] = None):
        """Initialize executor.

        Args:
            binary_path: Path to the arduino-cli executable
            timeout: Maximum seconds a single invocation may run (None = unbounded)
        """
        self.binary_path = Path(binary_path)
        self.timeout = timeout

    def run(self, args: List[str], cwd: Optional[Path] = None) -> ProcessResult:
        """Run ``arduino-cli <args>``.

        Args:
            args: Argument list passed to arduino-cli
            cwd: Working directory for the process

        Returns:
            ProcessResult of a successful (exit 0) run

        Raises:
            ProcessError: If the process fails to start, times out or exits non-zero
        """
        cmd = [str(self.binary_path), *args]
        logging.info(f"Running: {' '.join(cmd)}")

        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise ProcessError(f"Failed to start {self.binary_path}: {e}")

        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            kill_process_tree(proc.pid)
            stdout, stderr = proc.communicate()
            raise ProcessError(
                f"arduino-cli {args[0] if args else ''} timed out after {self.timeout}s",
                stdout=stdout or "",
                stderr=stderr or "",
            )

        if proc.returncode != 0:
            raise ProcessError(
                f"arduino-cli {' '.join(args)} failed with exit code {proc.returncode}",
                stdout=stdout,
                stderr=stderr,
                returncode=proc.returncode,
            )

        return ProcessResult(stdout=stdout, stderr=stderr, returncode=proc.returncode)

    def version(self) -> str:
        """Return the version string reported by arduino-cli."""
        return self.run(["version"]).stdout.strip()

    def init_config(self) -> ProcessResult:
        """Write a fresh arduino-cli configuration file."""
        return self.run(["config", "init", "--overwrite"])

    def update_index(self) -> ProcessResult:
        """Refresh the package index."""
        return self.run(["core", "update-index"])

    def install_core(self, core: str) -> ProcessResult:
        """Install a board core by name (e.g. 'arduino:avr')."""
        return self.run(["core", "install", core])

    def list_boards(self) -> Any:
        """Return the connected board list parsed from arduino-cli's JSON output."""
        result = self.run(["board", "list", "--format", "json"])
        try:
            return json.loads(result.stdout or "null")
        except json.JSONDecodeError as e:
            raise ProcessError(
                f"arduino-cli board list returned invalid JSON: {e}",
                stdout=result.stdout,
                stderr=result.stderr,
                returncode=result.returncode,
            )

    def compile(self, fqbn: str, sketch_dir: Path, output_dir: Optional[Path] = None) -> ProcessResult:
        """Compile a sketch directory for a board.

        Args:
            fqbn: Fully qualified board name, passed through unmodified
            sketch_dir: Directory holding the sketch
            output_dir: Where to export the compiled binaries (optional)
        """
        args = ["compile", "--fqbn", fqbn]
        if output_dir is not None:
            args.extend(["--output-dir", str(output_dir)])
        args.append(str(sketch_dir))
        return self.run(args, cwd=sketch_dir)

    def upload(
        self,
        port: str,
        fqbn: str,
        sketch_dir: Path,
        input_dir: Optional[Path] = None,
    ) -> ProcessResult:
        """Upload a compiled sketch to a board.

        Args:
            port: Serial port of the board
            fqbn: Fully qualified board name
            sketch_dir: Directory holding the sketch
            input_dir: Directory with binaries from a previous compile (optional)
        """
        args = ["upload", "-p", port, "--fqbn", fqbn]
        if input_dir is not None:
            args.extend(["--input-dir", str(input_dir)])
        args.append(str(sketch_dir))
        return self.run(args, cwd=sketch_dir)
