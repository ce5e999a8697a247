"""Unit tests for the arduino-cli executor."""

import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest

from smartblock.build.cli_executor import ArduinoCli, ProcessError, ProcessResult


def ok(stdout="", stderr=""):
    return ProcessResult(stdout=stdout, stderr=stderr, returncode=0)


class TestRun:
    """Real subprocess runs, using the Python interpreter as the binary."""

    def test_success_captures_output(self):
        cli = ArduinoCli(Path(sys.executable))
        result = cli.run(["-c", "import sys; print('out'); print('err', file=sys.stderr)"])

        assert result.returncode == 0
        assert result.stdout.strip() == "out"
        assert result.stderr.strip() == "err"

    def test_nonzero_exit_raises_with_output(self):
        cli = ArduinoCli(Path(sys.executable))
        with pytest.raises(ProcessError) as exc_info:
            cli.run(["-c", "import sys; print('partial'); sys.stderr.write('boom'); sys.exit(3)"])

        error = exc_info.value
        assert error.returncode == 3
        assert error.stdout.strip() == "partial"
        assert error.stderr == "boom"
        assert error.diagnostic == "boom"

    def test_arguments_not_shell_interpreted(self):
        cli = ArduinoCli(Path(sys.executable))
        hostile = "arduino:avr:uno; echo pwned"
        result = cli.run(["-c", "import sys; print(sys.argv[1])", hostile])
        assert result.stdout.strip() == hostile

    def test_cwd(self, tmp_path):
        cli = ArduinoCli(Path(sys.executable))
        result = cli.run(["-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_missing_binary(self, tmp_path):
        cli = ArduinoCli(tmp_path / "arduino-cli")
        with pytest.raises(ProcessError, match="Failed to start") as exc_info:
            cli.run(["version"])
        assert exc_info.value.returncode == -1

    def test_timeout_kills_process(self):
        proc = MagicMock()
        proc.pid = 4242
        proc.communicate.side_effect = [subprocess.TimeoutExpired("arduino-cli", 1), ("", "")]
        cli = ArduinoCli(Path("arduino-cli"), timeout=1)

        with patch("subprocess.Popen", return_value=proc):
            with patch("smartblock.build.cli_executor.kill_process_tree") as kill:
                with pytest.raises(ProcessError, match="timed out"):
                    cli.run(["compile"])

        kill.assert_called_once_with(4242)


class TestDiagnostic:
    def test_prefers_stderr_then_stdout_then_message(self):
        assert ProcessError("m", stdout="o", stderr="e").diagnostic == "e"
        assert ProcessError("m", stdout="o", stderr="  ").diagnostic == "o"
        assert ProcessError("m").diagnostic == "m"


class TestCommands:
    """Argument lists for each arduino-cli command shape."""

    @pytest.fixture
    def cli(self):
        cli = ArduinoCli(Path("/opt/arduino-cli"))
        cli.run = Mock(return_value=ok())
        return cli

    def test_version(self, cli):
        cli.run.return_value = ok("arduino-cli  Version: 1.1.1\n")
        assert cli.version() == "arduino-cli  Version: 1.1.1"
        cli.run.assert_called_once_with(["version"])

    def test_init_config(self, cli):
        cli.init_config()
        cli.run.assert_called_once_with(["config", "init", "--overwrite"])

    def test_update_index(self, cli):
        cli.update_index()
        cli.run.assert_called_once_with(["core", "update-index"])

    def test_install_core(self, cli):
        cli.install_core("arduino:avr")
        cli.run.assert_called_once_with(["core", "install", "arduino:avr"])

    def test_list_boards_parses_json(self, cli):
        cli.run.return_value = ok('{"detected_ports": [{"port": {"address": "/dev/ttyACM0"}}]}')
        boards = cli.list_boards()
        assert boards["detected_ports"][0]["port"]["address"] == "/dev/ttyACM0"
        cli.run.assert_called_once_with(["board", "list", "--format", "json"])

    def test_list_boards_invalid_json(self, cli):
        cli.run.return_value = ok("not json")
        with pytest.raises(ProcessError, match="invalid JSON"):
            cli.list_boards()

    def test_compile_with_output_dir(self, cli):
        sketch = Path("/tmp/ws/sketch")
        out = Path("/tmp/ws/out")
        cli.compile("arduino:avr:uno", sketch, output_dir=out)
        cli.run.assert_called_once_with(
            ["compile", "--fqbn", "arduino:avr:uno", "--output-dir", str(out), str(sketch)],
            cwd=sketch,
        )

    def test_compile_without_output_dir(self, cli):
        sketch = Path("/tmp/ws/sketch")
        cli.compile("arduino:avr:uno", sketch)
        cli.run.assert_called_once_with(["compile", "--fqbn", "arduino:avr:uno", str(sketch)], cwd=sketch)

    def test_upload(self, cli):
        sketch = Path("/tmp/ws/sketch")
        out = Path("/tmp/ws/out")
        cli.upload("/dev/ttyACM0", "arduino:avr:uno", sketch, input_dir=out)
        cli.run.assert_called_once_with(
            [
                "upload",
                "-p",
                "/dev/ttyACM0",
                "--fqbn",
                "arduino:avr:uno",
                "--input-dir",
                str(out),
                str(sketch),
            ],
            cwd=sketch,
        )
