"""
Command-line interface for the SmartBlock agent.

This module provides the `smartblock-agent` tool: `serve` runs the local HTTP
agent, the other commands run single operations from a terminal.
"""

import argparse
import dataclasses
import json
import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from smartblock import __version__
from smartblock.cli_utils import ErrorFormatter
from smartblock.config.settings import AgentConfig
from smartblock.errors import AgentError
from smartblock.logging_setup import setup_logging
from smartblock.packages.cache import Cache
from smartblock.service import AgentService


@dataclass
class CompileArgs:
    """Arguments for the compile command."""

    sketch: Path
    fqbn: str
    output: Optional[Path] = None


def build_config(parsed_args: argparse.Namespace) -> AgentConfig:
    """Environment config with command-line overrides applied."""
    config = AgentConfig.from_env()
    overrides = {}
    if getattr(parsed_args, "host", None):
        overrides["host"] = parsed_args.host
    if getattr(parsed_args, "port", None):
        overrides["port"] = parsed_args.port
    if parsed_args.cli_path:
        overrides["cli_path"] = parsed_args.cli_path
    if parsed_args.no_auto_install:
        overrides["auto_install"] = False
    if getattr(parsed_args, "no_prepare", False):
        overrides["prepare_on_start"] = False
    return dataclasses.replace(config, **overrides)


def _prepare_in_background(service: AgentService) -> threading.Thread:
    """Locate/install arduino-cli without blocking server startup."""

    def prepare() -> None:
        try:
            path = service.prepare()
            logging.info(f"arduino-cli ready at {path}")
        except AgentError as e:
            logging.error(f"arduino-cli preparation failed at startup: {e.message}")

    thread = threading.Thread(target=prepare, name="smartblock-prepare", daemon=True)
    thread.start()
    return thread


def serve_command(config: AgentConfig) -> None:
    """Run the HTTP agent in the foreground.

    Examples:
        smartblock-agent serve                 # Listen on 127.0.0.1:5055
        smartblock-agent serve --port 6000     # Custom port
        smartblock-agent serve --no-auto-install
    """
    from smartblock.web import create_app

    setup_logging(Cache(config.install_root).logs_dir, foreground=True)

    service = AgentService(config)
    app = create_app(config, service)

    logging.info(f"SmartBlock Agent v{__version__} on http://{config.host}:{config.port}")
    if config.prepare_on_start:
        _prepare_in_background(service)

    app.run(host=config.host, port=config.port, threaded=True)


def locate_command(config: AgentConfig) -> None:
    path = AgentService(config).prepare()
    print(path)


def version_command(config: AgentConfig) -> None:
    print(AgentService(config).version())


def boards_command(config: AgentConfig) -> None:
    print(json.dumps(AgentService(config).list_boards(), indent=2))


def compile_command(config: AgentConfig, args: CompileArgs) -> None:
    """Compile a sketch file and write the firmware next to it (or to --output).

    Examples:
        smartblock-agent compile blink.ino --fqbn arduino:avr:uno
        smartblock-agent compile blink.ino --fqbn arduino:avr:uno -o blink.hex
    """
    ino = args.sketch.read_text(encoding="utf-8")
    result = AgentService(config).compile(ino, args.fqbn)

    output = args.output or args.sketch.with_suffix(f".{result.format}")
    output.write_bytes(result.artifact.data)

    if result.stdout:
        print(result.stdout)
    ErrorFormatter.print_success(f"Firmware written to {output} ({result.format})")


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cli-path",
        type=Path,
        default=None,
        help="Use this arduino-cli binary instead of searching (SMARTBLOCK_ARDUINO_CLI)",
    )
    parser.add_argument(
        "--no-auto-install",
        action="store_true",
        help="Only search for arduino-cli, never download it",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartblock-agent",
        description="Local arduino-cli companion for the SmartBlock editor",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the local HTTP agent")
    serve_parser.add_argument("--host", default=None, help="Listen address (default: 127.0.0.1)")
    serve_parser.add_argument("-p", "--port", type=int, default=None, help="Listen port (default: 5055)")
    serve_parser.add_argument(
        "--no-prepare",
        action="store_true",
        help="Don't locate/install arduino-cli at startup",
    )
    _add_common_options(serve_parser)

    locate_parser = subparsers.add_parser("locate", help="Print the arduino-cli path, installing it if needed")
    _add_common_options(locate_parser)

    version_parser = subparsers.add_parser("version", help="Print the arduino-cli version")
    _add_common_options(version_parser)

    boards_parser = subparsers.add_parser("boards", help="List connected boards as JSON")
    _add_common_options(boards_parser)

    # Compile command
    compile_parser = subparsers.add_parser("compile", help="Compile a sketch file")
    compile_parser.add_argument("sketch", type=Path, help="Path to the .ino file")
    compile_parser.add_argument("--fqbn", required=True, help="Fully qualified board name (e.g. arduino:avr:uno)")
    compile_parser.add_argument("-o", "--output", type=Path, default=None, help="Firmware output file")
    _add_common_options(compile_parser)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    try:
        config = build_config(parsed_args)

        if parsed_args.command == "serve":
            serve_command(config)
        elif parsed_args.command == "locate":
            locate_command(config)
        elif parsed_args.command == "version":
            version_command(config)
        elif parsed_args.command == "boards":
            boards_command(config)
        elif parsed_args.command == "compile":
            compile_args = CompileArgs(
                sketch=parsed_args.sketch,
                fqbn=parsed_args.fqbn,
                output=parsed_args.output,
            )
            compile_command(config, compile_args)

    except AgentError as e:
        ErrorFormatter.handle_agent_error(e)
    except FileNotFoundError as e:
        ErrorFormatter.print_error("Error: File not found", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()


if __name__ == "__main__":
    main()
