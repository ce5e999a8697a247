"""CLI utility functions for the SmartBlock agent.

This module provides error and success formatting shared by the CLI commands.
"""

import sys

from smartblock.build.cli_executor import ProcessError
from smartblock.errors import AgentError


class ErrorFormatter:
    """Formats and displays messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Compile failed")
            message: Error message details
        """
        print(file=sys.stderr)
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}", file=sys.stderr)
        print(file=sys.stderr)
        print(message, file=sys.stderr)
        print(file=sys.stderr)

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print(file=sys.stderr)
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def handle_agent_error(error: AgentError) -> None:
        """Print an agent failure and exit with status 1.

        For arduino-cli failures the captured output is shown instead of the
        summary line.
        """
        if isinstance(error, ProcessError):
            ErrorFormatter.print_error(error.message, error.diagnostic)
        else:
            ErrorFormatter.print_error(f"Error: {type(error).__name__}", error.message)
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        ErrorFormatter.print_warning("Interrupted")
        sys.exit(130)  # Standard exit code for SIGINT
