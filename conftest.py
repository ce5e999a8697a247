"""
Pytest configuration for the SmartBlock agent test suite.

Tests marked ``integration`` download arduino-cli and are deselected by the
default ``-m "not integration"`` in pyproject.toml. Pass --full to run them.
"""

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Also run integration tests (downloads arduino-cli)",
    )


def pytest_configure(config):
    if not config.getoption("--full"):
        return
    # Only drop our own default; an explicit -m from the command line wins
    if config.getoption("-m", "") == "not integration":
        config.option.markexpr = ""
