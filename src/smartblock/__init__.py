"""SmartBlock Agent - local arduino-cli companion for the SmartBlock editor."""

__version__ = "0.1.0"
