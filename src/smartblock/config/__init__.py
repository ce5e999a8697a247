"""Configuration for the SmartBlock agent."""

from .settings import DEFAULT_ALLOWED_ORIGINS, DEFAULT_PORT, AgentConfig, ConfigError

__all__ = [
    "AgentConfig",
    "ConfigError",
    "DEFAULT_ALLOWED_ORIGINS",
    "DEFAULT_PORT",
]
