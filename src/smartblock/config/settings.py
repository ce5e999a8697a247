"""Agent configuration.

AgentConfig is built once at startup, from the environment and CLI flags,
and passed explicitly to every component that needs it.

Environment variables:
    SMARTBLOCK_HOST                 Listen address (default 127.0.0.1)
    SMARTBLOCK_PORT                 Listen port (default 5055)
    SMARTBLOCK_ARDUINO_CLI          Explicit path to an arduino-cli binary
    SMARTBLOCK_HOME                 Install root (default ~/.smartblock)
    SMARTBLOCK_AUTO_INSTALL         Download arduino-cli when missing (default true)
    SMARTBLOCK_ALLOWED_ORIGINS      Extra CORS origins, comma separated
    SMARTBLOCK_DOWNLOAD_TIMEOUT     Per-request download timeout in seconds
    SMARTBLOCK_PROCESS_TIMEOUT      Per-invocation arduino-cli timeout in seconds
    SMARTBLOCK_PREPARE_ON_START     Locate/install arduino-cli when the server starts
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from smartblock.errors import AgentError

DEFAULT_PORT = 5055

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
    "https://smartblock.vercel.app",
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(AgentError):
    """Raised when a configuration value cannot be parsed."""

    pass


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_number(name: str, raw: str, kind: type) -> float:
    try:
        value = kind(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class AgentConfig:
    """Settings for one agent process."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    cli_path: Optional[Path] = None
    install_root: Path = field(default_factory=lambda: Path.home() / ".smartblock")
    auto_install: bool = True
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    download_timeout: float = 60.0
    process_timeout: float = 600.0
    prepare_on_start: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read (os.environ if None)

        Raises:
            ConfigError: If a value is malformed
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        if env.get("SMARTBLOCK_HOST"):
            kwargs["host"] = env["SMARTBLOCK_HOST"].strip()
        if env.get("SMARTBLOCK_PORT"):
            kwargs["port"] = int(_parse_number("SMARTBLOCK_PORT", env["SMARTBLOCK_PORT"], int))
        if env.get("SMARTBLOCK_ARDUINO_CLI"):
            kwargs["cli_path"] = Path(env["SMARTBLOCK_ARDUINO_CLI"]).expanduser()
        if env.get("SMARTBLOCK_HOME"):
            kwargs["install_root"] = Path(env["SMARTBLOCK_HOME"]).expanduser()
        if env.get("SMARTBLOCK_AUTO_INSTALL"):
            kwargs["auto_install"] = _parse_bool("SMARTBLOCK_AUTO_INSTALL", env["SMARTBLOCK_AUTO_INSTALL"])
        if env.get("SMARTBLOCK_PREPARE_ON_START"):
            kwargs["prepare_on_start"] = _parse_bool(
                "SMARTBLOCK_PREPARE_ON_START", env["SMARTBLOCK_PREPARE_ON_START"]
            )
        if env.get("SMARTBLOCK_DOWNLOAD_TIMEOUT"):
            kwargs["download_timeout"] = _parse_number(
                "SMARTBLOCK_DOWNLOAD_TIMEOUT", env["SMARTBLOCK_DOWNLOAD_TIMEOUT"], float
            )
        if env.get("SMARTBLOCK_PROCESS_TIMEOUT"):
            kwargs["process_timeout"] = _parse_number(
                "SMARTBLOCK_PROCESS_TIMEOUT", env["SMARTBLOCK_PROCESS_TIMEOUT"], float
            )

        extra = [o.strip() for o in env.get("SMARTBLOCK_ALLOWED_ORIGINS", "").split(",") if o.strip()]
        if extra:
            origins = list(DEFAULT_ALLOWED_ORIGINS)
            origins.extend(o for o in extra if o not in origins)
            kwargs["allowed_origins"] = tuple(origins)

        return cls(**kwargs)

    def is_origin_allowed(self, origin: Optional[str]) -> bool:
        """Requests without an Origin header (curl, scripts) are always allowed."""
        if not origin:
            return True
        return origin in self.allowed_origins
