"""
Configuration for the RSSHub MCP server.

Settings come from an optional YAML file, then a .env file, then
environment variables prefixed with RSSHUB_MCP_ (highest priority).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "RSSHUB_MCP_"
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "rsshub-mcp.yaml"

DEFAULT_HOST = "https://rsshub.app"
DEFAULT_TIMEOUT = 120.0
DEFAULT_SERVER_ADDR = "127.0.0.1:8000"
TRANSPORTS = ("stdio", "streamable-http")


@dataclass(frozen=True)
class RSSHubSettings:
    """Connection settings handed to the RSSHub client."""

    host: str = DEFAULT_HOST
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class Config:
    """Full server configuration."""

    rsshub: RSSHubSettings = field(default_factory=RSSHubSettings)
    transport: str = "stdio"
    server_addr: str = DEFAULT_SERVER_ADDR
    log_level: str = "INFO"

    @property
    def server_host(self) -> str:
        return split_addr(self.server_addr)[0]

    @property
    def server_port(self) -> int:
        return split_addr(self.server_addr)[1]


def split_addr(addr: str) -> tuple[str, int]:
    """Split "host:port" into its parts."""
    host, sep, port = addr.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid server address '{addr}', expected host:port")
    return host, int(port)


def load_config_file(path: Optional[Path]) -> dict:
    """
    Load settings from a YAML config file.

    An explicit path must exist. Without one, the default
    config/rsshub-mcp.yaml is used if present.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        yaml.YAMLError: If the config file is malformed.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return {}
        path = DEFAULT_CONFIG_PATH
    elif not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    logger.debug(f"Loaded config from {path}")
    return data


def load_config(path: Optional[Path] = None) -> Config:
    """
    Build the server configuration.

    Args:
        path: Optional YAML config file.

    Returns:
        Validated Config.

    Raises:
        ValueError: On an invalid timeout, transport or server address.
    """
    load_dotenv()
    data = load_config_file(Path(path) if path is not None else None)

    def setting(key: str, default):
        return os.getenv(ENV_PREFIX + key.upper(), data.get(key, default))

    host = str(setting("rsshub_host", DEFAULT_HOST)).rstrip("/")
    raw_timeout = setting("timeout", DEFAULT_TIMEOUT)
    try:
        timeout = float(raw_timeout)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid timeout: {raw_timeout!r}")
    if timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")

    transport = str(setting("transport", "stdio"))
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown transport '{transport}', expected one of {TRANSPORTS}")

    server_addr = str(setting("server_addr", DEFAULT_SERVER_ADDR))
    split_addr(server_addr)

    log_level = os.getenv("LOG_LEVEL", data.get("log_level", "INFO")).upper()

    return Config(
        rsshub=RSSHubSettings(host=host, timeout=timeout),
        transport=transport,
        server_addr=server_addr,
        log_level=log_level,
    )
