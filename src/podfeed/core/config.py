"""Configuration management for podfeed.

Handles TOML configuration loading from local and global paths,
with environment variable precedence for secrets and deployment values.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from podfeed.core.errors import ConfigError

# Configuration file paths
LOCAL_CONFIG_PATH = Path(".podfeed/config")
GLOBAL_CONFIG_PATH = Path.home() / ".podfeed" / "config"

PODCASTINDEX_BASE_URL = "https://api.podcastindex.org/api/1.0"
DEFAULT_FEED_USER_AGENT = "PodsBot/1.0 (+https://pods.example.com)"
DEFAULT_FEED_ACCEPT = "application/rss+xml, application/xml;q=0.9, */*;q=0.8"
DEFAULT_DIRECTORY_USER_AGENT = "PodsAPI/1.0"

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",
        "port": 4000,
        "cors_origins": ["*"],
    },
    "feeds": {
        "timeout": 9.0,
        "user_agent": DEFAULT_FEED_USER_AGENT,
        "accept": DEFAULT_FEED_ACCEPT,
        "cache_control_max_age": 60,
    },
    "cache": {
        "ttl": 90.0,
        "sweep_interval": 120.0,
    },
    "directory": {
        "base_url": PODCASTINDEX_BASE_URL,
        "api_key": "",
        "api_secret": "",
        "timeout": 8.0,
        "user_agent": DEFAULT_DIRECTORY_USER_AGENT,
    },
}


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 4000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class FeedsConfig:
    """RSS feed retrieval settings."""

    timeout: float = 9.0
    user_agent: str = DEFAULT_FEED_USER_AGENT
    accept: str = DEFAULT_FEED_ACCEPT
    cache_control_max_age: int = 60


@dataclass
class CacheConfig:
    """In-process response cache settings."""

    ttl: float = 90.0
    sweep_interval: float = 120.0


@dataclass
class DirectoryConfig:
    """Podcast Index API settings."""

    base_url: str = PODCASTINDEX_BASE_URL
    api_key: str = ""
    api_secret: str = ""
    timeout: float = 8.0
    user_agent: str = DEFAULT_DIRECTORY_USER_AGENT

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret)


@dataclass
class Config:
    """Main configuration container.

    Holds all configuration settings for podfeed, loaded from
    local and global config files with environment variable overrides.
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    feeds: FeedsConfig = field(default_factory=FeedsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load and parse a TOML configuration file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed configuration dictionary, empty if the file does not exist.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    if not path.exists():
        return {}

    try:
        content = path.read_text()
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in config file {path}: {e}") from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config_dict: dict[str, Any], env: dict[str, str]) -> dict[str, Any]:
    """Overlay environment variables on top of file configuration.

    PODCASTINDEX_API_KEY / PODCASTINDEX_API_SECRET are trimmed, as upstream
    keys are frequently pasted with trailing whitespace.
    """
    overrides: dict[str, Any] = {"server": {}, "directory": {}}

    api_key = env.get("PODCASTINDEX_API_KEY", "").strip()
    if api_key:
        overrides["directory"]["api_key"] = api_key
    api_secret = env.get("PODCASTINDEX_API_SECRET", "").strip()
    if api_secret:
        overrides["directory"]["api_secret"] = api_secret

    host = env.get("HOST", "").strip()
    if host:
        overrides["server"]["host"] = host
    port = env.get("PORT", "").strip()
    if port:
        try:
            overrides["server"]["port"] = int(port)
        except ValueError as e:
            raise ConfigError(f"PORT must be an integer, got {port!r}") from e

    return _deep_merge(config_dict, overrides)


def _require_positive(section: str, key: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{section}.{key} must be a number, got {type(value).__name__}")
    if value <= 0:
        raise ConfigError(f"{section}.{key} must be positive, got {value}")


def _validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If configuration values are invalid.
    """
    server = config_dict.get("server", {})
    port = server.get("port")
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigError(f"server.port must be an integer between 1 and 65535, got {port!r}")
    origins = server.get("cors_origins")
    if not isinstance(origins, list) or not all(isinstance(o, str) for o in origins):
        raise ConfigError("server.cors_origins must be a list of strings")

    feeds = config_dict.get("feeds", {})
    _require_positive("feeds", "timeout", feeds.get("timeout"))
    _require_positive("feeds", "cache_control_max_age", feeds.get("cache_control_max_age"))

    cache = config_dict.get("cache", {})
    _require_positive("cache", "ttl", cache.get("ttl"))
    _require_positive("cache", "sweep_interval", cache.get("sweep_interval"))

    directory = config_dict.get("directory", {})
    _require_positive("directory", "timeout", directory.get("timeout"))

    for section, keys in (
        ("server", ["host"]),
        ("feeds", ["user_agent", "accept"]),
        ("directory", ["base_url", "api_key", "api_secret", "user_agent"]),
    ):
        for key in keys:
            value = config_dict.get(section, {}).get(key)
            if not isinstance(value, str):
                raise ConfigError(
                    f"{section}.{key} must be a string, got {type(value).__name__}"
                )


def _dict_to_config(config_dict: dict[str, Any]) -> Config:
    """Convert configuration dictionary to Config dataclass."""
    server = config_dict["server"]
    feeds = config_dict["feeds"]
    cache = config_dict["cache"]
    directory = config_dict["directory"]

    return Config(
        server=ServerConfig(
            host=server["host"],
            port=server["port"],
            cors_origins=list(server["cors_origins"]),
        ),
        feeds=FeedsConfig(
            timeout=float(feeds["timeout"]),
            user_agent=feeds["user_agent"],
            accept=feeds["accept"],
            cache_control_max_age=int(feeds["cache_control_max_age"]),
        ),
        cache=CacheConfig(
            ttl=float(cache["ttl"]),
            sweep_interval=float(cache["sweep_interval"]),
        ),
        directory=DirectoryConfig(
            base_url=directory["base_url"].rstrip("/"),
            api_key=directory["api_key"].strip(),
            api_secret=directory["api_secret"].strip(),
            timeout=float(directory["timeout"]),
            user_agent=directory["user_agent"],
        ),
    )


def load_config(
    config_path: Path | None = None,
    local_path: Path | None = None,
    global_path: Path | None = None,
    env: dict[str, str] | None = None,
) -> Config:
    """Load configuration from config files and the environment.

    Configuration priority (highest to lowest):
    1. Environment variables (credentials, HOST, PORT)
    2. Explicit config file passed via ``config_path``
    3. Local config file (.podfeed/config in current directory)
    4. Global config file ($HOME/.podfeed/config)
    5. Default values

    Args:
        config_path: Explicit config file; must exist when given.
        local_path: Override path for local config file.
        global_path: Override path for global config file.
        env: Environment mapping (defaults to ``os.environ``).

    Returns:
        Config object with merged configuration values.

    Raises:
        ConfigError: If configuration files or values are invalid.
    """
    local_path = local_path or LOCAL_CONFIG_PATH
    global_path = global_path or GLOBAL_CONFIG_PATH
    env = dict(os.environ) if env is None else env

    merged_config = {section: values.copy() for section, values in DEFAULT_CONFIG.items()}

    for path in (global_path, local_path):
        file_config = _load_toml_file(path)
        if file_config:
            merged_config = _deep_merge(merged_config, file_config)

    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        merged_config = _deep_merge(merged_config, _load_toml_file(config_path))

    merged_config = _apply_env_overrides(merged_config, env)

    _validate_config(merged_config)

    return _dict_to_config(merged_config)
