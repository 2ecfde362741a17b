"""
Server configuration.

Values are resolved in order: defaults, optional JSON config file,
environment variables.

Environment variables:
    HOST, PORT, CACHE_DIR, CACHE_SIZE, LOG_LEVEL, MAX_FILE_SIZE, FETCH_TIMEOUT,
    MAX_DIMENSION
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional


class ConfigError(Exception):
    """Raised when the configuration can't be loaded or is invalid."""


@dataclass
class Config:
    """Image previewer settings."""
    host: str = "0.0.0.0"
    port: int = 8082
    cache_dir: str = ".cache"
    cache_size: int = 10                   # Max number of cached variants
    log_level: str = "debug"
    max_file_size: int = 5 * 1024 * 1024   # Max upstream body in bytes
    fetch_timeout: float = 30.0            # Upstream timeout in seconds
    max_dimension: int = 10000             # Max requested width or height


ENV_VARS = {
    "host": "HOST",
    "port": "PORT",
    "cache_dir": "CACHE_DIR",
    "cache_size": "CACHE_SIZE",
    "log_level": "LOG_LEVEL",
    "max_file_size": "MAX_FILE_SIZE",
    "fetch_timeout": "FETCH_TIMEOUT",
    "max_dimension": "MAX_DIMENSION",
}

# camelCase keys accepted in config files
FILE_KEY_ALIASES = {
    "cacheDir": "cache_dir",
    "cacheSize": "cache_size",
    "logLevel": "log_level",
    "maxFileSize": "max_file_size",
    "fetchTimeout": "fetch_timeout",
    "maxDimension": "max_dimension",
}


def _read_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    known = {f.name for f in fields(Config)}
    values = {}
    for key, value in data.items():
        name = FILE_KEY_ALIASES.get(key, key)
        if name not in known:
            raise ConfigError(f"unknown config key: {key}")
        values[name] = value
    return values


def _coerce(config: Config) -> Config:
    for f in fields(Config):
        value = getattr(config, f.name)
        try:
            setattr(config, f.name, f.type(value))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid value for {f.name}: {value!r}") from e
    return config


def validate(config: Config) -> Config:
    if config.cache_size < 1:
        raise ConfigError(f"cache_size must be >= 1, got {config.cache_size}")
    if not 0 <= config.port <= 65535:
        raise ConfigError(f"port out of range: {config.port}")
    if config.max_file_size <= 0:
        raise ConfigError(f"max_file_size must be positive, got {config.max_file_size}")
    if config.max_dimension < 1:
        raise ConfigError(f"max_dimension must be >= 1, got {config.max_dimension}")
    if not config.cache_dir:
        raise ConfigError("cache_dir must not be empty")
    return config


def load_config(path: Optional[str] = None) -> Config:
    """
    Load the configuration.

    Args:
        path: Optional JSON config file

    Raises:
        ConfigError: unreadable file, unknown key or invalid value
    """
    values = asdict(Config())
    if path:
        values.update(_read_file(path))

    for name, var in ENV_VARS.items():
        env_value = os.getenv(var)
        if env_value is not None:
            values[name] = env_value

    return validate(_coerce(Config(**values)))
