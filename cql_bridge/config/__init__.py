"""Configuration management."""

from .config import (
    Config,
    ConnectionConfig,
    LoggerConfig,
    load_config,
    parse_connection_url,
)

__all__ = [
    "Config",
    "ConnectionConfig",
    "LoggerConfig",
    "load_config",
    "parse_connection_url",
]
