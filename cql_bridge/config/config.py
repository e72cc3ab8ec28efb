"""Configuration management for the SQL-to-CQL bridge."""

import logging
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..enums import ConsistencyLevel
from ..errors import InvalidConnectionUrlError

logger = logging.getLogger(__name__)

DRIVER_PROTOCOL = "jdbc:c*:"

_KEY_ALIASES = {
    "query_trace": "tracing",
    "username": "user",
}

# Values given in seconds by users, stored in milliseconds
_SECOND_FIELDS = ("read_timeout", "connection_timeout")


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection-level defaults consulted when resolving statements.

    Frozen so that it can take part in cache keys.
    """

    provider: str = "datastax"
    hosts: str = "localhost"
    port: int = -1
    keyspace: str = "system"
    user: str = "cassandra"
    password: str = field(default="cassandra", repr=False)
    consistency_level: ConsistencyLevel = ConsistencyLevel.LOCAL_ONE
    read_consistency_level: ConsistencyLevel = ConsistencyLevel.LOCAL_ONE
    write_consistency_level: ConsistencyLevel = ConsistencyLevel.ANY
    sql_friendly: bool = True
    tracing: bool = False
    no_limit: bool = False
    no_wait: bool = False
    replace_null_value: bool = False
    fetch_size: int = 100
    row_limit: int = 10000
    cql_cache_size: int = 1000
    read_timeout: int = 30 * 1000  # milliseconds
    connection_timeout: int = 5 * 1000  # milliseconds

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionConfig":
        """Build a config from user-facing keys (camelCase or snake_case).

        Timeouts are read as seconds.
        """
        values = _coerce_driver_values(data)
        return _normalize_hosts(cls(**values))

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> "ConnectionConfig":
        """Build a config from a driver URL plus explicit overrides."""
        props: Dict[str, Any] = parse_connection_url(url)
        for key, value in overrides.items():
            props[key] = value
        return cls.from_dict(props)

    def with_settings(self, data: Dict[str, Any]) -> "ConnectionConfig":
        """Copy with user-facing settings applied on top, as in from_dict."""
        values = _coerce_driver_values(data)
        return _normalize_hosts(replace(self, **values))

    @property
    def connection_url(self) -> str:
        """Simplified URL without credentials other than the user name."""
        url = f"{DRIVER_PROTOCOL}{self.provider}://{self.hosts}"
        if self.port > 0:
            url = f"{url}:{self.port}"
        return f"{url}/{self.keyspace}?user={self.user}"


@dataclass
class LoggerConfig:
    """Configuration for logging setup."""

    level: str = "INFO"
    structured: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    driver: ConnectionConfig = field(default_factory=ConnectionConfig)
    logger: LoggerConfig = field(default_factory=LoggerConfig)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        driver:
          hosts: cass1:9042,cass2
          keyspace: metrics
          read_consistency_level: LOCAL_QUORUM
          write_consistency_level: QUORUM
          row_limit: 5000
          read_timeout: 10        # seconds

        logger:
          level: DEBUG
          structured: true
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if not data:
        return Config()

    driver_data = data.get("driver") or {}
    driver = ConnectionConfig.from_dict(driver_data)

    logger_data = data.get("logger") or {}
    logger_config = LoggerConfig(**logger_data)

    return Config(driver=driver, logger=logger_config)


def parse_connection_url(url: str) -> Dict[str, str]:
    """Extract properties from a driver connection URL.

    Example: ``jdbc:c*:datastax://host1:9042,host2/ks?consistencyLevel=ONE``

    Raises:
        InvalidConnectionUrlError: when the URL does not follow the format
    """
    if not url or not url.startswith(DRIVER_PROTOCOL):
        raise InvalidConnectionUrlError(f"Invalid connection URL: {url!r}")

    parts = url.split("//")
    if len(parts) != 2:
        raise InvalidConnectionUrlError(f"Invalid connection URL: {url!r}")

    props: Dict[str, str] = {}
    provider = parts[0][len(DRIVER_PROTOCOL):].split(":")[0]
    if provider:
        props["provider"] = provider

    rest = parts[1]
    keyspace_index = rest.find("/")
    params_index = rest.find("?")
    if keyspace_index >= 0 and (params_index < 0 or keyspace_index < params_index):
        props["hosts"] = rest[:keyspace_index]
        end = params_index if params_index > keyspace_index else len(rest)
        keyspace = rest[keyspace_index + 1:end]
        if keyspace:
            props["keyspace"] = keyspace
    elif params_index >= 0:
        props["hosts"] = rest[:params_index]
    else:
        props["hosts"] = rest

    if not props["hosts"]:
        raise InvalidConnectionUrlError(f"No hosts in connection URL: {url!r}")

    if params_index > 0:
        for param in rest[params_index + 1:].split("&"):
            pair = param.split("=")
            if len(pair) != 2:
                continue
            key = pair[0].strip()
            if key:
                props[key] = pair[1].strip()

    return props


def _normalize_key(key: str) -> str:
    """Turn camelCase keys into field names."""
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", key.strip()).lower()
    return _KEY_ALIASES.get(snake, snake)


def _coerce_driver_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map raw key/value pairs onto typed ConnectionConfig fields."""
    known = {}
    for config_field in fields(ConnectionConfig):
        known[config_field.name] = config_field

    values: Dict[str, Any] = {}
    for raw_key, raw_value in data.items():
        name = _normalize_key(str(raw_key))
        if name not in known:
            logger.warning(f"Ignoring unknown driver setting '{raw_key}'")
            continue
        values[name] = _coerce_value(name, known[name].default, raw_value)
    return values


def _coerce_value(name: str, default: Any, value: Any) -> Any:
    """Convert a raw value to the type of the field default."""
    if isinstance(default, ConsistencyLevel):
        level = ConsistencyLevel.parse(value)
        if level is None:
            raise ValueError(f"Unknown consistency level for {name}: {value!r}")
        return level
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() == "true"
    if isinstance(default, int):
        number = int(str(value).strip())
        if name in _SECOND_FIELDS:
            number = number * 1000
        return number
    return str(value)


def _normalize_hosts(config: ConnectionConfig) -> ConnectionConfig:
    """Split ``host:port`` entries, keeping the first port found."""
    port = config.port
    hosts = []
    for entry in config.hosts.split(","):
        entry = entry.strip()
        if not entry:
            continue
        host, _, host_port = entry.partition(":")
        hosts.append(host.strip())
        if host_port.strip() and port <= 0:
            port = int(host_port.strip())
    return replace(config, hosts=",".join(hosts), port=port)
