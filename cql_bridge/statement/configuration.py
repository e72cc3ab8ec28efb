"""Per-statement execution configuration."""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from ..config.config import ConnectionConfig
from ..enums import ConsistencyLevel, StatementCategory, StatementType
from .options import (
    KEY_CONSISTENCY_LEVEL,
    KEY_FETCH_SIZE,
    KEY_NO_LIMIT,
    KEY_NO_WAIT,
    KEY_READ_TIMEOUT,
    KEY_REPLACE_NULL_VALUE,
    KEY_SQL_PARSER,
    KEY_TRACING,
)

logger = logging.getLogger(__name__)

# Use the fetch size of the calling statement
INHERIT_FETCH_SIZE = -1


@dataclass(frozen=True)
class StatementConfiguration:
    """Resolved execution settings of one statement."""

    statement_type: StatementType
    consistency_level: ConsistencyLevel
    serial_consistency_level: Optional[ConsistencyLevel] = None
    fetch_size: int = INHERIT_FETCH_SIZE
    no_limit: bool = False
    no_wait: bool = False
    tracing: bool = False
    read_timeout: int = 30 * 1000  # milliseconds
    replace_null_value: bool = False
    sql_parser: bool = True

    @property
    def category(self) -> StatementCategory:
        return self.statement_type.category

    @property
    def has_fetch_size(self) -> bool:
        return self.fetch_size > 0


def resolve_configuration(
    connection: ConnectionConfig,
    statement_type: StatementType,
    options: Optional[Mapping[str, str]] = None,
) -> StatementConfiguration:
    """Merge magic-comment options over connection defaults.

    Args:
        connection: Connection-level defaults
        statement_type: Classified statement type
        options: Option map extracted from the statement text

    Returns:
        Immutable configuration; identical inputs give equal results
    """
    if options is None:
        options = {}

    consistency_level = _resolve_consistency_level(connection, statement_type, options)
    serial_level = None
    if statement_type.is_update and consistency_level.is_serial:
        serial_level = consistency_level

    return StatementConfiguration(
        statement_type=statement_type,
        consistency_level=consistency_level,
        serial_consistency_level=serial_level,
        fetch_size=_parse_int(options, KEY_FETCH_SIZE, INHERIT_FETCH_SIZE),
        no_limit=_parse_bool(options, KEY_NO_LIMIT, connection.no_limit),
        no_wait=_parse_bool(options, KEY_NO_WAIT, connection.no_wait),
        tracing=_parse_bool(options, KEY_TRACING, connection.tracing),
        read_timeout=_resolve_read_timeout(connection, options),
        replace_null_value=_parse_bool(
            options, KEY_REPLACE_NULL_VALUE, connection.replace_null_value
        ),
        sql_parser=sql_parser_enabled(connection, options),
    )


def sql_parser_enabled(connection: ConnectionConfig, options: Mapping[str, str]) -> bool:
    """Whether SQL translation should be attempted for a statement."""
    return _parse_bool(options, KEY_SQL_PARSER, connection.sql_friendly)


def _preferred_consistency_level(
    connection: ConnectionConfig, statement_type: StatementType
) -> ConsistencyLevel:
    if statement_type.is_query:
        return connection.read_consistency_level
    if statement_type.is_update:
        return connection.write_consistency_level
    return connection.consistency_level


def _resolve_consistency_level(
    connection: ConnectionConfig,
    statement_type: StatementType,
    options: Mapping[str, str],
) -> ConsistencyLevel:
    preferred = _preferred_consistency_level(connection, statement_type)
    value = options.get(KEY_CONSISTENCY_LEVEL)
    if value is None:
        return preferred
    level = ConsistencyLevel.parse(value)
    if level is None:
        logger.warning(
            f"Unknown consistency level '{value}', using {preferred.value}"
        )
        return preferred
    return level


def _resolve_read_timeout(connection: ConnectionConfig, options: Mapping[str, str]) -> int:
    seconds = _parse_int(options, KEY_READ_TIMEOUT, None)
    if seconds is None:
        return connection.read_timeout
    return seconds * 1000


def _parse_bool(options: Mapping[str, str], key: str, default: bool) -> bool:
    """Only ``true`` (any case) is true once the option is present."""
    value = options.get(key)
    if value is None:
        return default
    return value.strip().lower() == "true"


def _parse_int(options: Mapping[str, str], key: str, default: Optional[int]) -> Optional[int]:
    value = options.get(key)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        logger.warning(f"Ignoring non-numeric value '{value}' for option {key}")
        return default
