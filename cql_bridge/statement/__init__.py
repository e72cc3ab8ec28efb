"""Statement value objects, magic-comment options and configuration resolution."""

from .configuration import (
    INHERIT_FETCH_SIZE,
    StatementConfiguration,
    resolve_configuration,
    sql_parser_enabled,
)
from .options import KNOWN_OPTIONS, extract_options
from .parsed import ParsedStatement

__all__ = [
    "INHERIT_FETCH_SIZE",
    "KNOWN_OPTIONS",
    "ParsedStatement",
    "StatementConfiguration",
    "extract_options",
    "resolve_configuration",
    "sql_parser_enabled",
]
