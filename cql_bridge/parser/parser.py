"""Statement parser and classifier using sqlglot.

Relational SELECT text is parsed, validated and rewritten into CQL. Text
sqlglot cannot parse, or whose constructs have no CQL form, is treated as
native CQL and classified by its leading keyword only.
"""

import logging
import re
from typing import List, Mapping, Tuple

import sqlglot
from sqlglot import exp

from ..config.config import ConnectionConfig
from ..enums import StatementType
from ..errors import UnsupportedConstructError
from ..statement.configuration import (
    StatementConfiguration,
    resolve_configuration,
    sql_parser_enabled,
)
from ..statement.options import extract_options
from ..statement.parsed import ParsedStatement
from ..translator.dialect import Cql
from ..translator.rewriter import SqlToCqlRewriter
from ..utils.logging import get_statement_logger

logger = logging.getLogger(__name__)

ESCAPED_KEYWORDS = (
    "select",
    "insert",
    "update",
    "delete",
    "into",
    "from",
    "where",
    "key",
    "alter",
    "drop",
    "create",
)

# String literals, quoted identifiers and comments, in that order
_PROTECTED_SEGMENT = re.compile(
    r"'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"'
    r"|/\*.*?\*/"
    r"|--[^\n]*"
    r"|//[^\n]*",
    re.DOTALL,
)

_DOTTED_KEYWORD = re.compile(
    r"\.(" + "|".join(ESCAPED_KEYWORDS) + r")(?=[>=<.,\s])",
    re.IGNORECASE,
)

_QUERY_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except)


def _split_segments(text: str) -> List[Tuple[str, bool]]:
    """Split text into (chunk, is_protected) pieces."""
    segments: List[Tuple[str, bool]] = []
    position = 0
    for match in _PROTECTED_SEGMENT.finditer(text):
        if match.start() > position:
            segments.append((text[position:match.start()], False))
        segments.append((match.group(0), True))
        position = match.end()
    if position < len(text):
        segments.append((text[position:], False))
    return segments


def escape_keywords(text: str) -> str:
    """Quote reserved words used as the last part of a dotted name.

    ``t.key = 1`` becomes ``t."key" = 1`` so that the relational grammar
    reads it as a column. Literals, quoted names and comments are kept.
    """
    pieces = []
    for chunk, protected in _split_segments(text):
        if protected:
            pieces.append(chunk)
        else:
            pieces.append(_DOTTED_KEYWORD.sub(r'."\1"', chunk))
    return "".join(pieces)


def strip_comments(text: str) -> str:
    """Remove ``/* */``, ``--`` and ``//`` comments and trim."""
    pieces = []
    for chunk, protected in _split_segments(text):
        if protected and chunk[:2] in ("/*", "--", "//"):
            continue
        pieces.append(chunk)
    return "".join(pieces).strip()


def leading_keyword(text: str) -> str:
    """First whitespace-delimited token once comments are removed."""
    tokens = strip_comments(text).split()
    if not tokens:
        return ""
    return tokens[0]


class CqlParser:
    """Turn statement text into a :class:`ParsedStatement`."""

    def __init__(self, dialect: str = "postgres"):
        """Initialize parser.

        Args:
            dialect: sqlglot dialect used to read relational text
        """
        self.dialect = dialect

    def parse(self, connection: ConnectionConfig, text: str) -> ParsedStatement:
        """Parse, classify and configure one statement. Never raises.

        Args:
            connection: Connection defaults
            text: Raw statement text, possibly with magic comments

        Returns:
            Parsed statement with its resolved configuration
        """
        text = (text or "").strip()
        options = extract_options(text)

        if not text:
            configuration = resolve_configuration(connection, StatementType.UNKNOWN, options)
            return ParsedStatement("", configuration)

        if sql_parser_enabled(connection, options):
            try:
                return self.parse_sql(connection, text, options)
            except Exception as e:
                statement_logger = get_statement_logger(
                    __name__, {"statement": text[:200], "keyspace": connection.keyspace}
                )
                statement_logger.debug(
                    f"Treating statement as native CQL: {type(e).__name__}: {e}"
                )

        return self.parse_cql(connection, text, options)

    def parse_sql(
        self,
        connection: ConnectionConfig,
        text: str,
        options: Mapping[str, str],
    ) -> ParsedStatement:
        """Parse relational text, rewriting SELECT statements into CQL.

        Raises:
            sqlglot.errors.ParseError: when the text is not valid SQL
            UnsupportedConstructError: when a SELECT has no CQL form
        """
        ast = self._parse_single(strip_comments(escape_keywords(text)))

        if isinstance(ast, _QUERY_TYPES):
            configuration = resolve_configuration(connection, StatementType.SELECT, options)
            cql = self._translate_select(ast, connection, configuration)
            return ParsedStatement(cql, configuration)

        statement_type = StatementType.from_keyword(leading_keyword(text))
        configuration = resolve_configuration(connection, statement_type, options)
        return ParsedStatement(strip_comments(text), configuration)

    def parse_cql(
        self,
        connection: ConnectionConfig,
        text: str,
        options: Mapping[str, str],
    ) -> ParsedStatement:
        """Classify native text by its leading keyword and keep it as is."""
        statement_type = StatementType.from_keyword(leading_keyword(text))
        configuration = resolve_configuration(connection, statement_type, options)
        return ParsedStatement(text, configuration)

    def _parse_single(self, sql: str) -> exp.Expression:
        """Parse text holding exactly one statement."""
        statements = []
        for statement in sqlglot.parse(sql, dialect=self.dialect):
            if statement is not None:
                statements.append(statement)
        if len(statements) != 1:
            raise UnsupportedConstructError(
                f"Expected one statement, found {len(statements)}"
            )
        return statements[0]

    def _translate_select(
        self,
        ast: exp.Expression,
        connection: ConnectionConfig,
        configuration: StatementConfiguration,
    ) -> str:
        rewriter = SqlToCqlRewriter(connection.row_limit, configuration.no_limit)
        rewritten = rewriter.rewrite(ast)
        cql = rewritten.sql(dialect=Cql, comments=False)
        logger.debug(f"Translated SELECT to: {cql}")
        return cql
