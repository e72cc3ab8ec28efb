"""StatementProcessor combines the statement cache with the parser."""

import logging
from typing import Optional, Tuple

from ..cache import StatementCache
from ..config.config import ConnectionConfig
from ..parser import CqlParser
from ..statement.parsed import ParsedStatement

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, ConnectionConfig]


class StatementProcessor:
    """Entry point turning raw text into cached parsed statements."""

    def __init__(
        self,
        cache: StatementCache,
        parser: Optional[CqlParser] = None,
    ):
        """Initialize dependencies."""
        self.cache = cache
        if parser is None:
            parser = CqlParser()
        self.parser = parser

    def parse(self, connection: ConnectionConfig, text: str) -> ParsedStatement:
        """Return the parsed statement for ``text`` under ``connection``.

        Raises:
            UnexpectedError: when parsing failed in an unforeseen way
        """
        key = self.cache_key(connection, text)
        return self.cache.get(key, lambda: self.parser.parse(connection, text))

    def cache_key(self, connection: ConnectionConfig, text: str) -> CacheKey:
        """Statements are shared across calls with equal text and connection."""
        return ((text or "").strip(), connection)
