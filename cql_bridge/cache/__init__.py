"""Statement caching."""

from .statement_cache import StatementCache

__all__ = ["StatementCache"]
