"""Relational-to-native query translation."""

from .dialect import Cql
from .rewriter import SqlToCqlRewriter

__all__ = ["Cql", "SqlToCqlRewriter"]
