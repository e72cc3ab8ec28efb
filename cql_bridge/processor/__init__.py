"""Statement processing entry point."""

from .statement_processor import StatementProcessor

__all__ = ["StatementProcessor"]
