"""Statement parsing and classification."""

from .parser import CqlParser, escape_keywords, leading_keyword, strip_comments

__all__ = ["CqlParser", "escape_keywords", "leading_keyword", "strip_comments"]
