"""Errors raised by the translation and conversion layers."""

from typing import Any, Optional


class CqlBridgeError(Exception):
    """Base class for recoverable cql-bridge errors."""


class ConversionError(CqlBridgeError, ValueError):
    """Raised when a value cannot be converted to the requested type."""

    def __init__(self, value: Any, target_type: type, reason: Optional[str] = None):
        self.value = value
        self.target_type = target_type
        type_name = getattr(target_type, "__name__", str(target_type))
        message = f"Cannot convert {value!r} to {type_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnexpectedError(CqlBridgeError):
    """Wraps a failure raised while computing a cached statement."""


class InvalidConnectionUrlError(CqlBridgeError, ValueError):
    """Raised when a connection URL does not follow the driver format."""


class UnsupportedConstructError(CqlBridgeError):
    """Raised by the rewriter for SQL that has no CQL counterpart."""


class SealedRegistryError(RuntimeError):
    """Raised when a sealed registry is modified.

    Not a CqlBridgeError: this is a programming error and must not be
    caught by handlers written for translation or conversion failures.
    """
