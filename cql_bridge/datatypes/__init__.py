"""Column type mappings and value converters."""

from .converters import (
    ConverterRegistry,
    InetAddress,
    create_default_converters,
    create_session_converters,
)
from .mappings import (
    DEFAULT_TYPE_MAPPINGS,
    SqlType,
    TypeMapping,
    TypeMappings,
)

__all__ = [
    "ConverterRegistry",
    "InetAddress",
    "create_default_converters",
    "create_session_converters",
    "DEFAULT_TYPE_MAPPINGS",
    "SqlType",
    "TypeMapping",
    "TypeMappings",
]
