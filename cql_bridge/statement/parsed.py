"""Parsed statement value object."""

from dataclasses import dataclass, replace
from typing import Any, Tuple

from ..enums import StatementType
from .configuration import StatementConfiguration


@dataclass(frozen=True)
class ParsedStatement:
    """Normalized CQL text plus its resolved configuration.

    Created once per cache miss and never mutated.
    """

    cql: str
    configuration: StatementConfiguration
    parameters: Tuple[Any, ...] = ()

    @property
    def statement_type(self) -> StatementType:
        return self.configuration.statement_type

    @property
    def has_parameters(self) -> bool:
        return len(self.parameters) > 0

    def with_parameters(self, *parameters: Any) -> "ParsedStatement":
        """Return a copy bound to the given parameter values."""
        return replace(self, parameters=tuple(parameters))
