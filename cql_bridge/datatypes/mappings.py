"""Mappings from native column types to SQL type codes and Python types.

Every native type name resolves to some mapping: exact names first, then
the container family of parameterized names (``map<text, int>`` resolves
to ``map``), and finally ``blob``.
"""

import datetime
import re
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import IntEnum
from typing import Dict, Iterable, List, Optional

from ..enums import CqlDataType
from .converters import InetAddress


class SqlType(IntEnum):
    """Storage type codes, numbered as in ``java.sql.Types``."""

    TINYINT = -6
    BIGINT = -5
    BINARY = -2
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    DOUBLE = 8
    DECIMAL = 3
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111
    JAVA_OBJECT = 2000
    BLOB = 2004


# Effectively unbounded length
UNBOUNDED = 2 ** 31 - 1

CONTAINER_FAMILIES = (
    CqlDataType.LIST.value,
    CqlDataType.SET.value,
    CqlDataType.MAP.value,
    CqlDataType.TUPLE.value,
)

FALLBACK_TYPE = CqlDataType.BLOB.value

_FROZEN_PATTERN = re.compile(r"^frozen\s*<(.*)>$")


@dataclass(frozen=True)
class TypeMapping:
    """How one native type is exposed to callers."""

    cql_type: str
    sql_type: SqlType
    host_type: type
    precision: int
    scale: int


def default_mappings() -> List[TypeMapping]:
    """Built-in mapping table."""
    return [
        TypeMapping(CqlDataType.ASCII.value, SqlType.VARCHAR, str, UNBOUNDED, 0),
        TypeMapping(CqlDataType.BIGINT.value, SqlType.BIGINT, int, 19, 0),
        TypeMapping(CqlDataType.BLOB.value, SqlType.BLOB, bytes, UNBOUNDED, 0),
        TypeMapping(CqlDataType.BOOLEAN.value, SqlType.BOOLEAN, bool, 4, 0),
        TypeMapping(CqlDataType.COUNTER.value, SqlType.BIGINT, int, 19, 0),
        TypeMapping(CqlDataType.DATE.value, SqlType.DATE, datetime.date, 10, 0),
        TypeMapping(CqlDataType.DECIMAL.value, SqlType.DECIMAL, Decimal, UNBOUNDED, 2),
        TypeMapping(CqlDataType.DOUBLE.value, SqlType.DOUBLE, float, 22, 8),
        TypeMapping(CqlDataType.FLOAT.value, SqlType.FLOAT, float, 12, 4),
        TypeMapping(
            CqlDataType.INET.value,
            SqlType.VARCHAR,
            InetAddress,
            200,
            0,
        ),
        TypeMapping(CqlDataType.INT.value, SqlType.INTEGER, int, 10, 0),
        TypeMapping(CqlDataType.LIST.value, SqlType.OTHER, list, UNBOUNDED, 0),
        TypeMapping(CqlDataType.MAP.value, SqlType.OTHER, dict, UNBOUNDED, 0),
        TypeMapping(CqlDataType.SET.value, SqlType.OTHER, set, UNBOUNDED, 0),
        TypeMapping(CqlDataType.SMALLINT.value, SqlType.SMALLINT, int, 6, 0),
        TypeMapping(CqlDataType.TEXT.value, SqlType.VARCHAR, str, UNBOUNDED, 0),
        TypeMapping(CqlDataType.TIME.value, SqlType.TIME, datetime.time, 50, 0),
        TypeMapping(
            CqlDataType.TIMESTAMP.value,
            SqlType.TIMESTAMP,
            datetime.datetime,
            50,
            0,
        ),
        TypeMapping(CqlDataType.TIMEUUID.value, SqlType.VARCHAR, uuid.UUID, 50, 0),
        TypeMapping(CqlDataType.TINYINT.value, SqlType.TINYINT, int, 3, 0),
        TypeMapping(CqlDataType.TUPLE.value, SqlType.OTHER, tuple, UNBOUNDED, 0),
        TypeMapping(CqlDataType.UUID.value, SqlType.VARCHAR, uuid.UUID, 50, 0),
        TypeMapping(CqlDataType.VARCHAR.value, SqlType.VARCHAR, str, UNBOUNDED, 0),
        TypeMapping(CqlDataType.VARINT.value, SqlType.BIGINT, int, UNBOUNDED, 0),
    ]


class TypeMappings:
    """Read-only lookup table keyed by native type name."""

    def __init__(self, mappings: Optional[Iterable[TypeMapping]] = None):
        """Build the table; later entries replace earlier ones by name."""
        if mappings is None:
            mappings = default_mappings()
        self._mappings: Dict[str, TypeMapping] = {}
        for mapping in mappings:
            self._mappings[mapping.cql_type] = mapping
        if FALLBACK_TYPE not in self._mappings:
            raise ValueError(f"Type mappings must define '{FALLBACK_TYPE}'")

    def __contains__(self, cql_type: str) -> bool:
        return cql_type in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    def type_names(self) -> List[str]:
        return sorted(self._mappings.keys())

    def cql_type_for(self, cql_type: Optional[str]) -> str:
        """Resolve a native type name to its canonical registered name.

        Args:
            cql_type: Type name as reported by the store, e.g. ``list<int>``

        Returns:
            Registered name; ``blob`` when nothing matches
        """
        name = self._normalize(cql_type)
        if name in self._mappings:
            return name
        family = self._container_family(name)
        if family is not None and family in self._mappings:
            return family
        return FALLBACK_TYPE

    def mapping_for(self, cql_type: Optional[str]) -> TypeMapping:
        return self._mappings[self.cql_type_for(cql_type)]

    def sql_type_for(self, cql_type: Optional[str]) -> SqlType:
        return self.mapping_for(cql_type).sql_type

    def host_type_for(self, cql_type: Optional[str]) -> type:
        return self.mapping_for(cql_type).host_type

    def precision_for(self, cql_type: Optional[str]) -> int:
        """Precision of a registered type, 0 when unregistered."""
        mapping = self._mappings.get(self._normalize(cql_type))
        if mapping is None:
            return 0
        return mapping.precision

    def scale_for(self, cql_type: Optional[str]) -> int:
        """Scale of a registered type, 0 when unregistered."""
        mapping = self._mappings.get(self._normalize(cql_type))
        if mapping is None:
            return 0
        return mapping.scale

    def _normalize(self, cql_type: Optional[str]) -> str:
        if cql_type is None:
            return ""
        name = cql_type.strip().lower()
        frozen = _FROZEN_PATTERN.match(name)
        while frozen:
            name = frozen.group(1).strip()
            frozen = _FROZEN_PATTERN.match(name)
        return name

    def _container_family(self, name: str) -> Optional[str]:
        for family in CONTAINER_FAMILIES:
            if name.startswith(family) and name[len(family):].lstrip().startswith("<"):
                return family
        return None


DEFAULT_TYPE_MAPPINGS = TypeMappings()
