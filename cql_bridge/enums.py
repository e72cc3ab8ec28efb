"""Enumerations shared by the parser, resolver and type layers."""

from enum import Enum
from typing import Optional


class StatementCategory(Enum):
    """Broad statement category."""

    DDL = "DDL"
    DML = "DML"


class StatementType(Enum):
    """Statement types recognized by the classifier."""

    CREATE = "CREATE"
    ALTER = "ALTER"
    DROP = "DROP"
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    TRUNCATE = "TRUNCATE"
    UNKNOWN = "UNKNOWN"

    @property
    def category(self) -> StatementCategory:
        if self in (StatementType.CREATE, StatementType.ALTER, StatementType.DROP):
            return StatementCategory.DDL
        return StatementCategory.DML

    @property
    def is_query(self) -> bool:
        return self is StatementType.SELECT

    @property
    def is_update(self) -> bool:
        """True for statements that write rows."""
        return self in (
            StatementType.INSERT,
            StatementType.UPDATE,
            StatementType.DELETE,
            StatementType.TRUNCATE,
        )

    @property
    def is_ddl(self) -> bool:
        return self.category is StatementCategory.DDL

    @property
    def is_dml(self) -> bool:
        return self.category is StatementCategory.DML

    @classmethod
    def from_keyword(cls, keyword: Optional[str]) -> "StatementType":
        """Match a leading keyword case-insensitively, UNKNOWN otherwise."""
        if not keyword:
            return cls.UNKNOWN
        normalized = keyword.strip().upper()
        for member in cls:
            if member is cls.UNKNOWN:
                continue
            if member.value == normalized:
                return member
        return cls.UNKNOWN


class ConsistencyLevel(Enum):
    """Replica agreement levels understood by the store."""

    ANY = "ANY"
    ONE = "ONE"
    TWO = "TWO"
    THREE = "THREE"
    QUORUM = "QUORUM"
    ALL = "ALL"
    LOCAL_QUORUM = "LOCAL_QUORUM"
    EACH_QUORUM = "EACH_QUORUM"
    SERIAL = "SERIAL"
    LOCAL_SERIAL = "LOCAL_SERIAL"
    LOCAL_ONE = "LOCAL_ONE"

    @property
    def is_serial(self) -> bool:
        return self in (ConsistencyLevel.SERIAL, ConsistencyLevel.LOCAL_SERIAL)

    @classmethod
    def parse(cls, name: Optional[str]) -> Optional["ConsistencyLevel"]:
        """Look up a level by name, ignoring case and padding."""
        if name is None:
            return None
        normalized = str(name).strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class CqlDataType(Enum):
    """Native column types."""

    ASCII = "ascii"
    BIGINT = "bigint"
    BLOB = "blob"
    BOOLEAN = "boolean"
    COUNTER = "counter"
    DATE = "date"
    DECIMAL = "decimal"
    DOUBLE = "double"
    FLOAT = "float"
    INET = "inet"
    INT = "int"
    LIST = "list"
    MAP = "map"
    SET = "set"
    SMALLINT = "smallint"
    TEXT = "text"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TIMEUUID = "timeuuid"
    TINYINT = "tinyint"
    TUPLE = "tuple"
    UUID = "uuid"
    VARCHAR = "varchar"
    VARINT = "varint"
