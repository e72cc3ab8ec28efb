"""Tests for native column type mappings."""

import datetime
import uuid
from decimal import Decimal

import pytest

from cql_bridge.datatypes import DEFAULT_TYPE_MAPPINGS, SqlType, TypeMapping, TypeMappings


def test_all_native_types_registered():
    """Every native type has an entry."""
    expected = [
        "ascii", "bigint", "blob", "boolean", "counter", "date", "decimal",
        "double", "float", "inet", "int", "list", "map", "set", "smallint",
        "text", "time", "timestamp", "timeuuid", "tinyint", "tuple", "uuid",
        "varchar", "varint",
    ]

    assert DEFAULT_TYPE_MAPPINGS.type_names() == expected
    assert len(DEFAULT_TYPE_MAPPINGS) == 24


@pytest.mark.parametrize(
    "cql_type,sql_type,host_type",
    [
        ("text", SqlType.VARCHAR, str),
        ("bigint", SqlType.BIGINT, int),
        ("counter", SqlType.BIGINT, int),
        ("boolean", SqlType.BOOLEAN, bool),
        ("decimal", SqlType.DECIMAL, Decimal),
        ("double", SqlType.DOUBLE, float),
        ("timestamp", SqlType.TIMESTAMP, datetime.datetime),
        ("date", SqlType.DATE, datetime.date),
        ("timeuuid", SqlType.VARCHAR, uuid.UUID),
        ("map", SqlType.OTHER, dict),
        ("blob", SqlType.BLOB, bytes),
    ],
)
def test_exact_lookups(cql_type, sql_type, host_type):
    """Registered names map to their SQL code and Python type."""
    assert DEFAULT_TYPE_MAPPINGS.sql_type_for(cql_type) == sql_type
    assert DEFAULT_TYPE_MAPPINGS.host_type_for(cql_type) is host_type


def test_sql_type_codes():
    """Codes match the relational API numbering."""
    assert int(SqlType.VARCHAR) == 12
    assert int(SqlType.BIGINT) == -5
    assert int(SqlType.BLOB) == 2004


@pytest.mark.parametrize(
    "cql_type,expected",
    [
        ("  TEXT ", "text"),
        ("list<int>", "list"),
        ("map<text, int>", "map"),
        ("set <uuid>", "set"),
        ("tuple<int, text>", "tuple"),
        ("frozen<list<int>>", "list"),
        ("frozen<text>", "text"),
        ("my_udt", "blob"),
        ("listing", "blob"),
        ("", "blob"),
        (None, "blob"),
    ],
)
def test_name_resolution(cql_type, expected):
    """Names resolve exactly, then by container family, then to blob."""
    assert DEFAULT_TYPE_MAPPINGS.cql_type_for(cql_type) == expected


def test_precision_and_scale():
    """Precision and scale use exact names and default to zero."""
    assert DEFAULT_TYPE_MAPPINGS.precision_for("bigint") == 19
    assert DEFAULT_TYPE_MAPPINGS.precision_for("double") == 22
    assert DEFAULT_TYPE_MAPPINGS.scale_for("double") == 8
    assert DEFAULT_TYPE_MAPPINGS.scale_for("decimal") == 2
    assert DEFAULT_TYPE_MAPPINGS.precision_for("list<int>") == 0
    assert DEFAULT_TYPE_MAPPINGS.scale_for("unknown") == 0


def test_custom_mappings_need_blob():
    """A custom table must keep the fallback type."""
    with pytest.raises(ValueError):
        TypeMappings([TypeMapping("text", SqlType.VARCHAR, str, 10, 0)])


def test_custom_mapping_replaces_default():
    """Later entries replace earlier ones with the same name."""
    mappings = TypeMappings(
        [
            TypeMapping("blob", SqlType.BLOB, bytes, 100, 0),
            TypeMapping("text", SqlType.VARCHAR, str, 10, 0),
            TypeMapping("text", SqlType.VARCHAR, str, 20, 0),
        ]
    )

    assert mappings.precision_for("text") == 20
    assert "text" in mappings
    assert mappings.cql_type_for("int") == "blob"
