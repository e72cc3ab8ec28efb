"""Tests for the value conversion registries."""

import datetime
import ipaddress
import uuid
from decimal import Decimal

import pytest

from cql_bridge.datatypes import (
    DEFAULT_TYPE_MAPPINGS,
    ConverterRegistry,
    InetAddress,
    create_default_converters,
    create_session_converters,
)
from cql_bridge.errors import ConversionError, CqlBridgeError, SealedRegistryError


@pytest.fixture
def root():
    return create_default_converters()


@pytest.fixture
def session(root):
    return create_session_converters(root)


def test_root_is_sealed(root):
    """Mutating the sealed root is a programming error."""
    assert root.sealed is True

    with pytest.raises(SealedRegistryError):
        root.register(str, "x")


def test_sealed_error_outside_hierarchy():
    """Sealing errors are not caught by library error handlers."""
    assert not issubclass(SealedRegistryError, CqlBridgeError)


def test_none_passes_through(root):
    """None stays None unless replacement is requested."""
    assert root.convert(None, int) is None


def test_null_replacement(root):
    """Registered defaults replace None."""
    assert root.convert(None, str, replace_nulls=True) == "null"
    assert root.convert(None, int, replace_nulls=True) == 0
    assert root.convert(None, bool, replace_nulls=True) is False
    assert root.convert(None, bytes, replace_nulls=True) == b""


def test_container_defaults_are_copies(root):
    """Callers cannot change a registered container default."""
    first = root.convert(None, list, replace_nulls=True)
    first.append(1)

    assert root.convert(None, list, replace_nulls=True) == []


def test_matching_instance_returned(root):
    """Values of the requested type come back unchanged."""
    value = Decimal("1.50")

    assert root.convert(value, Decimal) is value


@pytest.mark.parametrize(
    "value,target,expected",
    [
        ("42", int, 42),
        (" 7 ", int, 7),
        (3.9, int, 3),
        ("2.5", float, 2.5),
        ("TRUE", bool, True),
        ("yes", bool, False),
        (1, bool, True),
        (True, int, 1),
        ("1.10", Decimal, Decimal("1.10")),
        (0.1, Decimal, Decimal("0.1")),
        (b"abc", str, "abc"),
        ("abc", bytes, b"abc"),
        (12, str, "12"),
        ("a, b,,c", list, ["a", "b", "c"]),
        ("a,a", set, {"a"}),
        ("a,b", tuple, ("a", "b")),
        ([("k", 1)], dict, {"k": 1}),
    ],
)
def test_basic_conversions(root, value, target, expected):
    """Scalars and containers convert from common inputs."""
    assert root.convert(value, target) == expected


def test_uuid_conversions(root):
    """UUIDs convert from text and raw bytes."""
    value = uuid.uuid4()

    assert root.convert(str(value), uuid.UUID) == value
    assert root.convert(value.bytes, uuid.UUID) == value


def test_inet_conversions(root):
    """Addresses convert from text."""
    assert root.convert("10.0.0.1", ipaddress.IPv4Address) == ipaddress.IPv4Address("10.0.0.1")
    assert root.convert("::1", ipaddress.IPv6Address) == ipaddress.IPv6Address("::1")


def test_inet_column_accepts_both_families(root):
    """The inet host type decodes IPv4 and IPv6 values."""
    host_type = DEFAULT_TYPE_MAPPINGS.host_type_for("inet")

    assert host_type is InetAddress
    assert root.convert("::1", host_type) == ipaddress.IPv6Address("::1")
    assert root.convert("192.168.10.11", host_type) == ipaddress.IPv4Address("192.168.10.11")
    assert root.convert(bytes([10, 0, 0, 1]), host_type) == ipaddress.IPv4Address("10.0.0.1")

    address = ipaddress.IPv6Address("fe80::1")
    assert root.convert(address, host_type) is address

    with pytest.raises(ConversionError):
        root.convert("not-an-address", host_type)


def test_temporal_conversions(root):
    """Dates, times and timestamps convert from text and epoch millis."""
    assert root.convert("2024-03-01", datetime.date) == datetime.date(2024, 3, 1)
    assert root.convert("12:30:00", datetime.time) == datetime.time(12, 30)
    assert root.convert("2024-03-01T10:00:00Z", datetime.datetime) == datetime.datetime(
        2024, 3, 1, 10, 0, tzinfo=datetime.timezone.utc
    )
    assert root.convert(0, datetime.datetime) == datetime.datetime(
        1970, 1, 1, tzinfo=datetime.timezone.utc
    )
    assert root.convert(86400000, datetime.date) == datetime.date(1970, 1, 2)


def test_integer_time_must_fit_in_a_day(root):
    """Millisecond times past midnight of the next day are rejected."""
    assert root.convert(3_600_000, datetime.time) == datetime.time(1, 0)

    with pytest.raises(ConversionError):
        root.convert(90_000_000, datetime.time)
    with pytest.raises(ConversionError):
        root.convert(-1, datetime.time)


def test_datetime_is_not_a_date(root):
    """A datetime requested as date is narrowed."""
    moment = datetime.datetime(2024, 3, 1, 10, 0)

    assert root.convert(moment, datetime.date) == datetime.date(2024, 3, 1)


def test_failure_raises_conversion_error(root):
    """Unconvertible input raises ConversionError with the cause chained."""
    with pytest.raises(ConversionError) as exc_info:
        root.convert("abc", int)

    error = exc_info.value
    assert error.value == "abc"
    assert error.target_type is int
    assert isinstance(error.__cause__, ValueError)


def test_root_falls_back_to_type_constructor(root):
    """Unregistered types are built by calling the type."""
    assert root.convert(3, complex) == complex(3)


def test_last_resort_failure(root):
    """A failing last-resort call also raises ConversionError."""
    with pytest.raises(ConversionError):
        root.convert("not-a-network", ipaddress.IPv4Network)


class TestSessionConverters:
    """Tests for the derived session registry."""

    def test_sealed_with_parent(self, root, session):
        """The session registry is sealed and delegates to the root."""
        assert session.sealed is True
        assert session.parent is root
        assert session.convert("5", int) == 5

    def test_integer_date_is_days(self, session):
        """Integer dates count days since the epoch."""
        assert session.convert(1, datetime.date) == datetime.date(1970, 1, 2)

    def test_integer_time_is_nanoseconds(self, session):
        """Integer times count nanoseconds since midnight."""
        nanos = (3600 + 1) * 1_000_000_000 + 5000

        assert session.convert(nanos, datetime.time) == datetime.time(1, 0, 1, 5)

    def test_integer_time_out_of_range(self, session):
        """Nanosecond times of a day or more are rejected."""
        with pytest.raises(ConversionError):
            session.convert(86_400 * 1_000_000_000, datetime.time)

    def test_uuid_default_is_time_based(self, session):
        """The session null default for UUIDs is version 1."""
        assert session.convert(None, uuid.UUID, replace_nulls=True).version == 1

    def test_text_still_parsed(self, session):
        """Non-integer values use the root conversions."""
        assert session.convert("1999-12-31", datetime.date) == datetime.date(1999, 12, 31)


def test_derived_registry_overrides():
    """A child registry can override defaults and converters before sealing."""
    root = create_default_converters()
    child = ConverterRegistry(parent=root, name="child")
    child.register(str, default="", converter=lambda value: f"<{value}>")

    assert child.convert(None, str, replace_nulls=True) == ""
    assert child.convert(1, str) == "<1>"
    assert child.convert("1", int) == 1
    assert child.sealed is False
    assert str in child.registered_types()
