"""Bidirectional value conversion with parent delegation.

A registry maps a target Python type to a conversion function and to the
default used in place of ``None`` when null replacement is requested.
Lookups that miss locally are delegated to the parent registry; the root
finally tries ``target_type(value)``.

Registries are filled once and sealed. The process-wide root is built by
:func:`create_default_converters` and handed to whoever needs it;
per-session registries derive from it with
:func:`create_session_converters`.
"""

import abc
import copy
import datetime
import ipaddress
import logging
import uuid
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import ConversionError, SealedRegistryError

logger = logging.getLogger(__name__)

Converter = Callable[[Any], Any]

_CONVERSION_FAILURES = (ValueError, TypeError, ArithmeticError)

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
_EPOCH_DATE = datetime.date(1970, 1, 1)
_NANOS_PER_MICRO = 1000
_MILLIS_PER_DAY = 86_400_000
_NANOS_PER_DAY = _MILLIS_PER_DAY * 1_000_000


class InetAddress(abc.ABC):
    """Host type of ``inet`` values: any IPv4 or IPv6 address."""


InetAddress.register(ipaddress.IPv4Address)
InetAddress.register(ipaddress.IPv6Address)


class ConverterRegistry:
    """Layered converter lookup ending at a root registry."""

    def __init__(self, parent: Optional["ConverterRegistry"] = None, name: str = "converters"):
        """Create an empty, unsealed registry.

        Args:
            parent: Registry consulted for types not registered here
            name: Label used in log messages
        """
        self.parent = parent
        self.name = name
        self._defaults: Dict[type, Any] = {}
        self._converters: Dict[type, Converter] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> "ConverterRegistry":
        """Make the registry read-only."""
        self._sealed = True
        return self

    def register(
        self,
        target_type: type,
        default: Any = None,
        converter: Optional[Converter] = None,
    ) -> None:
        """Add or replace the default and/or converter for a type.

        Raises:
            SealedRegistryError: when the registry has been sealed
        """
        if self._sealed:
            raise SealedRegistryError(
                f"Registry '{self.name}' is sealed; cannot register {target_type!r}"
            )
        if default is not None:
            self._defaults[target_type] = default
        if converter is not None:
            self._converters[target_type] = converter

    def registered_types(self) -> List[type]:
        """Types with a local converter or default."""
        seen = list(self._converters.keys())
        for target_type in self._defaults:
            if target_type not in self._converters:
                seen.append(target_type)
        return seen

    def default_for(self, target_type: type) -> Any:
        """Null replacement for a type, searching the parent chain.

        Container defaults are copied so callers cannot alter the registry.
        """
        registry: Optional[ConverterRegistry] = self
        while registry is not None:
            if target_type in registry._defaults:
                return copy.copy(registry._defaults[target_type])
            registry = registry.parent
        return None

    def convert(self, value: Any, target_type: type, replace_nulls: bool = False) -> Any:
        """Convert ``value`` to ``target_type``.

        Args:
            value: Input value, possibly None
            target_type: Python type requested by the caller
            replace_nulls: Substitute the registered default for None

        Returns:
            Converted value

        Raises:
            ConversionError: when no converter in the chain can handle it
        """
        if value is None:
            if replace_nulls:
                return self.default_for(target_type)
            return None

        if _satisfies(value, target_type):
            return value

        converter = self._converters.get(target_type)
        if converter is not None:
            return _apply(converter, value, target_type)

        if self.parent is not None:
            return self.parent.convert(value, target_type, replace_nulls)

        logger.debug(f"No converter for {target_type!r} in '{self.name}', casting directly")
        return _apply(target_type, value, target_type)


def _satisfies(value: Any, target_type: type) -> bool:
    """Whether ``value`` can be returned unchanged for ``target_type``."""
    if target_type is datetime.date and isinstance(value, datetime.datetime):
        return False
    if target_type in (int, float) and isinstance(value, bool):
        return False
    try:
        return isinstance(value, target_type)
    except TypeError:
        return False


def _apply(converter: Converter, value: Any, target_type: type) -> Any:
    try:
        return converter(value)
    except ConversionError:
        raise
    except _CONVERSION_FAILURES as exc:
        raise ConversionError(value, target_type, str(exc)) from exc


def _read_all(value: Any) -> Any:
    """Drain file-like input."""
    if hasattr(value, "read") and callable(value.read):
        return value.read()
    return value


def _split_values(text: str) -> List[str]:
    parts = []
    for part in text.split(","):
        part = part.strip()
        if part:
            parts.append(part)
    return parts


def _to_str(value: Any) -> str:
    value = _read_all(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


def _to_bytes(value: Any) -> bytes:
    value = _read_all(value)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


def _to_bool(value: Any) -> bool:
    if isinstance(value, (int, float, Decimal)):
        return bool(value)
    return str(value).strip().lower() == "true"


def _to_int(value: Any) -> int:
    if isinstance(value, (int, float, Decimal)):
        return int(value)
    return int(str(value).strip())


def _to_float(value: Any) -> float:
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    return float(str(value).strip())


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, bytes) and len(value) == 16:
        return uuid.UUID(bytes=value)
    return uuid.UUID(str(value).strip())


def _to_ipv4(value: Any) -> ipaddress.IPv4Address:
    return ipaddress.IPv4Address(str(value).strip())


def _to_ipv6(value: Any) -> ipaddress.IPv6Address:
    return ipaddress.IPv6Address(str(value).strip())


def _to_inet(value: Any) -> Any:
    """Either address family; packed 4 or 16 byte values are accepted."""
    if isinstance(value, bytes):
        return ipaddress.ip_address(value)
    return ipaddress.ip_address(str(value).strip())


def _millis_to_datetime(millis: Any) -> datetime.datetime:
    return _EPOCH + datetime.timedelta(milliseconds=int(millis))


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, (int, float)):
        return _millis_to_datetime(value).date()
    return datetime.date.fromisoformat(str(value).strip())


def _to_time(value: Any) -> datetime.time:
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, (int, float)):
        millis = int(value)
        if not 0 <= millis < _MILLIS_PER_DAY:
            raise ValueError(f"{millis} ms is outside a single day")
        return (datetime.datetime.min + datetime.timedelta(milliseconds=millis)).time()
    return datetime.time.fromisoformat(str(value).strip())


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
        return datetime.datetime.combine(value, datetime.time.min)
    if isinstance(value, (int, float)):
        return _millis_to_datetime(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.datetime.fromisoformat(text)


def _to_list(value: Any) -> list:
    if isinstance(value, str):
        return _split_values(value)
    return list(value)


def _to_set(value: Any) -> set:
    if isinstance(value, str):
        return set(_split_values(value))
    return set(value)


def _to_dict(value: Any) -> dict:
    return dict(value)


def _to_tuple(value: Any) -> tuple:
    if isinstance(value, str):
        return tuple(_split_values(value))
    return tuple(value)


def _default_entries() -> List[Tuple[type, Any, Converter]]:
    # "null" rather than "" because the store rejects empty partition keys
    return [
        (str, "null", _to_str),
        (bytes, b"", _to_bytes),
        (bool, False, _to_bool),
        (int, 0, _to_int),
        (float, 0.0, _to_float),
        (Decimal, Decimal(0), _to_decimal),
        (uuid.UUID, uuid.uuid4(), _to_uuid),
        (ipaddress.IPv4Address, ipaddress.IPv4Address("127.0.0.1"), _to_ipv4),
        (ipaddress.IPv6Address, ipaddress.IPv6Address("::1"), _to_ipv6),
        (InetAddress, ipaddress.IPv4Address("127.0.0.1"), _to_inet),
        (datetime.date, datetime.date.today(), _to_date),
        (datetime.time, datetime.datetime.now().time(), _to_time),
        (datetime.datetime, datetime.datetime.now(), _to_datetime),
        (list, [], _to_list),
        (set, set(), _to_set),
        (dict, {}, _to_dict),
        (tuple, (), _to_tuple),
    ]


def create_default_converters() -> ConverterRegistry:
    """Build the sealed root registry."""
    registry = ConverterRegistry(name="default")
    for target_type, default, converter in _default_entries():
        registry.register(target_type, default, converter)
    return registry.seal()


def _session_to_date(value: Any) -> datetime.date:
    """Integers are days since the epoch, as the store encodes dates."""
    if isinstance(value, int) and not isinstance(value, bool):
        return _EPOCH_DATE + datetime.timedelta(days=value)
    return _to_date(value)


def _session_to_time(value: Any) -> datetime.time:
    """Integers are nanoseconds since midnight, as the store encodes times."""
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value < _NANOS_PER_DAY:
            raise ValueError(f"{value} ns is outside a single day")
        micros = value // _NANOS_PER_MICRO
        return (datetime.datetime.min + datetime.timedelta(microseconds=micros)).time()
    return _to_time(value)


def create_session_converters(root: ConverterRegistry, name: str = "session") -> ConverterRegistry:
    """Build a sealed registry for the store's wire representations.

    Overrides UUID defaults with time-based UUIDs and reads integer dates
    and times the way the store encodes them; everything else falls back
    to ``root``.
    """
    registry = ConverterRegistry(parent=root, name=name)
    registry.register(uuid.UUID, uuid.uuid1(), _to_uuid)
    registry.register(datetime.date, None, _session_to_date)
    registry.register(datetime.time, None, _session_to_time)
    return registry.seal()
