"""Partition transforms applied to typed columns of values."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo

__all__ = [
    "TimeUnit",
    "DataType",
    "Column",
    "Transform",
    "TransformFunction",
    "Identity",
    "Void",
    "Year",
    "Month",
    "Day",
    "Hour",
    "Bucket",
    "Truncate",
    "murmur3_32",
    "create_transform_function",
]

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1

# Days per second as used by the day transform; intentionally not exact.
_DAY_PER_SECOND = 0.0000115741
_HOUR_PER_SECOND = 1.0 / 3600.0

_EPOCH_DATE = date(1970, 1, 1)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimeUnit(Enum):
    """Resolution of time and timestamp values."""

    SECOND = "s"
    MILLISECOND = "ms"
    MICROSECOND = "us"
    NANOSECOND = "ns"


_MICROS_PER_UNIT = {
    TimeUnit.SECOND: 1_000_000,
    TimeUnit.MILLISECOND: 1_000,
    TimeUnit.MICROSECOND: 1,
}

_KINDS = frozenset(
    {
        "boolean",
        "int32",
        "int64",
        "float32",
        "float64",
        "decimal128",
        "date32",
        "time64",
        "timestamp",
        "utf8",
        "large_utf8",
        "binary",
        "large_binary",
        "fixed_size_binary",
    }
)


@dataclass(frozen=True)
class DataType:
    """Physical type of a column.

    ``precision`` and ``scale`` belong to decimals, ``unit`` to times and
    timestamps, ``timezone`` to timestamps and ``byte_width`` to fixed-size
    binary.
    """

    kind: str
    precision: int | None = None
    scale: int | None = None
    unit: TimeUnit | None = None
    timezone: str | None = None
    byte_width: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"unknown data type kind: {self.kind!r}")
        if self.kind in ("time64", "timestamp") and self.unit is None:
            raise ValueError(f"data type {self.kind} needs a time unit")
        if self.kind == "decimal128" and (self.precision is None or self.scale is None):
            raise ValueError("decimal128 needs precision and scale")


_INT32 = DataType("int32")


@dataclass(frozen=True)
class Column:
    """A typed sequence of values; ``None`` marks a null."""

    data_type: DataType
    values: tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)


_TRANSFORM_NAMES = frozenset(
    {"identity", "void", "year", "month", "day", "hour", "bucket", "truncate"}
)


@dataclass(frozen=True)
class Transform:
    """A partition transform; ``param`` holds the bucket count or truncate width."""

    name: str
    param: int | None = None

    def __post_init__(self) -> None:
        if self.name not in _TRANSFORM_NAMES:
            raise ValueError(f"unknown transform: {self.name!r}")
        if self.name in ("bucket", "truncate") and self.param is None:
            raise ValueError(f"transform {self.name} needs a parameter")

    @staticmethod
    def bucket(n: int) -> Transform:
        return Transform("bucket", n)

    @staticmethod
    def truncate(width: int) -> Transform:
        return Transform("truncate", width)


Transform.IDENTITY = Transform("identity")
Transform.VOID = Transform("void")
Transform.YEAR = Transform("year")
Transform.MONTH = Transform("month")
Transform.DAY = Transform("day")
Transform.HOUR = Transform("hour")


def murmur3_32(data: bytes, seed: int = 0) -> int:
    """MurmurHash3 x86 32-bit hash of ``data`` as an unsigned integer."""
    c1, c2 = 0xCC9E2D51, 0x1B873593
    mask = 0xFFFFFFFF
    h = seed & mask
    length = len(data)
    tail_start = length - length % 4

    for start in range(0, tail_start, 4):
        k = int.from_bytes(data[start : start + 4], "little")
        k = (k * c1) & mask
        k = ((k << 15) | (k >> 17)) & mask
        k = (k * c2) & mask
        h ^= k
        h = ((h << 13) | (h >> 19)) & mask
        h = (h * 5 + 0xE6546B64) & mask

    tail = data[tail_start:]
    if tail:
        k = int.from_bytes(tail, "little")
        k = (k * c1) & mask
        k = ((k << 15) | (k >> 17)) & mask
        k = (k * c2) & mask
        h ^= k

    h ^= length
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & mask
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & mask
    h ^= h >> 16
    return h


def _to_signed32(v: int) -> int:
    v &= 0xFFFFFFFF
    return v - 0x1_0000_0000 if v & 0x8000_0000 else v


def _saturate_i32(x: float) -> int:
    """Truncate a float toward zero, saturating at the 32-bit bounds."""
    if math.isnan(x):
        return 0
    if x >= _I32_MAX:
        return _I32_MAX
    if x <= _I32_MIN:
        return _I32_MIN
    return int(x)


def _rem(a: int, b: int) -> int:
    """Remainder whose sign follows the dividend."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return a - b * q


def _map_values(column: Column, fn: Callable[[Any], Any]) -> Iterable[Any]:
    return (None if v is None else fn(v) for v in column.values)


def _unsupported(name: str, data_type: DataType) -> TypeError:
    return TypeError(f"{name} transform does not support data type {data_type}")


def _parse_timezone(name: str) -> tzinfo:
    if name and name[0] in "+-":
        sign = -1 if name[0] == "-" else 1
        body = name[1:].replace(":", "")
        if len(body) not in (2, 4) or not body.isdigit():
            raise ValueError(f"invalid timezone offset: {name!r}")
        hours = int(body[:2])
        minutes = int(body[2:]) if len(body) == 4 else 0
        return timezone(sign * timedelta(hours=hours, minutes=minutes))
    return ZoneInfo(name)


def _timestamp_micros(v: int, unit: TimeUnit) -> int:
    if unit is TimeUnit.NANOSECOND:
        return v // 1000
    return v * _MICROS_PER_UNIT[unit]


def _calendar_converter(data_type: DataType, transform_name: str) -> Callable[[int], date]:
    """Return a function turning a raw value into a calendar date or datetime."""
    if data_type.kind == "date32":
        return lambda v: _EPOCH_DATE + timedelta(days=v)
    if data_type.kind == "timestamp":
        unit = data_type.unit
        tz = _parse_timezone(data_type.timezone) if data_type.timezone else None

        def convert(v: int) -> datetime:
            moment = _EPOCH + timedelta(microseconds=_timestamp_micros(v, unit))
            return moment.astimezone(tz) if tz is not None else moment

        return convert
    raise _unsupported(transform_name, data_type)


class TransformFunction(ABC):
    """Turns an input column into a transformed column."""

    @abstractmethod
    def transform(self, column: Column) -> Column:
        """Return the transformed column."""


class Identity(TransformFunction):
    """Returns the input unchanged."""

    def transform(self, column: Column) -> Column:
        return column


class Void(TransformFunction):
    """Returns an all-null 32-bit integer column of the same length."""

    def transform(self, column: Column) -> Column:
        return Column(_INT32, [None] * len(column))


class Year(TransformFunction):
    """Years since 1970."""

    def transform(self, column: Column) -> Column:
        convert = _calendar_converter(column.data_type, "year")
        return Column(_INT32, _map_values(column, lambda v: convert(v).year - 1970))


class Month(TransformFunction):
    """Months since 1970-01."""

    def transform(self, column: Column) -> Column:
        convert = _calendar_converter(column.data_type, "month")

        def months(v: int) -> int:
            moment = convert(v)
            return 12 * (moment.year - 1970) + moment.month - 1

        return Column(_INT32, _map_values(column, months))


_SECONDS_DIVISOR = {
    TimeUnit.SECOND: 1.0,
    TimeUnit.MILLISECOND: 1000.0,
    TimeUnit.MICROSECOND: 1000.0 * 1000.0,
    TimeUnit.NANOSECOND: 1000.0 * 1000.0 * 1000.0,
}


class Day(TransformFunction):
    """Days since 1970-01-01."""

    def transform(self, column: Column) -> Column:
        data_type = column.data_type
        if data_type.kind == "timestamp":
            unit = data_type.unit

            def days(v: int) -> int:
                seconds = float(v)
                if unit is TimeUnit.MILLISECOND:
                    seconds = seconds / 1000.0
                elif unit is TimeUnit.MICROSECOND:
                    seconds = seconds / 1000.0 / 1000.0
                elif unit is TimeUnit.NANOSECOND:
                    seconds = seconds / 1000.0 / 1000.0 / 1000.0
                return _saturate_i32(seconds * _DAY_PER_SECOND)

            return Column(_INT32, _map_values(column, days))
        if data_type.kind == "date32":
            return Column(_INT32, _map_values(column, int))
        raise _unsupported("day", data_type)


class Hour(TransformFunction):
    """Hours since 1970-01-01 00:00."""

    def transform(self, column: Column) -> Column:
        data_type = column.data_type
        if data_type.kind != "timestamp":
            raise _unsupported("hour", data_type)
        unit = data_type.unit

        def hours(v: int) -> int:
            x = float(v) * _HOUR_PER_SECOND
            if unit is TimeUnit.MILLISECOND:
                x = x / 1000.0
            elif unit is TimeUnit.MICROSECOND:
                x = x / 1000.0 / 1000.0
            elif unit is TimeUnit.NANOSECOND:
                x = x / 1000.0 / 1000.0 / 1000.0
            return _saturate_i32(x)

        return Column(_INT32, _map_values(column, hours))


class Bucket(TransformFunction):
    """Hash bucket: ``(murmur3(x) & INT_MAX) % n``."""

    def __init__(self, mod_n: int) -> None:
        self.mod_n = mod_n

    def __repr__(self) -> str:
        return f"Bucket({self.mod_n})"

    @staticmethod
    def hash_bytes(data: bytes) -> int:
        return _to_signed32(murmur3_32(bytes(data), 0))

    @staticmethod
    def hash_int(v: int) -> int:
        return Bucket.hash_long(v)

    @staticmethod
    def hash_long(v: int) -> int:
        return Bucket.hash_bytes(v.to_bytes(8, "little", signed=True))

    @staticmethod
    def hash_date(v: int) -> int:
        """Hash of a date given as days since the epoch."""
        return Bucket.hash_int(v)

    @staticmethod
    def hash_time(v: int) -> int:
        """Hash of a time given as microseconds since midnight."""
        return Bucket.hash_long(v)

    @staticmethod
    def hash_timestamp(v: int) -> int:
        """Hash of a timestamp given as microseconds since the epoch."""
        return Bucket.hash_long(v)

    @staticmethod
    def hash_str(s: str) -> int:
        return Bucket.hash_bytes(s.encode("utf-8"))

    @staticmethod
    def hash_decimal(v: int) -> int:
        """Hash of an unscaled decimal with leading zero bytes removed."""
        stripped = v.to_bytes(16, "big", signed=True).lstrip(b"\x00")
        return Bucket.hash_bytes(stripped or b"\x00")

    def bucket_n(self, v: int) -> int:
        return (v & _I32_MAX) % abs(self.mod_n) if self.mod_n else (v & _I32_MAX) % 0

    def _nullable(self, column: Column, hasher: Callable[[Any], int]) -> Column:
        return Column(_INT32, _map_values(column, lambda v: self.bucket_n(hasher(v))))

    def _required(self, column: Column, hasher: Callable[[Any], int]) -> Column:
        def bucket(v: Any) -> int:
            if v is None:
                raise ValueError("bucket transform got a null value")
            return self.bucket_n(hasher(v))

        return Column(_INT32, [bucket(v) for v in column.values])

    def transform(self, column: Column) -> Column:
        data_type = column.data_type
        match data_type.kind:
            case "int32":
                return self._nullable(column, Bucket.hash_int)
            case "int64":
                return self._nullable(column, Bucket.hash_long)
            case "decimal128":
                return self._nullable(column, Bucket.hash_decimal)
            case "date32":
                return self._nullable(column, Bucket.hash_date)
            case "time64" if data_type.unit is TimeUnit.MICROSECOND:
                return self._nullable(column, Bucket.hash_time)
            case "timestamp" if data_type.unit is TimeUnit.MICROSECOND:
                return self._nullable(column, Bucket.hash_timestamp)
            case "utf8" | "large_utf8":
                return self._required(column, Bucket.hash_str)
            case "binary" | "large_binary" | "fixed_size_binary":
                return self._required(column, Bucket.hash_bytes)
        raise _unsupported("bucket", data_type)


class Truncate(TransformFunction):
    """Truncates numbers down to a multiple of the width and strings to a prefix."""

    def __init__(self, width: int) -> None:
        self.width = width

    def __repr__(self) -> str:
        return f"Truncate({self.width})"

    def _truncate_number(self, v: int) -> int:
        w = self.width
        return v - _rem(_rem(v, w) + w, w)

    def _truncate_string(self, v: str) -> str:
        if self.width < 0:
            raise ValueError(f"invalid truncate width for strings: {self.width}")
        encoded = v.encode("utf-8")
        if self.width > len(encoded):
            raise ValueError(
                f"truncate width {self.width} exceeds length of {v!r} in bytes"
            )
        try:
            return encoded[: self.width].decode("utf-8")
        except UnicodeDecodeError as err:
            raise ValueError(
                f"truncate width {self.width} is not a character boundary in {v!r}"
            ) from err

    def transform(self, column: Column) -> Column:
        data_type = column.data_type
        if data_type.kind in ("int32", "int64", "decimal128"):
            return Column(data_type, _map_values(column, self._truncate_number))
        if data_type.kind in ("utf8", "large_utf8"):
            return Column(data_type, _map_values(column, self._truncate_string))
        raise TypeError(
            "truncate transform only supports (int,long,decimal,string) types"
        )


def create_transform_function(transform: Transform) -> TransformFunction:
    """Create the transform function for a :class:`Transform`."""
    match transform.name:
        case "identity":
            return Identity()
        case "void":
            return Void()
        case "year":
            return Year()
        case "month":
            return Month()
        case "day":
            return Day()
        case "hour":
            return Hour()
        case "bucket":
            return Bucket(transform.param)
        case "truncate":
            return Truncate(transform.param)
    raise ValueError(f"unknown transform: {transform.name!r}")