# icekit

Partition transforms for columnar table data. Each transform takes a column of
values and gives back a new column, following the partitioning rules of the
table format: identity, void, year, month, day, hour, bucket and truncate.

Everything lives in the `icekit.transform` module.

## Installing

```
pip install .
```

## Columns and types

A `Column` pairs a `DataType` with a sequence of values, stored as a tuple;
`None` stands for null.

A `DataType` is built from a kind name and, where the kind needs them, extra
attributes:

| kind | extra attributes |
| --- | --- |
| `int32`, `int64`, `float32`, `float64`, `boolean` | none |
| `decimal128` | `precision`, `scale` (required); values are unscaled integers |
| `date32` | none; values are days since 1970-01-01 |
| `time64` | `unit` (required) |
| `timestamp` | `unit` (required), optional `timezone` (a zone name or an offset such as `+08:00`) |
| `utf8`, `large_utf8` | none |
| `binary`, `large_binary`, `fixed_size_binary` | optional `byte_width` |

`unit` is a `TimeUnit`: `SECOND`, `MILLISECOND`, `MICROSECOND` or
`NANOSECOND`. An unknown kind, or a missing required attribute, raises
`ValueError`.

## Choosing a transform

Describe the transform with `Transform`, then build the function that applies
it with `create_transform_function`:

```python
from icekit.transform import Column, DataType, Transform, create_transform_function

column = Column(DataType("int32"), [1, -1])
truncate = create_transform_function(Transform.truncate(10))
print(truncate.transform(column).values)   # (0, -10)

bucket = create_transform_function(Transform.bucket(16))
print(bucket.transform(Column(DataType("utf8"), ["iceberg"])).values)
```

The parameterless transforms are available as `Transform.IDENTITY`,
`Transform.VOID`, `Transform.YEAR`, `Transform.MONTH`, `Transform.DAY` and
`Transform.HOUR`.

The transform classes can also be used directly: `Identity`, `Void`, `Year`,
`Month`, `Day`, `Hour`, `Bucket(n)` and `Truncate(width)`. All of them
subclass `TransformFunction` and share its `transform(column)` method.

## What each transform does

- `Identity` returns the column unchanged.
- `Void` returns an `int32` column of the same length holding only nulls.
- `Year` and `Month` accept `date32` and `timestamp` columns and return years
  since 1970 and months since January 1970. Timestamps with a timezone are
  converted to that zone first.
- `Day` accepts `date32` columns (returned as day numbers) and `timestamp`
  columns of any unit.
- `Hour` accepts `timestamp` columns of any unit.
- `Bucket(n)` accepts `int32`, `int64`, `decimal128`, `date32`,
  microsecond `time64` and `timestamp`, the string kinds and the binary kinds.
  Nulls pass through for numeric and temporal kinds; a null string or binary
  value raises `ValueError`.
- `Truncate(width)` accepts `int32`, `int64` and `decimal128`, rounding each
  value down to a multiple of `width` (so `-1` becomes `-10` for width 10),
  and the string kinds, keeping the first `width` UTF-8 bytes. A width longer
  than the string, or one that splits a character, raises `ValueError`.

A transform given a data type it does not support raises `TypeError`.

## Hashing

`Bucket` hashes values with 32-bit Murmur3 (x86 variant, seed 0), available on
its own as `murmur3_32(data, seed)`, which returns an unsigned value. The
`Bucket.hash_*` helpers return it as a signed 32-bit integer. Integers, dates,
times and timestamps are hashed as 8 little-endian bytes, strings as UTF-8,
and decimals by the fewest big-endian bytes that hold the unscaled value:

```python
from icekit.transform import Bucket

Bucket.hash_int(34)          # 2017239379
Bucket.hash_str("iceberg")   # 1210000089
Bucket.hash_decimal(1420)    # -500754589
```

The bucket number is `(hash & 0x7FFFFFFF) % n`, computed by
`Bucket(n).bucket_n(hash)`.

## What this package does not do

It only computes partition values from columns held in memory. It does not
read or write table data or metadata files, talk to catalogs or object
storage, or produce file schemas.

## Running the tests

```
pip install .[test]
pytest
```