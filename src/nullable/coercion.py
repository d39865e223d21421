"""
Coercion of database values into nullable scalars.

Every raw value first goes through ``normalize_value``, which turns the
NumPy, Pandas and PyArrow scalars a driver or DataFrame may hand over into
plain Python values and maps their missing-value markers to None. The
per-kind ``to_*`` functions then apply the scan rules shared by the
database and JSON paths, raising ``ConversionError`` on failure.
"""
import datetime
import decimal
import logging
import math
import re
from typing import Any

import numpy as np
import pandas as pd
import pyarrow as pa
from nullable.exceptions import ConversionError
from nullable.timeparse import rfc3339

__all__ = [
    'normalize_value',
    'to_string',
    'to_int64',
    'to_float64',
    'to_bool',
]

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

TRUE_STRINGS: set[str] = {'1', 't', 'T', 'TRUE', 'true', 'True'}
FALSE_STRINGS: set[str] = {'0', 'f', 'F', 'FALSE', 'false', 'False'}

_INTEGER = re.compile(r'[+-]?\d+')


def _convert_numpy_value(val: np.generic) -> Any:
    """Convert NumPy scalar to Python type."""
    if isinstance(val, np.datetime64):
        if np.isnat(val):
            return None
        logger.debug(f'Converting np.datetime64 to Python datetime: {val}')
        return pd.Timestamp(val).to_pydatetime()
    return val.item()


def normalize_value(value: Any) -> Any:
    """Convert a raw driver value to a plain Python value or None.

    >>> normalize_value(np.int32(42))
    42
    >>> normalize_value(pd.NA) is None
    True
    >>> normalize_value(pd.NaT) is None
    True
    >>> normalize_value(float('nan'))
    nan
    >>> normalize_value(memoryview(b'ab'))
    b'ab'
    """
    if value is None:
        return None

    if isinstance(value, pa.Scalar):
        value = value.as_py()

    if isinstance(value, np.generic):
        value = _convert_numpy_value(value)

    if value is None:
        return None

    # NaN is a float value, not a missing marker
    if value is pd.NA or value is pd.NaT:
        return None

    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()

    if isinstance(value, memoryview | bytearray):
        return bytes(value)

    return value


def _text(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode()
    return value


def _format_float(value: float) -> str:
    text = repr(value)
    return text.removesuffix('.0')


def to_string(value: Any) -> str:
    """Coerce a non-null value to str.

    >>> to_string(b'abc'), to_string(42), to_string(2.0), to_string(True)
    ('abc', '42', '2', 'true')
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode()
        except UnicodeDecodeError as exc:
            raise ConversionError(value, 'string', str(exc)) from exc
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int | decimal.Decimal):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, datetime.datetime):
        return rfc3339(value)
    raise ConversionError(value, 'string', 'unsupported type')


def _check_int64(value: Any, number: int) -> int:
    if not INT64_MIN <= number <= INT64_MAX:
        raise ConversionError(value, 'int64', 'value out of range')
    return number


def to_int64(value: Any) -> int:
    """Coerce a non-null value to a signed 64-bit integer.

    >>> to_int64('42'), to_int64(b'-7'), to_int64(3.0)
    (42, -7, 3)
    """
    if isinstance(value, bool):
        raise ConversionError(value, 'int64', 'booleans are not integers')
    if isinstance(value, int):
        return _check_int64(value, value)
    if isinstance(value, float | decimal.Decimal):
        if not (math.isfinite(value) and value == int(value)):
            raise ConversionError(value, 'int64', 'not an integral number')
        return _check_int64(value, int(value))
    if isinstance(value, str | bytes):
        try:
            text = _text(value)
        except UnicodeDecodeError as exc:
            raise ConversionError(value, 'int64', str(exc)) from exc
        if not _INTEGER.fullmatch(text):
            raise ConversionError(value, 'int64', 'invalid syntax')
        return _check_int64(value, int(text))
    raise ConversionError(value, 'int64', 'unsupported type')


def to_float64(value: Any) -> float:
    """Coerce a non-null value to float.

    >>> to_float64('3.25'), to_float64(2), to_float64(b'1e3')
    (3.25, 2.0, 1000.0)
    """
    if isinstance(value, bool):
        raise ConversionError(value, 'float64', 'booleans are not numbers')
    if isinstance(value, float):
        return value
    if isinstance(value, int | decimal.Decimal):
        try:
            return float(value)
        except OverflowError as exc:
            raise ConversionError(value, 'float64', str(exc)) from exc
    if isinstance(value, str | bytes):
        try:
            text = _text(value)
        except UnicodeDecodeError as exc:
            raise ConversionError(value, 'float64', str(exc)) from exc
        if text != text.strip() or '_' in text:
            raise ConversionError(value, 'float64', 'invalid syntax')
        try:
            return float(text)
        except ValueError as exc:
            raise ConversionError(value, 'float64', 'invalid syntax') from exc
    raise ConversionError(value, 'float64', 'unsupported type')


def to_bool(value: Any) -> bool:
    """Coerce a non-null value to bool.

    >>> to_bool('t'), to_bool(0), to_bool(b'TRUE')
    (True, False, True)
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in {0, 1}:
            return bool(value)
        raise ConversionError(value, 'bool', 'integer is not 0 or 1')
    if isinstance(value, str | bytes):
        try:
            text = _text(value)
        except UnicodeDecodeError as exc:
            raise ConversionError(value, 'bool', str(exc)) from exc
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        raise ConversionError(value, 'bool', 'invalid syntax')
    raise ConversionError(value, 'bool', 'unsupported type')


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
