"""
Nullable scalar values for relational database access.

Each type holds a value plus a validity flag and converts both ways
between database values and JSON:

- NullString, NullInt64, NullFloat64, NullBool, NullTime
- new_null_* helpers for best-effort construction from any value
- configure() to replace the timestamp formats used when parsing text
"""
__version__ = '0.1.0'

from nullable.encoding import NullJSONEncoder, dumps
from nullable.exceptions import ConversionError, DecodeError, EncodeError
from nullable.exceptions import NullValueError, ScanCoercionError
from nullable.exceptions import TimeParseError
from nullable.options import TIMESTAMP_FORMATS, TimestampOptions, configure
from nullable.options import get_options, reset_options
from nullable.timeparse import format_datetime, parse_datetime
from nullable.types import NullBool, NullFloat64, NullInt64, NullString
from nullable.types import NullTime, NullValue, new_null_bool
from nullable.types import new_null_float64, new_null_int64, new_null_string
from nullable.types import new_null_time

__all__ = [
    'NullValue',
    'NullString',
    'NullInt64',
    'NullFloat64',
    'NullBool',
    'NullTime',
    'new_null_string',
    'new_null_int64',
    'new_null_float64',
    'new_null_bool',
    'new_null_time',
    'NullJSONEncoder',
    'dumps',
    'TIMESTAMP_FORMATS',
    'TimestampOptions',
    'configure',
    'get_options',
    'reset_options',
    'parse_datetime',
    'format_datetime',
    'NullValueError',
    'ConversionError',
    'ScanCoercionError',
    'TimeParseError',
    'DecodeError',
    'EncodeError',
]
