"""
Nullable value types.

Each type pairs a scalar ``value`` with a ``valid`` flag (False means NULL)
and supports both the database value contract and JSON:

- scan(raw): populate from a driver value
- db_value(): the value to bind as a query parameter, or None
- to_json() / decode_json(data): JSON text in and out

The scalar variants (NullString, NullInt64, NullFloat64, NullBool) route
database scans and JSON decoding through the same coercion function, so
both paths accept exactly the same values. NullTime parses text against
the configured timestamp formats.

The ``new_null_*`` helpers build an instance in one expression from any
value. They discard scan errors: a value that cannot be converted yields
an invalid (NULL) instance instead of an exception.
"""
import datetime
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Self

from nullable.coercion import normalize_value, to_bool, to_float64, to_int64
from nullable.coercion import to_string
from nullable.exceptions import ConversionError, DecodeError, EncodeError
from nullable.options import TimestampOptions, get_options
from nullable.timeparse import localize, parse_datetime, parse_rfc3339
from nullable.timeparse import rfc3339

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
]

logger = logging.getLogger(__name__)

NULL_JSON = 'null'


def _reject_constant(name: str) -> Any:
    raise ValueError(f'{name} is not valid JSON')


@dataclass(eq=False)
class NullValue:
    """Base class for nullable values.

    Subclasses set ``zero`` (the value held while NULL) and implement
    ``scan`` and ``json_value``.
    """
    value: Any = None
    valid: bool = False

    zero: ClassVar[Any] = None

    def __eq__(self, other: object) -> bool:
        # the value of a NULL is never compared
        if other.__class__ is not self.__class__:
            return NotImplemented
        if not self.valid:
            return not other.valid
        return other.valid and self.value == other.value

    def scan(self, raw: Any) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        """Mark as NULL."""
        self.value, self.valid = self.zero, False

    def db_value(self) -> Any:
        """Return the value to bind into a database write, None when NULL.
        """
        if not self.valid:
            return None
        return self.value

    def json_value(self) -> Any:
        """Return the JSON-ready Python value, None when NULL."""
        return self.db_value()

    def to_json(self) -> str:
        """Encode as JSON text; NULL encodes as ``null``.
        """
        if not self.valid:
            return NULL_JSON
        try:
            return json.dumps(self.json_value(), allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise EncodeError(f'cannot encode {type(self).__name__} {self.value!r} as JSON') from exc

    def _decoded(self, data: str | bytes) -> Any:
        return json.loads(data, parse_constant=_reject_constant)

    def decode_json(self, data: str | bytes) -> None:
        """Populate from JSON text; ``null`` decodes to NULL.

        The decoded value goes through ``scan``.
        """
        try:
            decoded = self._decoded(data)
        except ValueError as exc:
            self.clear()
            raise DecodeError(f'invalid JSON for {type(self).__name__}: {data!r}') from exc
        try:
            self.scan(decoded)
        except ConversionError as exc:
            raise DecodeError(f'cannot decode {type(self).__name__} from {data!r}: {exc}') from exc

    @classmethod
    def from_json(cls, data: str | bytes) -> Self:
        """Create an instance from JSON text."""
        instance = cls()
        instance.decode_json(data)
        return instance


@dataclass(eq=False)
class _NullScalar(NullValue):
    """Nullable scalar whose scans go through a coercion function."""

    coerce: ClassVar[Callable[[Any], Any]]

    def scan(self, raw: Any) -> None:
        """Populate from a database value.

        None (and NumPy/Pandas missing markers) scan to NULL; anything else
        must coerce to the scalar kind or ``ConversionError`` is raised.
        """
        raw = normalize_value(raw)
        if raw is None:
            self.clear()
            return
        try:
            value = type(self).coerce(raw)
        except ConversionError:
            self.clear()
            raise
        self.value, self.valid = value, True


@dataclass(eq=False)
class NullString(_NullScalar):
    """A string that may be NULL."""
    value: str = ''

    zero: ClassVar[str] = ''
    coerce = staticmethod(to_string)


@dataclass(eq=False)
class NullInt64(_NullScalar):
    """A signed 64-bit integer that may be NULL."""
    value: int = 0

    zero: ClassVar[int] = 0
    coerce = staticmethod(to_int64)

    def _decoded(self, data: str | bytes) -> Any:
        # keep the literal text of numbers so large values stay exact
        decoded = json.loads(data, parse_int=str, parse_float=str,
                             parse_constant=_reject_constant)
        if decoded == '':
            return None
        if decoded is not None and not isinstance(decoded, str):
            raise ValueError(f'expected a JSON number, got {type(decoded).__name__}')
        return decoded


@dataclass(eq=False)
class NullFloat64(_NullScalar):
    """A float that may be NULL."""
    value: float = 0.0

    zero: ClassVar[float] = 0.0
    coerce = staticmethod(to_float64)


@dataclass(eq=False)
class NullBool(_NullScalar):
    """A boolean that may be NULL."""
    value: bool = False

    zero: ClassVar[bool] = False
    coerce = staticmethod(to_bool)


@dataclass(eq=False)
class NullTime(NullValue):
    """A timestamp that may be NULL.

    Text values are parsed against the configured timestamp formats.
    Values of any kind other than None, datetime, date, str or bytes scan
    to NULL without an error; drivers that hand over unexpected kinds get
    NULL rather than a failure.
    """
    value: datetime.datetime | None = None

    def scan(self, raw: Any, options: TimestampOptions | None = None) -> None:
        """Populate from a database value.

        Raises ``TimeParseError`` when text matches none of the formats.
        """
        options = options or get_options()
        raw = normalize_value(raw)
        if raw is None:
            self.clear()
            return

        if isinstance(raw, datetime.datetime):
            self.value, self.valid = localize(raw, options.default_tz), True
            return

        if isinstance(raw, datetime.date):
            midnight = datetime.datetime.combine(raw, datetime.time())
            self.value, self.valid = localize(midnight, options.default_tz), True
            return

        if isinstance(raw, str | bytes):
            self.clear()
            try:
                text = raw.decode() if isinstance(raw, bytes) else raw
            except UnicodeDecodeError as exc:
                raise ConversionError(raw, 'datetime', str(exc)) from exc
            self.value = parse_datetime(text, options.default_tz, options.formats)
            self.valid = True
            return

        logger.debug(f'Unrecognized time value type {type(raw).__name__}, scanning as NULL')
        self.clear()

    def json_value(self) -> str | None:
        if not self.valid:
            return None
        return rfc3339(self.value)

    def decode_json(self, data: str | bytes) -> None:
        """Populate from JSON text holding an RFC 3339 timestamp or ``null``.
        """
        try:
            decoded = json.loads(data, parse_constant=_reject_constant)
        except ValueError as exc:
            self.clear()
            raise DecodeError(f'invalid JSON for NullTime: {data!r}') from exc
        if decoded is None:
            self.clear()
            return
        if not isinstance(decoded, str):
            self.clear()
            raise DecodeError(f'NullTime expects a JSON string, got {type(decoded).__name__}')
        try:
            timestamp = parse_rfc3339(decoded)
        except ValueError as exc:
            self.clear()
            raise DecodeError(f'invalid timestamp for NullTime: {decoded!r}') from exc
        self.scan(timestamp)


def _best_effort(cls: type[NullValue], value: Any) -> NullValue:
    instance = cls()
    try:
        instance.scan(value)
    except ConversionError as exc:
        logger.debug(f'{cls.__name__} from {value!r} is NULL: {exc}')
        instance.clear()
    return instance


def new_null_string(value: Any) -> NullString:
    """Create a NullString by scanning ``value``; scan errors give NULL."""
    return _best_effort(NullString, value)


def new_null_int64(value: Any) -> NullInt64:
    """Create a NullInt64 by scanning ``value``; scan errors give NULL."""
    return _best_effort(NullInt64, value)


def new_null_float64(value: Any) -> NullFloat64:
    """Create a NullFloat64 by scanning ``value``; scan errors give NULL."""
    return _best_effort(NullFloat64, value)


def new_null_bool(value: Any) -> NullBool:
    """Create a NullBool by scanning ``value``; scan errors give NULL."""
    return _best_effort(NullBool, value)


def new_null_time(value: Any) -> NullTime:
    """Create a NullTime by scanning ``value``; parse errors give NULL."""
    return _best_effort(NullTime, value)
