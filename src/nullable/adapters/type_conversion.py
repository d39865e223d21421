"""
Driver adapters for nullable values.

This module binds nullable values as query parameters (Python → Database):
1. psycopg dumpers for PostgreSQL, writing NULL for invalid values
2. sqlite3 adapters, writing times as text in the first timestamp format

Reading is left to the types themselves: pass the fetched column value
to ``scan``.

Usage:
    # Get adapter registry
    adapter_registry = get_adapter_registry()

    # Apply PostgreSQL adapters to a connection
    conn = psycopg.connect(...)
    conn.adapters.update(adapter_registry.postgres())

    # Register SQLite adapters
    adapter_registry.sqlite()
"""
import logging
import sqlite3
from typing import Any

import psycopg
from nullable.timeparse import format_datetime, localize
from nullable.types import NullBool, NullFloat64, NullInt64, NullString
from nullable.types import NullTime, NullValue
from psycopg.adapt import AdaptersMap, Dumper

__all__ = [
    'AdapterRegistry',
    'get_adapter_registry',
    'adapt_null_value',
    'adapt_null_time',
]

logger = logging.getLogger(__name__)

_oid = lambda x: psycopg.postgres.types.get(x).oid


# PostgreSQL dumper classes
class NullValueDumper(Dumper):
    """Base dumper for nullable values, dumping NULL when invalid"""

    def dump(self, obj: NullValue) -> bytes | None:
        if not obj.valid:
            return None
        return self.dump_value(obj.value)

    def dump_value(self, value: Any) -> bytes:
        return str(value).encode()


class NullStringDumper(NullValueDumper):
    """Dumper for NullString"""

    oid = _oid('text')

    def dump_value(self, value: str) -> bytes:
        return value.encode()


class NullInt64Dumper(NullValueDumper):
    """Dumper for NullInt64"""

    oid = _oid('int8')


class NullFloat64Dumper(NullValueDumper):
    """Dumper for NullFloat64"""

    oid = _oid('float8')

    _special = {
        'inf': b'Infinity',
        '-inf': b'-Infinity',
        'nan': b'NaN',
    }

    def dump_value(self, value: float) -> bytes:
        text = repr(value)
        return self._special.get(text, text.encode())


class NullBoolDumper(NullValueDumper):
    """Dumper for NullBool"""

    oid = _oid('bool')

    def dump_value(self, value: bool) -> bytes:
        return b't' if value else b'f'


class NullTimeDumper(NullValueDumper):
    """Dumper for NullTime, always with an explicit offset"""

    oid = _oid('timestamptz')

    def dump_value(self, value) -> bytes:
        return localize(value).isoformat().encode()


# SQLite adapter functions
def adapt_null_value(val: NullValue) -> Any:
    """Convert a nullable value to its database value.

    >>> from nullable.types import NullInt64
    >>> adapt_null_value(NullInt64(42, True))
    42
    >>> adapt_null_value(NullInt64()) is None
    True
    """
    return val.db_value()


def adapt_null_time(val: NullTime) -> str | None:
    """Convert a NullTime to text in the first timestamp format.

    >>> import datetime
    >>> adapt_null_time(NullTime(datetime.datetime(2023, 5, 15, 14, 30, 45), True))
    '2023-05-15 14:30:45+00:00'
    """
    if not val.valid:
        return None
    return format_datetime(val.value)


class AdapterRegistry:
    """Registry for database-specific nullable value adapters"""

    DUMPERS: dict[type[NullValue], type[NullValueDumper]] = {
        NullString: NullStringDumper,
        NullInt64: NullInt64Dumper,
        NullFloat64: NullFloat64Dumper,
        NullBool: NullBoolDumper,
        NullTime: NullTimeDumper,
    }

    SCALAR_TYPES = (NullString, NullInt64, NullFloat64, NullBool)

    def postgres(self, adapters: AdaptersMap | None = None) -> AdaptersMap:
        """Create PostgreSQL adapter map

        Args:
            adapters: Adapters map to extend, default psycopg's global map

        Returns
            AdaptersMap with a dumper registered per nullable type
        """
        postgres_adapters = AdaptersMap(psycopg.adapters if adapters is None else adapters)
        for cls, dumper in self.DUMPERS.items():
            postgres_adapters.register_dumper(cls, dumper)
        return postgres_adapters

    def sqlite(self) -> None:
        """Register SQLite adapters

        Note:
            Due to SQLite's architecture, adapters are registered globally
            rather than per-connection.
        """
        for cls in self.SCALAR_TYPES:
            sqlite3.register_adapter(cls, adapt_null_value)
        sqlite3.register_adapter(NullTime, adapt_null_time)
        logger.debug('Registered SQLite adapters for nullable types')


def get_adapter_registry() -> AdapterRegistry:
    """Get the adapter registry for nullable values

    Returns
        AdapterRegistry instance
    """
    return AdapterRegistry()


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
