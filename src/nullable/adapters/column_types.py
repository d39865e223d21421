"""
SQLAlchemy column types for nullable values.

Bound parameters are written with ``db_value()``; fetched values are
wrapped with ``scan``, so a NULL column comes back as an invalid instance
rather than None. Plain Python values are accepted as parameters too.

    table = sa.Table('person', metadata,
                     sa.Column('name', NullStringType()),
                     sa.Column('born', NullTimeType()))
"""
import datetime
from typing import Any

import sqlalchemy as sa
from nullable.timeparse import format_datetime
from nullable.types import NullBool, NullFloat64, NullInt64, NullString
from nullable.types import NullTime, NullValue
from sqlalchemy.engine import Dialect

__all__ = [
    'NullValueType',
    'NullStringType',
    'NullInt64Type',
    'NullFloat64Type',
    'NullBoolType',
    'NullTimeType',
]


class NullValueType(sa.types.TypeDecorator):
    """Base column type; subclasses set ``impl`` and ``null_class``."""

    cache_ok = True
    null_class: type[NullValue]

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if isinstance(value, NullValue):
            return value.db_value()
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> NullValue:
        result = self.null_class()
        result.scan(value)
        return result

    @property
    def python_type(self) -> type[NullValue]:
        return self.null_class


class NullStringType(NullValueType):
    impl = sa.String
    null_class = NullString


class NullInt64Type(NullValueType):
    impl = sa.BigInteger
    null_class = NullInt64


class NullFloat64Type(NullValueType):
    impl = sa.Float
    null_class = NullFloat64


class NullBoolType(NullValueType):
    impl = sa.Boolean
    null_class = NullBool


class NullTimeType(NullValueType):
    """Timestamp column.

    SQLite has no timestamp type and SQLAlchemy drops offsets there, so
    values are stored as text in the first timestamp format instead.
    """

    impl = sa.DateTime
    null_class = NullTime

    def load_dialect_impl(self, dialect: Dialect) -> sa.types.TypeEngine:
        if dialect.name == 'sqlite':
            return dialect.type_descriptor(sa.String())
        return dialect.type_descriptor(sa.DateTime(timezone=True))

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        value = super().process_bind_param(value, dialect)
        if isinstance(value, datetime.datetime) and dialect.name == 'sqlite':
            return format_datetime(value)
        return value
