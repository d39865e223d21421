"""
Timestamp text handling for nullable time values.

This module provides:
1. parse_datetime: parse text against the ordered timestamp formats
2. format_datetime: render a datetime with the first (authoritative) format
3. rfc3339 / parse_rfc3339: the JSON representation of timestamps

Format patterns use ``strptime`` directives with two conventions:
``.%f`` marks optional fractional seconds of any length (truncated to
microseconds when read, trailing zeros trimmed when written) and ``%z`` is
written as ``+HH:MM`` (``+HH:MM:SS`` for offsets with seconds).

The default directives are read at fixed width, so ``2021-3-4`` or an
offset without a colon does not match. Formats using other directives
are left to ``strptime`` alone.

>>> parse_datetime('2021-03-04 05:06:07.5').isoformat()
'2021-03-04T05:06:07.500000+00:00'
>>> format_datetime(datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=datetime.UTC))
'2021-03-04 05:06:07+00:00'
"""
import datetime
import functools
import logging
import re
from collections.abc import Sequence

import dateutil.parser
from nullable.exceptions import TimeParseError
from nullable.options import get_options

__all__ = [
    'parse_datetime',
    'format_datetime',
    'localize',
    'rfc3339',
    'parse_rfc3339',
]

logger = logging.getLogger(__name__)

_FRACTION = re.compile(r'(?<=:\d\d)\.(\d+)')
_DIRECTIVE = re.compile(r'%.')

# fixed-width forms of the directives used by the timestamp formats
_LAYOUT = {
    '%Y': r'\d{4}',
    '%m': r'\d\d',
    '%d': r'\d\d',
    '%H': r'\d\d',
    '%M': r'\d\d',
    '%S': r'\d\d',
    '%f': r'\d{1,6}',
    '%z': r'[+-]\d\d:\d\d(?::\d\d)?',
}


def localize(dt: datetime.datetime, tz: datetime.tzinfo | None = None) -> datetime.datetime:
    """Attach ``tz`` (default: configured zone) to a naive datetime.

    Aware datetimes are returned unchanged.
    """
    if dt.tzinfo is not None:
        return dt
    if tz is None:
        tz = get_options().default_tz
    if hasattr(tz, 'localize'):
        # pytz zones
        return tz.localize(dt)
    return dt.replace(tzinfo=tz)


def _fit_fraction(text: str, fmt: str) -> tuple[str, str]:
    """Fit the fractional seconds of ``text`` to what ``fmt`` expects.
    """
    if '.%f' not in fmt:
        return text, fmt
    match = _FRACTION.search(text)
    if match is None:
        return text, fmt.replace('.%f', '')
    digits = match.group(1)[:6]
    return text[:match.start(1)] + digits + text[match.end(1):], fmt


@functools.lru_cache(maxsize=64)
def _layout(fmt: str) -> re.Pattern | None:
    """Fixed-width pattern for ``fmt``, None when it uses other directives.
    """
    parts = []
    pos = 0
    for match in _DIRECTIVE.finditer(fmt):
        directive = match.group()
        if directive not in _LAYOUT:
            return None
        parts.append(re.escape(fmt[pos:match.start()]))
        parts.append(_LAYOUT[directive])
        pos = match.end()
    parts.append(re.escape(fmt[pos:]))
    return re.compile(''.join(parts))


def _check_layout(text: str, fmt: str) -> None:
    # strptime alone accepts single-digit fields and offsets without a colon
    layout = _layout(fmt)
    if layout is not None and not layout.fullmatch(text):
        raise ValueError(f'time data {text!r} does not match layout {fmt!r}')


def _offset_text(dt: datetime.datetime) -> str:
    seconds = int(dt.utcoffset().total_seconds())
    sign = '-' if seconds < 0 else '+'
    minutes, seconds = divmod(abs(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    text = f'{sign}{hours:02d}:{minutes:02d}'
    return f'{text}:{seconds:02d}' if seconds else text


def _fraction_text(dt: datetime.datetime) -> str:
    fraction = f'{dt.microsecond:06d}'.rstrip('0')
    return f'.{fraction}' if fraction else ''


def parse_datetime(text: str, tz: datetime.tzinfo | None = None,
                   formats: Sequence[str] | None = None) -> datetime.datetime:
    """Parse timestamp text by trying each format in order.

    A single trailing ``Z`` is dropped first. Text without an offset is
    placed in ``tz`` (default: the configured zone, UTC). The first format
    that parses wins; when none does, ``TimeParseError`` names the last
    format attempted and carries its failure.

    >>> parse_datetime('2021-03-04 05:06:07.123456789-07:00').isoformat()
    '2021-03-04T05:06:07.123456-07:00'
    >>> parse_datetime('2021-03-04T05:06:07Z') == parse_datetime('2021-03-04T05:06:07')
    True
    """
    options = get_options()
    formats = options.formats if formats is None else formats
    if not formats:
        raise ValueError('at least one timestamp format is required')

    candidate = text.removesuffix('Z')
    error = None
    for fmt in formats:
        fitted, pattern = _fit_fraction(candidate, fmt)
        try:
            _check_layout(fitted, pattern)
            parsed = datetime.datetime.strptime(fitted, pattern)
        except ValueError as exc:
            logger.debug(f'Timestamp {text!r} does not match {fmt!r}: {exc}')
            error = exc
            continue
        return localize(parsed, tz if tz is not None else options.default_tz)

    raise TimeParseError(text, fmt, str(error)) from error


def format_datetime(dt: datetime.datetime, tz: datetime.tzinfo | None = None,
                    formats: Sequence[str] | None = None) -> str:
    """Render ``dt`` with the first timestamp format.

    Naive values are placed in ``tz`` (default: the configured zone) first.
    """
    formats = get_options().formats if formats is None else formats
    if not formats:
        raise ValueError('at least one timestamp format is required')

    dt = localize(dt, tz)
    fmt = formats[0]
    if '%z' in fmt:
        fmt = fmt.replace('%z', _offset_text(dt))
    if '.%f' in fmt:
        fmt = fmt.replace('.%f', _fraction_text(dt))
    return dt.strftime(fmt)


def rfc3339(dt: datetime.datetime, tz: datetime.tzinfo | None = None) -> str:
    """Render ``dt`` as RFC 3339 text with trimmed fractional seconds.

    UTC is written as ``Z``. Offsets with a seconds component (local mean
    time zones) are rendered as the same instant in UTC.

    >>> rfc3339(datetime.datetime(2021, 3, 4, 5, 6, 7, 120000, tzinfo=datetime.UTC))
    '2021-03-04T05:06:07.12Z'
    """
    dt = localize(dt, tz)
    if int(dt.utcoffset().total_seconds()) % 60:
        # RFC 3339 offsets have no seconds field
        dt = dt.astimezone(datetime.UTC)
    text = dt.replace(tzinfo=None).isoformat(timespec='seconds') + _fraction_text(dt)
    if not dt.utcoffset():
        return f'{text}Z'
    return text + _offset_text(dt)


def parse_rfc3339(text: str) -> datetime.datetime:
    """Parse RFC 3339 text; the offset is mandatory.
    """
    parsed = dateutil.parser.isoparse(text)
    if parsed.tzinfo is None:
        raise ValueError(f'timestamp {text!r} has no UTC offset')
    return parsed


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
