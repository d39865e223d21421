"""
Timestamp options and the process-wide options registry.

The registry holds a single ``TimestampOptions`` instance consulted by
``NullTime`` parsing. Configure it once at process start, before any
value is scanned; swapping options while other threads parse is not
guarded against.
"""
import datetime
import logging
import threading
from dataclasses import dataclass, field, replace

from libb import ConfigOptions

__all__ = [
    'TIMESTAMP_FORMATS',
    'TimestampOptions',
    'get_options',
    'configure',
    'reset_options',
]

logger = logging.getLogger(__name__)

# Timestamp layouts understood by the common SQL backends and drivers. The
# first is used when writing text; when reading, they are tried in order, so
# longer layouts must precede the ones that would match a prefix of them.
# '.%f' marks optional fractional seconds.
TIMESTAMP_FORMATS: tuple[str, ...] = (
    '%Y-%m-%d %H:%M:%S.%f%z',
    '%Y-%m-%dT%H:%M:%S.%f%z',
    '%Y-%m-%d %H:%M:%S.%f',
    '%Y-%m-%dT%H:%M:%S.%f',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%dT%H:%M',
    '%Y-%m-%d',
)


@dataclass
class TimestampOptions(ConfigOptions):
    """Options

    - formats: timestamp patterns; the first is used for writing, all are
      tried in order when reading
    - default_tz: zone given to timestamps that carry no offset (default: UTC)
    """
    formats: tuple[str, ...] = field(default_factory=lambda: TIMESTAMP_FORMATS)
    default_tz: datetime.tzinfo = datetime.UTC

    def __post_init__(self):
        self.formats = tuple(self.formats)
        if not self.formats:
            raise ValueError('formats must contain at least one pattern')
        if not all(isinstance(fmt, str) and fmt for fmt in self.formats):
            raise ValueError('formats must be non-empty strings')
        if not isinstance(self.default_tz, datetime.tzinfo):
            raise ValueError(f'default_tz must be a tzinfo, got {type(self.default_tz).__name__}')


_options = TimestampOptions()
_options_lock = threading.Lock()


def get_options() -> TimestampOptions:
    """Return the active timestamp options.
    """
    return _options


def configure(options: TimestampOptions | None = None, **kw) -> TimestampOptions:
    """Replace the active timestamp options.

    Either pass a complete ``TimestampOptions`` or keyword overrides that
    are applied on top of the current options.
    """
    global _options
    with _options_lock:
        base = options if options is not None else _options
        new_options = replace(base, **kw) if kw else base
        _options = new_options
    logger.info(f'Timestamp options configured: {len(new_options.formats)} formats, '
                f'default zone {new_options.default_tz}')
    return new_options


def reset_options() -> TimestampOptions:
    """Restore the default timestamp options.
    """
    return configure(TimestampOptions())
