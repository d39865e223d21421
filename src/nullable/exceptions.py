"""
Exception classes for nullable value conversion.
"""


class NullValueError(Exception):
    """Base class for all nullable value errors.
    """


class ConversionError(NullValueError):
    """Error coercing a database value into a nullable scalar.
    """

    def __init__(self, value, target: str, reason: str | None = None) -> None:
        self.value = value
        self.target = target
        message = f'converting {type(value).__name__} ({value!r}) to {target}'
        if reason:
            message = f'{message}: {reason}'
        super().__init__(message)


class TimeParseError(ConversionError):
    """No configured timestamp format matched the text.

    ``pattern`` is the last pattern attempted.
    """

    def __init__(self, text: str, pattern: str, reason: str | None = None) -> None:
        self.text = text
        self.pattern = pattern
        super().__init__(text, 'datetime', f'no format matched, last tried {pattern!r}: {reason}')


class DecodeError(NullValueError):
    """Error decoding a nullable value from JSON.
    """


class EncodeError(NullValueError):
    """Error encoding a nullable value as JSON.
    """


ScanCoercionError = ConversionError
