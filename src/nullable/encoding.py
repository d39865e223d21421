"""
JSON encoding of documents that contain nullable values.

>>> from nullable.types import NullInt64, NullString
>>> dumps({'id': NullInt64(7, True), 'name': NullString()})
'{"id": 7, "name": null}'
"""
import json
from typing import Any

from nullable.exceptions import EncodeError
from nullable.types import NullValue

__all__ = ['NullJSONEncoder', 'dumps']


class NullJSONEncoder(json.JSONEncoder):
    """JSON encoder that writes nullable values as their JSON value."""

    def default(self, o: Any) -> Any:
        if isinstance(o, NullValue):
            return o.json_value()
        return super().default(o)


def dumps(obj: Any, **kwargs: Any) -> str:
    """Serialize ``obj`` to JSON text, encoding nullable values.

    NaN and infinite floats are refused with ``EncodeError``.
    """
    kwargs.setdefault('cls', NullJSONEncoder)
    try:
        return json.dumps(obj, allow_nan=False, **kwargs)
    except ValueError as exc:
        raise EncodeError(str(exc)) from exc
