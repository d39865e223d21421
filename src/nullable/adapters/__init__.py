from nullable.adapters.column_types import NullBoolType, NullFloat64Type
from nullable.adapters.column_types import NullInt64Type, NullStringType
from nullable.adapters.column_types import NullTimeType, NullValueType
from nullable.adapters.type_conversion import AdapterRegistry
from nullable.adapters.type_conversion import get_adapter_registry

__all__ = [
    'AdapterRegistry',
    'get_adapter_registry',
    'NullValueType',
    'NullStringType',
    'NullInt64Type',
    'NullFloat64Type',
    'NullBoolType',
    'NullTimeType',
]
