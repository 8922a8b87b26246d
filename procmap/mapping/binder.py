"""
Parameter Binder

Reads a record's field values in resolved order to produce the positional
argument list for a call.
"""

from typing import Any, List, Sequence

from procmap.core.errors import FieldAccessError

_MISSING = object()


def bind_parameters(record: Any, fields: Sequence[str]) -> List[Any]:
    """
    Collect the values of ``fields`` from ``record``, in order.

    Args:
        record: Input record (dataclass or pydantic model instance)
        fields: Resolved field sequence for the record's shape

    Returns:
        One value per field, ready to pass as positional arguments

    Raises:
        FieldAccessError: If the record lacks a named field. This means the
            shape name maps to a different shape than this record's.
    """
    values = []
    for name in fields:
        value = getattr(record, name, _MISSING)
        if value is _MISSING:
            raise FieldAccessError(
                f"{type(record).__name__} has no field {name!r}"
            )
        values.append(value)
    return values
