"""
Field-Order Resolver

Turns a shape's order annotations into the tuple of field names bound to a
procedure's positional parameters. Index i of the result is parameter i+1.

Validation, in order:
1. at least one field is annotated          (NoOrderedFieldsError)
2. every order is an integer in 1..n        (InvalidOrderError)
3. no position is claimed twice             (DuplicateOrderError)
4. position 1 is claimed                    (OrderNotStartingAtOneError)
5. claimed positions are contiguous         (NonContiguousOrderError)
"""

import logging
from typing import Any, List, Optional, Tuple

from procmap.core.errors import (
    DuplicateOrderError,
    InvalidOrderError,
    NoOrderedFieldsError,
    NonContiguousOrderError,
    OrderNotStartingAtOneError,
    UnsupportedShapeError,
)
from procmap.mapping.fields import iter_shape_fields

logger = logging.getLogger(__name__)

FieldSequence = Tuple[str, ...]


def _parse_order(shape_name: str, field_name: str, raw: Any) -> int:
    """Parse a raw annotation (int or integer string) into an int."""
    if isinstance(raw, bool):
        raise InvalidOrderError(
            f"{shape_name}.{field_name}: order must be an integer, got {raw!r}",
            shape_name,
        )
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass
    raise InvalidOrderError(
        f"{shape_name}.{field_name}: order must be an integer, got {raw!r}",
        shape_name,
    )


def resolve_field_order(shape_name: str, shape: Any) -> FieldSequence:
    """
    Resolve the positional field order declared on a shape.

    Args:
        shape_name: Logical name of the shape (used in error messages)
        shape: Dataclass or pydantic model, class or instance

    Returns:
        Field names ordered by their annotation, one per bound parameter

    Raises:
        ResolutionError: If the annotations are missing, malformed,
            duplicated, not starting at 1 or not contiguous

    Example:
        >>> @dataclass
        ... class CreateUser:
        ...     email: str = ordered(2, default="")
        ...     name: str = ordered(1, default="")
        ...     note: str = ""
        >>> resolve_field_order("CreateUser", CreateUser)
        ('name', 'email')
    """
    try:
        declared = list(iter_shape_fields(shape))
    except UnsupportedShapeError as exc:
        exc.shape_name = shape_name
        raise

    slots: List[Optional[str]] = [None] * len(declared)
    annotated = 0

    for field_name, raw in declared:
        if raw is None:
            continue
        annotated += 1

        position = _parse_order(shape_name, field_name, raw)
        if position < 1 or position > len(slots):
            raise InvalidOrderError(
                f"{shape_name}.{field_name}: order {position} is outside 1..{len(slots)}",
                shape_name,
            )

        existing = slots[position - 1]
        if existing is not None:
            raise DuplicateOrderError(
                f"{shape_name}: fields {existing!r} and {field_name!r} both claim order {position}",
                shape_name,
            )
        slots[position - 1] = field_name

    if annotated == 0:
        raise NoOrderedFieldsError(
            f"Type {shape_name} has no field specified with order",
            shape_name,
        )

    if slots[0] is None:
        raise OrderNotStartingAtOneError(
            f"{shape_name}: order does not start at 1",
            shape_name,
        )

    length = slots.index(None) if None in slots else len(slots)
    if any(name is not None for name in slots[length:]):
        raise NonContiguousOrderError(
            f"{shape_name}: order is not contiguous, missing order number {length + 1}",
            shape_name,
            missing_position=length + 1,
        )

    fields = tuple(slots[:length])
    logger.debug(
        "Resolved field order",
        extra={"shape": shape_name, "param_count": len(fields)},
    )
    return fields
