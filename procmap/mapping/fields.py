"""
Order annotations on shape fields.

A shape is a dataclass or a pydantic model. A field takes part in binding
when it carries an ``order`` entry: dataclass field metadata, or a pydantic
field's ``json_schema_extra``. Fields without one are ignored.
"""

import dataclasses
from typing import Any, Iterator, Optional, Tuple, Union

from pydantic import BaseModel, Field

from procmap.core.errors import UnsupportedShapeError

ORDER_KEY = "order"


def ordered(position: Union[int, str], **kwargs: Any) -> Any:
    """
    Declare a dataclass field bound at the given 1-based position.

        @dataclass
        class CreateUser(IRecordDescriptor):
            name: str = ordered(1, default="")
            note: str = ""              # not bound
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[ORDER_KEY] = position
    return dataclasses.field(metadata=metadata, **kwargs)


def ordered_field(position: Union[int, str], default: Any = ..., **kwargs: Any) -> Any:
    """Pydantic counterpart of ordered(): ``name: str = ordered_field(1)``."""
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[ORDER_KEY] = position
    return Field(default, json_schema_extra=extra, **kwargs)


def _shape_class(shape: Any) -> type:
    return shape if isinstance(shape, type) else type(shape)


def iter_shape_fields(shape: Any) -> Iterator[Tuple[str, Optional[Any]]]:
    """
    Yield ``(field_name, raw_order)`` for every field in declaration order.

    Args:
        shape: Dataclass or pydantic model, class or instance

    Yields:
        Field name and its raw order annotation, or None when unannotated

    Raises:
        UnsupportedShapeError: If shape is neither a dataclass nor a pydantic model
    """
    cls = _shape_class(shape)

    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            yield f.name, f.metadata.get(ORDER_KEY)
        return

    if issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra
            # Callable json_schema_extra only mutates a schema; it carries no order
            order = extra.get(ORDER_KEY) if isinstance(extra, dict) else None
            yield name, order
        return

    raise UnsupportedShapeError(
        f"{cls.__name__} is neither a dataclass nor a pydantic model"
    )
