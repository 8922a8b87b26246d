"""
Record Descriptor Interface (IRecordDescriptor)

The only contract the mapping engine needs from domain data. A record
describes which procedure it is passed to and which shape comes back.

Implementation guide:
- The record itself is the input shape; its order-annotated fields become
  the procedure's positional arguments
- Shape names are cache keys, so they must be stable and unique per shape
- new_empty_output() must return a fresh instance on every call
"""

from abc import ABC, abstractmethod
from typing import Any


class IRecordDescriptor(ABC):
    """
    Abstract interface for records passed to ProcedureRepository.

    Works as a mixin for dataclasses and pydantic models:

        @dataclass
        class CreateUser(IRecordDescriptor):
            name: str = ordered(1)
            email: str = ordered(2)

            def input_shape_name(self) -> str:
                return "CreateUser"
            ...
    """

    @abstractmethod
    def input_shape_name(self) -> str:
        """Logical name of this record's shape, used as the input cache key."""
        pass

    @abstractmethod
    def procedure_name(self) -> str:
        """Stored procedure to call with this record's fields."""
        pass

    @abstractmethod
    def output_shape_name(self) -> str:
        """Logical name of the shape returned by the procedure."""
        pass

    @abstractmethod
    def new_empty_output(self) -> Any:
        """
        Allocate an empty output record.

        Returns:
            A new dataclass or pydantic model instance whose order-annotated
            fields receive the result columns.

        Note:
            Called once per result row, so every row gets its own instance.
        """
        pass
