"""
Exception types raised by the mapping engine.

Every stage raises its own error type and the repository layer passes it
through unchanged, so callers can tell a misconfigured shape from a driver
failure without unwrapping anything.

- ResolutionError and subclasses: invalid field-order metadata on a shape.
  These are configuration defects and are never cached or retried.
- FieldAccessError: a record is missing a field its resolved order names.
- ExecutionError: the database rejected or failed a call.
- ScanError: a result row could not be assigned onto an output record.
"""

from typing import Optional


class MappingError(Exception):
    """Base class for every error raised by procmap."""


class ResolutionError(MappingError, ValueError):
    """
    Field-order metadata on a shape is invalid.

    Attributes:
        shape_name: Logical name of the shape being resolved
    """

    def __init__(self, message: str, shape_name: Optional[str] = None):
        super().__init__(message)
        self.shape_name = shape_name


class DuplicateOrderError(ResolutionError):
    """Two fields claim the same position."""


class NonContiguousOrderError(ResolutionError):
    """
    Positions have a gap.

    Attributes:
        missing_position: First unclaimed 1-based position
    """

    def __init__(self, message: str, shape_name: Optional[str] = None, missing_position: int = 0):
        super().__init__(message, shape_name)
        self.missing_position = missing_position


class OrderNotStartingAtOneError(ResolutionError):
    """No field claims position 1."""


class NoOrderedFieldsError(ResolutionError):
    """The shape has no field carrying an order annotation."""


class InvalidOrderError(ResolutionError):
    """An order annotation is not a usable positive integer."""


class UnsupportedShapeError(ResolutionError):
    """The shape is neither a dataclass nor a pydantic model."""


class FieldAccessError(MappingError, AttributeError):
    """A record does not carry a field named by its resolved order."""


class ExecutionError(MappingError):
    """The database failed while executing a call."""


class ScanError(MappingError):
    """A result row could not be bound onto an output record."""


class InvalidProcedureNameError(MappingError, ValueError):
    """A procedure or table name is not a plain (optionally qualified) identifier."""


class EmptyBatchError(MappingError, ValueError):
    """batch_insert was called with no records."""
