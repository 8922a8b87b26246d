"""
procmap: map typed records onto stored-procedure calls.

Declare a positional order on a record's fields, implement
IRecordDescriptor, and pass the record to ProcedureRepository.
"""

from procmap.core.config import BatchFailurePolicy, Settings
from procmap.core.database import SqlAlchemyConnection
from procmap.core.errors import (
    DuplicateOrderError,
    EmptyBatchError,
    ExecutionError,
    FieldAccessError,
    InvalidOrderError,
    InvalidProcedureNameError,
    MappingError,
    NoOrderedFieldsError,
    NonContiguousOrderError,
    OrderNotStartingAtOneError,
    ResolutionError,
    ScanError,
    UnsupportedShapeError,
)
from procmap.interfaces import IConnection, IRecordDescriptor, ITransaction
from procmap.mapping import MappingCache, ordered, ordered_field
from procmap.repositories.procedure import ProcedureRepository

__version__ = "0.1.0"

__all__ = [
    'BatchFailurePolicy',
    'DuplicateOrderError',
    'EmptyBatchError',
    'ExecutionError',
    'FieldAccessError',
    'IConnection',
    'IRecordDescriptor',
    'ITransaction',
    'InvalidOrderError',
    'InvalidProcedureNameError',
    'MappingCache',
    'MappingError',
    'NoOrderedFieldsError',
    'NonContiguousOrderError',
    'OrderNotStartingAtOneError',
    'ProcedureRepository',
    'ResolutionError',
    'ScanError',
    'Settings',
    'SqlAlchemyConnection',
    'UnsupportedShapeError',
    'ordered',
    'ordered_field',
]
