"""Collaborator interface contracts (ABCs)"""

from procmap.interfaces.connection import IConnection, ITransaction
from procmap.interfaces.record import IRecordDescriptor

__all__ = [
    'IConnection',
    'ITransaction',
    'IRecordDescriptor',
]
