"""
Connection Interface (IConnection, ITransaction)

Contract between the repository layer and whatever owns the database
connection. Connection strings, pooling and health checks all live behind
this interface; the mapping engine only sends call text and positional
arguments.

Implementation guide:
- Arguments are passed positionally in the order of the call text's markers
- query() returns every row eagerly; each row is indexable by column position
- Failures should surface as exceptions, never as sentinel return values
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence


class ITransaction(ABC):
    """A transactional scope holding one connection until commit or rollback."""

    @abstractmethod
    def execute(self, text: str, args: Sequence[Any]) -> Any:
        """Execute a statement inside the transaction."""
        pass

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass


class IConnection(ABC):
    """
    Abstract interface for the database connection collaborator.

    Implementations must be safe to share between threads; the repository
    issues no locking of its own around connection calls.
    """

    @abstractmethod
    def query(self, text: str, args: Sequence[Any]) -> Sequence[Sequence[Any]]:
        """
        Execute a row-producing statement.

        Args:
            text: Call text with positional markers
            args: Values for the markers, in order

        Returns:
            All result rows (empty sequence when there are none)

        Raises:
            ExecutionError: If the database rejects the call
        """
        pass

    @abstractmethod
    def execute(self, text: str, args: Sequence[Any]) -> Any:
        """
        Execute a statement and discard any result rows.

        Returns:
            Driver-specific outcome (e.g. affected row count)

        Raises:
            ExecutionError: If the database rejects the call
        """
        pass

    @abstractmethod
    def begin_transaction(self) -> ITransaction:
        """Open a transactional scope on a single connection."""
        pass
