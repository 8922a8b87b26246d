"""
Database connection backed by a SQLAlchemy engine.

Provides the default IConnection implementation: engine setup from
Settings, call execution through the DB-API driver, transactional scopes
for batches, and a connectivity check.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import create_engine, text as sql_text
from sqlalchemy.engine import Connection, Engine, RootTransaction
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import StaticPool

from procmap.core.config import Settings
from procmap.core.errors import ExecutionError
from procmap.interfaces.connection import IConnection, ITransaction

logger = logging.getLogger(__name__)


def create_sync_engine(settings: Settings) -> Engine:
    """
    Create and configure the SQLAlchemy engine.

    For SQLite:
    - In-memory databases use StaticPool so every checkout sees the same database
    - check_same_thread=False lets pooled connections cross threads

    Args:
        settings: Settings carrying database_url, echo_sql and pool_pre_ping

    Returns:
        Configured Engine instance
    """
    url = settings.database_url
    is_sqlite = url.startswith("sqlite")

    engine_kwargs: Dict[str, Any] = {
        "echo": settings.echo_sql,
        "pool_pre_ping": settings.pool_pre_ping,
    }

    if is_sqlite:
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            engine_kwargs["poolclass"] = StaticPool

    return create_engine(url, **engine_kwargs)


class SqlAlchemyTransaction(ITransaction):
    """
    Transaction holding one pooled connection.

    The connection goes back to the pool on commit() or rollback().
    """

    def __init__(self, connection: Connection):
        self._connection = connection
        self._transaction: RootTransaction = connection.begin()

    def execute(self, text: str, args: Sequence[Any]) -> Any:
        try:
            result = self._connection.exec_driver_sql(text, tuple(args))
            return result.rowcount
        except DBAPIError as exc:
            raise ExecutionError(f"{text}: {exc.orig}") from exc

    def commit(self) -> None:
        try:
            self._transaction.commit()
        except DBAPIError as exc:
            raise ExecutionError(f"Commit failed: {exc.orig}") from exc
        finally:
            self._connection.close()

    def rollback(self) -> None:
        try:
            self._transaction.rollback()
        finally:
            self._connection.close()


class SqlAlchemyConnection(IConnection):
    """
    IConnection over a synchronous SQLAlchemy Engine.

    Statements go through exec_driver_sql(), so the call text must use the
    driver's own positional marker (see ``paramstyle``).

    Attributes:
        engine: Underlying SQLAlchemy engine (owns the pool)
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SqlAlchemyConnection":
        """
        Build a connection from Settings (defaults to the global settings).

        Example:
            conn = SqlAlchemyConnection.from_settings(
                Settings(database_url="mysql+pymysql://user:pw@db/app")
            )
            repo = ProcedureRepository(conn)
        """
        if settings is None:
            from procmap.core.config import settings as default_settings
            settings = default_settings
        return cls(create_sync_engine(settings))

    @property
    def paramstyle(self) -> str:
        """DB-API paramstyle of the engine's driver (e.g. "qmark", "format")."""
        return self.engine.dialect.paramstyle

    @property
    def dialect_name(self) -> str:
        """SQLAlchemy dialect name (e.g. "sqlite", "mysql")."""
        return self.engine.dialect.name

    def query(self, text: str, args: Sequence[Any]) -> List[Sequence[Any]]:
        """
        Run a row-producing call and fetch all rows.

        Runs inside engine.begin() so procedures that write before
        returning rows are committed.
        """
        try:
            with self.engine.begin() as conn:
                result = conn.exec_driver_sql(text, tuple(args))
                if not result.returns_rows:
                    return []
                return [tuple(row) for row in result.fetchall()]
        except DBAPIError as exc:
            raise ExecutionError(f"{text}: {exc.orig}") from exc

    def execute(self, text: str, args: Sequence[Any]) -> Any:
        """Run a call and return the driver's affected row count."""
        try:
            with self.engine.begin() as conn:
                result = conn.exec_driver_sql(text, tuple(args))
                return result.rowcount
        except DBAPIError as exc:
            raise ExecutionError(f"{text}: {exc.orig}") from exc

    def begin_transaction(self) -> SqlAlchemyTransaction:
        return SqlAlchemyTransaction(self.engine.connect())

    def ping(self) -> bool:
        """
        Check if the database is reachable.

        Returns:
            True if ``SELECT 1`` succeeds, False otherwise
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(sql_text("SELECT 1"))
            return True
        except DBAPIError:
            logger.warning("Database ping failed", exc_info=True)
            return False

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()
