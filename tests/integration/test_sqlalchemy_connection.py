"""
Integration tests for SqlAlchemyConnection on in-memory SQLite.

SQLite has no stored procedures, so these tests drive the connection with
plain statements and exercise the repository through a thin IConnection
wrapper that rewrites CALL text into an INSERT.
"""

import pytest
from sqlalchemy.exc import DBAPIError

from procmap.core.config import BatchFailurePolicy, Settings
from procmap.core.database import SqlAlchemyConnection, create_sync_engine
from procmap.core.errors import ExecutionError
from procmap.interfaces import IConnection, ITransaction
from procmap.mapping import placeholder_for
from procmap.repositories.procedure import ProcedureRepository

from fakes import CreateUser

INSERT_USER = "INSERT INTO users (name, email) VALUES (?, ?)"


def user_names(conn):
    return [row[0] for row in conn.query("SELECT name FROM users ORDER BY id", [])]


class TestSqlAlchemyConnection:

    def test_execute_and_query(self, sqlite_connection):
        """
        Test writes are committed and readable through query().

        Arrange: Empty users table
        Act: Insert two rows, then select them
        Assert: Rows come back as tuples in order
        """
        assert sqlite_connection.execute(INSERT_USER, ["ada", "ada@example.com"]) == 1
        sqlite_connection.execute(INSERT_USER, ["bob", "bob@example.com"])

        rows = sqlite_connection.query("SELECT id, name, email FROM users ORDER BY id", [])

        assert rows == [(1, "ada", "ada@example.com"), (2, "bob", "bob@example.com")]

    def test_query_without_rows(self, sqlite_connection):
        assert sqlite_connection.query("SELECT id FROM users WHERE name = ?", ["nobody"]) == []

    def test_query_on_statement_without_result(self, sqlite_connection):
        assert sqlite_connection.query(INSERT_USER, ["ada", "a@example.com"]) == []
        assert user_names(sqlite_connection) == ["ada"]

    def test_driver_error_wrapped(self, sqlite_connection):
        """Test DBAPI failures surface as ExecutionError chained to the driver error."""
        sqlite_connection.execute(INSERT_USER, ["ada", "a@example.com"])

        with pytest.raises(ExecutionError) as exc_info:
            sqlite_connection.execute(INSERT_USER, ["ada", "dup@example.com"])

        assert isinstance(exc_info.value.__cause__, DBAPIError)
        assert "UNIQUE" in str(exc_info.value)

    def test_query_error_wrapped(self, sqlite_connection):
        with pytest.raises(ExecutionError):
            sqlite_connection.query("SELECT * FROM missing_table", [])

    def test_transaction_commit(self, sqlite_connection):
        tx = sqlite_connection.begin_transaction()
        tx.execute(INSERT_USER, ["ada", "a@example.com"])
        tx.execute(INSERT_USER, ["bob", "b@example.com"])
        tx.commit()

        assert user_names(sqlite_connection) == ["ada", "bob"]

    def test_transaction_rollback(self, sqlite_connection):
        tx = sqlite_connection.begin_transaction()
        tx.execute(INSERT_USER, ["ada", "a@example.com"])
        tx.rollback()

        assert user_names(sqlite_connection) == []

    def test_failed_statement_inside_transaction(self, sqlite_connection):
        """Test one failing statement leaves the others committable."""
        tx = sqlite_connection.begin_transaction()
        tx.execute(INSERT_USER, ["ada", "a@example.com"])
        with pytest.raises(ExecutionError):
            tx.execute(INSERT_USER, ["ada", "again@example.com"])
        tx.execute(INSERT_USER, ["cy", "c@example.com"])
        tx.commit()

        assert user_names(sqlite_connection) == ["ada", "cy"]

    def test_ping(self, sqlite_connection):
        assert sqlite_connection.ping() is True

    def test_paramstyle(self, sqlite_connection):
        assert sqlite_connection.paramstyle == "qmark"
        assert placeholder_for(sqlite_connection.paramstyle) == "?"
        assert sqlite_connection.dialect_name == "sqlite"


class TestCreateSyncEngine:

    def test_in_memory_sqlite_uses_static_pool(self):
        from sqlalchemy.pool import StaticPool

        engine = create_sync_engine(Settings(_env_file=None, database_url="sqlite:///:memory:"))
        try:
            assert isinstance(engine.pool, StaticPool)
            assert engine.echo is False
        finally:
            engine.dispose()

    def test_file_sqlite(self, tmp_path):
        from sqlalchemy.pool import StaticPool

        url = f"sqlite:///{tmp_path / 'procmap.db'}"
        conn = SqlAlchemyConnection.from_settings(Settings(_env_file=None, database_url=url))
        try:
            assert not isinstance(conn.engine.pool, StaticPool)
            assert conn.ping() is True
        finally:
            conn.dispose()


def call_as_insert(text):
    """Stand-in for create_user, since SQLite has no stored procedures."""
    assert text == "CALL create_user(?, ?, ?)"
    return "INSERT INTO users (name, email, age) VALUES (?, ?, ?)"


class RewritingTransaction(ITransaction):

    def __init__(self, inner):
        self.inner = inner

    def execute(self, text, args):
        return self.inner.execute(call_as_insert(text), args)

    def commit(self):
        self.inner.commit()

    def rollback(self):
        self.inner.rollback()


class CallAsInsert(IConnection):
    """IConnection routing CALL create_user(...) to an INSERT on SQLite."""

    def __init__(self, inner: SqlAlchemyConnection):
        self.inner = inner

    def query(self, text, args):
        return self.inner.query(call_as_insert(text), args)

    def execute(self, text, args):
        return self.inner.execute(call_as_insert(text), args)

    def begin_transaction(self):
        return RewritingTransaction(self.inner.begin_transaction())


class TestRepositoryOverSqlite:
    """End-to-end batch behavior against a real transaction."""

    def records(self):
        return [
            CreateUser(name="ada", email="ada@example.com"),
            CreateUser(name="ada", email="duplicate@example.com"),
            CreateUser(name="cy", email="cy@example.com"),
        ]

    def test_continue_policy_commits_surviving_rows(self, sqlite_connection):
        """
        Test a duplicate in the middle of a batch is skipped and the rest committed.

        Arrange: Three records, the second violating the UNIQUE constraint
        Act: batch_insert with the default CONTINUE policy
        Assert: No exception; first and third rows persisted
        """
        repo = ProcedureRepository(
            CallAsInsert(sqlite_connection),
            settings=Settings(_env_file=None),
        )

        repo.batch_insert(self.records())

        assert user_names(sqlite_connection) == ["ada", "cy"]

    def test_insert_and_single_insert(self, sqlite_connection):
        repo = ProcedureRepository(CallAsInsert(sqlite_connection), settings=Settings(_env_file=None))

        repo.insert(CreateUser(name="ada", email="ada@example.com", age=36))
        new_id = repo.insert_and_return_id(CreateUser(name="bob", email="bob@example.com", age=41))

        assert new_id == 0
        rows = sqlite_connection.query("SELECT name, email, age FROM users ORDER BY id", [])
        assert rows == [("ada", "ada@example.com", 36), ("bob", "bob@example.com", 41)]

    def test_abort_policy_persists_nothing(self, sqlite_connection):
        repo = ProcedureRepository(
            CallAsInsert(sqlite_connection),
            settings=Settings(_env_file=None, batch_failure_policy=BatchFailurePolicy.ABORT),
        )

        with pytest.raises(ExecutionError):
            repo.batch_insert(self.records())

        assert user_names(sqlite_connection) == []

    def test_truncate_empties_table(self, sqlite_connection):
        """
        Test truncate works on SQLite, which has no TRUNCATE statement.

        Arrange: Two users in the table
        Act: truncate("users") through a repository on the real connection
        Assert: Table is empty and the repository derived "?" from qmark
        """
        sqlite_connection.execute(INSERT_USER, ["ada", "a@example.com"])
        sqlite_connection.execute(INSERT_USER, ["bob", "b@example.com"])
        repo = ProcedureRepository(sqlite_connection, settings=Settings(_env_file=None))

        repo.truncate("users")

        assert user_names(sqlite_connection) == []
        assert repo.placeholder() == "?"
