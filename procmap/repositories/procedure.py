"""
Stored-procedure repository.

Maps records onto stored-procedure calls: resolve the record's field order
(cached per shape), build the CALL text, bind values positionally, execute,
and for queries scan rows back into output records.

Errors from each stage reach the caller unchanged. The one exception is
batch_insert under BatchFailurePolicy.CONTINUE, which logs failing rows and
commits whatever succeeded.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from procmap.core.config import BatchFailurePolicy, Settings
from procmap.core.errors import EmptyBatchError
from procmap.core.logging_config import log_with_context
from procmap.interfaces.connection import IConnection
from procmap.interfaces.record import IRecordDescriptor
from procmap.mapping.binder import bind_parameters
from procmap.mapping.cache import MappingCache
from procmap.mapping.materializer import materialize, scan_first_int
from procmap.mapping.resolver import FieldSequence, resolve_field_order
from procmap.mapping.statement import (
    build_statement,
    placeholder_for,
    validate_identifier,
)

logger = logging.getLogger(__name__)


class ProcedureRepository:
    """
    Repository dispatching records to stored procedures.

    Each instance owns its own input and output caches, so separate
    instances (e.g. one per test) never share resolved orders.

    Attributes:
        connection: Connection collaborator used for every call
        settings: Settings supplying the batch policy and, optionally, the placeholder
        input_cache: Resolved orders of input shapes, keyed by shape name
        output_cache: Resolved orders of output shapes, keyed by shape name
    """

    def __init__(
        self,
        connection: IConnection,
        *,
        settings: Optional[Settings] = None,
        input_cache: Optional[MappingCache] = None,
        output_cache: Optional[MappingCache] = None,
    ):
        """
        Initialize repository with a connection.

        Args:
            connection: IConnection implementation (e.g. SqlAlchemyConnection)
            settings: Settings to use; defaults to the global settings
            input_cache: Cache to share between repositories, if any
            output_cache: Cache to share between repositories, if any
        """
        if settings is None:
            from procmap.core.config import settings as default_settings
            settings = default_settings

        self.connection = connection
        self.settings = settings
        self.input_cache = input_cache if input_cache is not None else MappingCache("input")
        self.output_cache = output_cache if output_cache is not None else MappingCache("output")

    def input_fields(self, record: IRecordDescriptor) -> FieldSequence:
        """Resolved field order of the record's own shape."""
        shape_name = record.input_shape_name()
        return self.input_cache.get_or_compute(
            shape_name,
            lambda: resolve_field_order(shape_name, record),
        )

    def output_fields(self, record: IRecordDescriptor) -> FieldSequence:
        """Resolved field order of the shape the record's procedure returns."""
        shape_name = record.output_shape_name()
        return self.output_cache.get_or_compute(
            shape_name,
            lambda: resolve_field_order(shape_name, record.new_empty_output()),
        )

    def placeholder(self) -> str:
        """
        Marker used in generated CALL text.

        settings.placeholder wins when set. Otherwise the marker follows the
        connection's DB-API paramstyle; connections reporting none get "?".

        Raises:
            ValueError: If the connection's paramstyle has no positional marker
        """
        if self.settings.placeholder is not None:
            return self.settings.placeholder
        paramstyle = getattr(self.connection, "paramstyle", None)
        if paramstyle is None:
            return "?"
        return placeholder_for(paramstyle)

    def _prepare(self, record: IRecordDescriptor) -> Tuple[str, List[Any]]:
        fields = self.input_fields(record)
        procedure = record.procedure_name()

        text = build_statement(procedure, len(fields), self.placeholder())
        args = bind_parameters(record, fields)
        logger.debug(
            "Prepared call",
            extra={"procedure": procedure, "param_count": len(args)},
        )
        return text, args

    def _execute(self, record: IRecordDescriptor) -> None:
        text, args = self._prepare(record)
        self.connection.execute(text, args)

    def insert(self, record: IRecordDescriptor) -> None:
        """Call the record's procedure, discarding any result rows."""
        self._execute(record)

    def insert_and_return_id(self, record: IRecordDescriptor) -> int:
        """
        Call the record's procedure and return the id it selects.

        The procedure is expected to end with something like
        ``SELECT LAST_INSERT_ID()``.

        Returns:
            First column of the first row as an int, or 0 when no row comes back

        Raises:
            ScanError: If the value cannot be read as an integer
        """
        text, args = self._prepare(record)
        rows = self.connection.query(text, args)
        return scan_first_int(rows)

    def update(self, record: IRecordDescriptor) -> None:
        """Same as insert(); only the procedure name differs."""
        self._execute(record)

    def delete(self, record: IRecordDescriptor) -> None:
        """Same as insert(); only the procedure name differs."""
        self._execute(record)

    def batch_insert(
        self,
        records: Sequence[IRecordDescriptor],
        policy: Optional[BatchFailurePolicy] = None,
    ) -> None:
        """
        Insert records of one shape inside a single transaction.

        The field order and procedure name come from the first record and
        are reused for every row.

        Args:
            records: Non-empty list of records sharing one shape
            policy: Overrides settings.batch_failure_policy for this call

        Raises:
            EmptyBatchError: If records is empty
            ResolutionError: If the first record's shape is invalid
            Exception: Under ABORT, the first failing row's error as raised by
                the connection (after rollback); under either policy, a failed
                commit
            FieldAccessError: If a record lacks a field of the first record's
                shape (the transaction is rolled back)

        Note:
            Under CONTINUE (the default) a row whose execution raises anything
            is logged and skipped, the remaining rows still run and the
            transaction is committed. The caller gets no indication that any
            row failed, so a batch can be committed partially.
        """
        if not records:
            raise EmptyBatchError("batch_insert requires at least one record")

        if policy is None:
            policy = self.settings.batch_failure_policy

        first = records[0]
        fields = self.input_fields(first)
        procedure = first.procedure_name()

        text = build_statement(procedure, len(fields), self.placeholder())

        tx = self.connection.begin_transaction()
        failures = 0
        try:
            for index, record in enumerate(records):
                args = bind_parameters(record, fields)
                try:
                    tx.execute(text, args)
                except Exception as exc:
                    if policy is BatchFailurePolicy.ABORT:
                        raise
                    failures += 1
                    log_with_context(
                        logger,
                        "warning",
                        "Batch row failed; continuing",
                        procedure=procedure,
                        row_index=index,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
        except Exception:
            tx.rollback()
            raise

        tx.commit()
        log_with_context(
            logger,
            "info",
            "Batch committed",
            procedure=procedure,
            rows=len(records),
            failed_rows=failures,
        )

    def query(self, record: IRecordDescriptor) -> List[Any]:
        """
        Call the record's procedure and map every row onto its output shape.

        Returns:
            One new output record per row; an empty list when nothing matches

        Raises:
            ResolutionError: If the input or output shape is invalid
            ScanError: If a row does not fit the output shape
        """
        text, args = self._prepare(record)
        output_fields = self.output_fields(record)
        rows = self.connection.query(text, args)
        return materialize(record.new_empty_output, output_fields, rows)

    def truncate(self, table_name: str) -> None:
        """
        Empty a table. Intended for resetting fixtures in integration tests.

        Issues ``TRUNCATE`` (MySQL, PostgreSQL). SQLite has no TRUNCATE, so
        connections whose dialect_name is "sqlite" get ``DELETE FROM``.

        Raises:
            InvalidProcedureNameError: If table_name is not a plain identifier
        """
        validate_identifier(table_name)
        if getattr(self.connection, "dialect_name", None) == "sqlite":
            statement = f"DELETE FROM {table_name}"
        else:
            statement = f"TRUNCATE {table_name}"
        self.connection.execute(statement, [])
