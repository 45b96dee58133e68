"""Query execution against a pooled DB-API connection."""

import asyncio
import concurrent.futures
import logging
import time
from collections.abc import Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional, Union

from mypy_extensions import mypyc_attr

from querybridge.config import ExecutorConfig, QueryConfig, QueryExecutionContext
from querybridge.core.binding import bind_parameters, to_driver_parameters
from querybridge.core.lifecycle import managed_resources
from querybridge.core.operation import detect_operation_type
from querybridge.core.result import RowSet, UpdateCount, duplicate_column_hints
from querybridge.core.template import extract_parameter_names, prepare_template, render_template
from querybridge.driver.structure import read_structure
from querybridge.exceptions import ArgumentError, ExecutionError, StructureError, wrap_exceptions
from querybridge.utils.logging import get_logger, log_with_context
from querybridge.utils.sync_tools import async_, get_worker_pool

if TYPE_CHECKING:
    from collections.abc import Generator

    from querybridge.core.result import DatasourceStructure, ExecutionResult, OperationType
    from querybridge.data_dictionary import DataDictionary
    from querybridge.typing import ConnectionPoolProtocol, CursorProtocol
    from querybridge.utils.sync_tools import CapacityLimiter

__all__ = ("QueryExecutor",)

logger = get_logger("driver.executor")

EMPTY_QUERY_MESSAGE = "Query must not be empty"


@mypyc_attr(allow_interpreted_subclasses=True)
class QueryExecutor:
    """Runs templated queries and reads data source structure over a connection pool.

    Every call borrows its own connection, opens its own cursor and releases
    both before returning, whatever the outcome. The async variants run the
    same blocking work on the shared worker pool.

    Args:
        config: Driver-facing settings; defaults to :class:`ExecutorConfig`.
        data_dictionary: Metadata scan used by :meth:`get_structure`.
        limiter: Optional limiter for concurrent async calls.
    """

    __slots__ = ("config", "data_dictionary", "limiter")

    def __init__(
        self,
        config: "Optional[ExecutorConfig]" = None,
        data_dictionary: "Optional[DataDictionary]" = None,
        limiter: "Optional[CapacityLimiter]" = None,
    ) -> None:
        self.config = config or ExecutorConfig()
        self.data_dictionary = data_dictionary
        self.limiter = limiter

    def build_execution_context(
        self,
        query_config: "Union[QueryConfig, Mapping[str, Any]]",
        request_params: "Optional[Mapping[str, Any]]" = None,
    ) -> QueryExecutionContext:
        """Validate a query configuration and pair it with its runtime parameters.

        Raises:
            ArgumentError: The query is blank.

        Returns:
            The execution context.
        """
        if isinstance(query_config, Mapping):
            query_config = QueryConfig.from_mapping(query_config)
        query = query_config.sql.strip()
        if not query:
            raise ArgumentError(EMPTY_QUERY_MESSAGE)
        return QueryExecutionContext(
            query=query,
            request_params=dict(request_params or {}),
            disable_prepared_statement=query_config.disable_prepared_statement,
        )

    def execute_query_sync(
        self, pool: "Optional[ConnectionPoolProtocol]", context: QueryExecutionContext
    ) -> "ExecutionResult":
        """Execute a query on a connection borrowed from ``pool``.

        Raises:
            ArgumentError: The query is blank.
            ConnectionError: No connection could be borrowed.
            BindingError: A parameter cannot be bound.
            ExecutionError: The driver failed, or anything else went wrong.

        Returns:
            A :class:`RowSet` or :class:`UpdateCount`.
        """
        if not context.query.strip():
            raise ArgumentError(EMPTY_QUERY_MESSAGE)
        with wrap_exceptions(ExecutionError):
            return self._execute(pool, context)

    async def execute_query(
        self, pool: "Optional[ConnectionPoolProtocol]", context: QueryExecutionContext
    ) -> "ExecutionResult":
        """Async variant of :meth:`execute_query_sync` running on the worker pool."""
        return await async_(self.execute_query_sync, limiter=self.limiter)(pool, context)

    def get_structure_sync(self, pool: "Optional[ConnectionPoolProtocol]") -> "DatasourceStructure":
        """Read tables, columns and keys, bounded by ``config.structure_timeout``.

        The scan runs on the worker pool. On timeout the scan keeps running
        until its current driver call returns, then releases its connection.

        Raises:
            ConnectionError: No connection could be borrowed.
            StructureError: The scan failed or timed out.

        Returns:
            The data source structure.
        """
        future = get_worker_pool().submit(self._read_structure, pool)
        try:
            return future.result(timeout=self.config.structure_timeout_seconds)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise self._structure_timeout() from None

    async def get_structure(self, pool: "Optional[ConnectionPoolProtocol]") -> "DatasourceStructure":
        """Async variant of :meth:`get_structure_sync`."""
        try:
            return await asyncio.wait_for(
                async_(self._read_structure, limiter=self.limiter)(pool),
                timeout=self.config.structure_timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise self._structure_timeout() from None

    def _structure_timeout(self) -> StructureError:
        log_with_context(
            logger, logging.WARNING, "structure.timeout", timeout_ms=self.config.structure_timeout
        )
        return StructureError(f"Reading the data source structure timed out after {self.config.structure_timeout}ms")

    def _read_structure(self, pool: "Optional[ConnectionPoolProtocol]") -> "DatasourceStructure":
        if self.data_dictionary is None:
            msg = "No data dictionary configured for structure introspection"
            raise StructureError(msg)
        return read_structure(pool, self.data_dictionary)

    def _execute(self, pool: "Optional[ConnectionPoolProtocol]", context: QueryExecutionContext) -> "ExecutionResult":
        names = extract_parameter_names(context.query)
        operation = detect_operation_type(context.query, self.config.dialect)
        started = time.perf_counter()
        logger.debug("Executing %s query with %d placeholders", operation, len(names))

        with managed_resources(pool) as scope:
            if context.prepared_statement:
                slots = bind_parameters(names, context.request_params, self.config.type_coercion_map)
                sql = prepare_template(context.query, self.config.parameter_style)
                parameters: Optional[tuple[Any, ...]] = to_driver_parameters(slots)
            else:
                sql = render_template(context.query, context.request_params)
                parameters = None

            cursor = scope.cursor()
            with self.handle_database_exceptions(sql):
                if parameters:
                    cursor.execute(sql, parameters)
                else:
                    cursor.execute(sql)
                result = self._build_result(cursor, operation)

        log_with_context(
            logger,
            logging.DEBUG,
            "query.execute.complete",
            operation=operation,
            prepared=context.prepared_statement,
            parameter_count=len(names),
            result=type(result).__name__,
            rows=result.row_count if isinstance(result, RowSet) else result.affected,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        return result

    @staticmethod
    @contextmanager
    def handle_database_exceptions(sql: str) -> "Generator[None, None, None]":
        """Turn driver exceptions raised while executing ``sql`` into :class:`ExecutionError`."""
        try:
            yield
        except ExecutionError:
            raise
        except Exception as exc:
            raise ExecutionError(str(exc) or type(exc).__name__, sql=sql) from exc

    @staticmethod
    def _build_result(cursor: "CursorProtocol", operation: "OperationType") -> "ExecutionResult":
        description = cursor.description
        if description is None:
            rowcount = cursor.rowcount
            return UpdateCount(affected=0 if rowcount is None else rowcount, operation_type=operation)
        columns = tuple(str(column[0]) for column in description)
        rows = tuple(dict(zip(columns, row)) for row in cursor.fetchall())
        return RowSet(
            columns=columns,
            rows=rows,
            hints=tuple(duplicate_column_hints(columns)),
            operation_type=operation,
        )
