from querybridge import exceptions
from querybridge.config import SQLITE_TYPE_COERCION_MAP, ExecutorConfig, QueryConfig, QueryExecutionContext
from querybridge.core import (
    BoundSlot,
    Column,
    DatasourceStructure,
    ExecutionResult,
    GridRange,
    GridReader,
    HintMessage,
    Key,
    ParameterKind,
    ParameterStyle,
    RowSet,
    Table,
    UpdateCount,
    extract_parameter_names,
    normalize_grid,
    reconcile_headers,
)
from querybridge.data_dictionary import DataDictionary, InformationSchemaDataDictionary, SqliteDataDictionary
from querybridge.driver import QueryExecutor
from querybridge.exceptions import (
    ArgumentError,
    BindingError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    ImproperConfigurationError,
    QueryBridgeError,
    StructureError,
)
from querybridge.utils.logging import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = (
    "ArgumentError",
    "BindingError",
    "BoundSlot",
    "Column",
    "ConnectionError",
    "DataDictionary",
    "DatasourceStructure",
    "ExecutionError",
    "ExecutionResult",
    "ExecutorConfig",
    "GridRange",
    "GridReader",
    "HintMessage",
    "ImproperConfigurationError",
    "InformationSchemaDataDictionary",
    "Key",
    "ParameterKind",
    "ParameterStyle",
    "QueryBridgeError",
    "QueryConfig",
    "QueryExecutionContext",
    "QueryExecutor",
    "RowSet",
    "SQLITE_TYPE_COERCION_MAP",
    "SqliteDataDictionary",
    "StructureError",
    "Table",
    "UpdateCount",
    "__version__",
    "configure_logging",
    "exceptions",
    "extract_parameter_names",
    "get_logger",
    "normalize_grid",
    "reconcile_headers",
)
