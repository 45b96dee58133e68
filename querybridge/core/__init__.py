"""Core query adapter components."""

from querybridge.core.binding import BoundSlot, ParameterKind, bind_parameters, classify_parameter
from querybridge.core.grid import GridRange, GridReader, normalize_grid, parse_row_offset, reconcile_headers
from querybridge.core.lifecycle import acquire_connection, managed_resources, release_resources
from querybridge.core.result import (
    Column,
    DatasourceStructure,
    ExecutionResult,
    HintMessage,
    Key,
    RowSet,
    StructureBuilder,
    Table,
    UpdateCount,
)
from querybridge.core.template import ParameterStyle, extract_parameter_names, prepare_template, render_template

__all__ = (
    "BoundSlot",
    "Column",
    "DatasourceStructure",
    "ExecutionResult",
    "GridRange",
    "GridReader",
    "HintMessage",
    "Key",
    "ParameterKind",
    "ParameterStyle",
    "RowSet",
    "StructureBuilder",
    "Table",
    "UpdateCount",
    "acquire_connection",
    "bind_parameters",
    "classify_parameter",
    "extract_parameter_names",
    "managed_resources",
    "normalize_grid",
    "parse_row_offset",
    "prepare_template",
    "reconcile_headers",
    "release_resources",
    "render_template",
)
