"""Normalization of spreadsheet-shaped grids into row maps.

A grid is a ragged list of rows whose first row holds the column headers,
paired with the A1-notation range it was read from (``Sheet1!A5:C8``). The
range's first row number is used to report each data row's position in the
source sheet, which may differ from its position in the grid when the
source was filtered.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from querybridge.exceptions import ArgumentError, ExecutionError, wrap_exceptions
from querybridge.utils.logging import get_logger
from querybridge.utils.sync_tools import async_

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = (
    "DEFAULT_ROW_INDEX_FIELD",
    "GridRange",
    "GridReader",
    "build_row_map",
    "normalize_grid",
    "parse_row_offset",
    "reconcile_headers",
)

logger = get_logger("core.grid")

DEFAULT_ROW_INDEX_FIELD: Final = "row_index"
BLANK_HEADER_PREFIX: Final = "Column-"
_ROW_OFFSET_PATTERN: Final = re.compile(r"(\d+):")


@dataclass(frozen=True)
class GridRange:
    """Values read from a spreadsheet range."""

    range: str
    values: "Sequence[Sequence[Any]]" = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: "Mapping[str, Any]") -> "GridRange":
        """Build a grid from an API-style payload with ``range`` and ``values`` keys.

        Raises:
            ArgumentError: The payload has no range.
        """
        grid_range = data.get("range")
        if not grid_range:
            msg = "Grid payload is missing its range"
            raise ArgumentError(msg)
        return cls(range=str(grid_range), values=data.get("values") or [])


def parse_row_offset(grid_range: str) -> int:
    """Return the 1-based source row of the range's first row.

    >>> parse_row_offset("Sheet1!A5:C8")
    5

    Raises:
        ArgumentError: The range does not start with a row number.
    """
    match = _ROW_OFFSET_PATTERN.search(grid_range)
    if match is None:
        msg = f"Cannot read the starting row from range {grid_range!r}"
        raise ArgumentError(msg)
    return int(match.group(1))


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value)


def reconcile_headers(headers: "Sequence[Any]", width: int, reserved: "Iterable[str]" = ()) -> "list[str]":
    """Produce ``max(len(headers), width)`` unique, non-blank column names.

    Blank or missing headers become ``Column-<n>`` (1-based). A name already
    taken, by an earlier header or by ``reserved``, gets ``_1``, ``_2``, ...
    appended until it is unique.

    >>> reconcile_headers(["X", "", "X"], 3)
    ['X', 'Column-2', 'X_1']
    """
    size = max(len(headers), width)
    taken = set(reserved)
    header_set: dict[str, None] = {}
    for index in range(size):
        name = _cell_text(headers[index]) if index < len(headers) else ""
        if not name.strip():
            name = f"{BLANK_HEADER_PREFIX}{index + 1}"
        candidate = name
        suffix = 1
        while candidate in header_set or candidate in taken:
            candidate = f"{name}_{suffix}"
            suffix += 1
        header_set[candidate] = None
    return list(header_set)


def build_row_map(
    headers: "Sequence[str]",
    row: "Sequence[Any]",
    row_index: int,
    row_index_field: str = DEFAULT_ROW_INDEX_FIELD,
) -> "dict[str, str]":
    """Map one data row onto the headers; missing trailing cells become ``""``."""
    row_map = {row_index_field: str(row_index)}
    for position, header in enumerate(headers):
        row_map[header] = _cell_text(row[position]) if position < len(row) else ""
    return row_map


def normalize_grid(grid: GridRange, row_index_field: str = DEFAULT_ROW_INDEX_FIELD) -> "list[dict[str, str]]":
    """Turn a grid into row maps keyed by its reconciled header row.

    An empty grid and a grid holding only the header row both produce ``[]``.

    Raises:
        ArgumentError: The grid range carries no row number.
    """
    values = grid.values
    if not values:
        return []
    row_offset = parse_row_offset(grid.range)
    width = max(len(row) for row in values)
    headers = reconcile_headers(values[0], width, reserved=(row_index_field,))
    return [
        build_row_map(headers, values[local_row], row_offset + local_row - 1, row_index_field)
        for local_row in range(1, len(values))
    ]


class GridReader:
    """Entry point normalizing already-fetched spreadsheet values."""

    __slots__ = ("row_index_field",)

    def __init__(self, row_index_field: str = DEFAULT_ROW_INDEX_FIELD) -> None:
        self.row_index_field = row_index_field

    def read(self, grid: "GridRange | Mapping[str, Any]") -> "list[dict[str, str]]":
        """Normalize a grid.

        Raises:
            ArgumentError: The grid range is unusable.
            ExecutionError: Any unexpected failure while normalizing.
        """
        with wrap_exceptions(ExecutionError):
            if isinstance(grid, Mapping):
                grid = GridRange.from_mapping(grid)
            rows = normalize_grid(grid, self.row_index_field)
        logger.debug("Normalized grid %s into %d rows", grid.range, len(rows))
        return rows

    async def read_async(self, grid: "GridRange | Mapping[str, Any]") -> "list[dict[str, str]]":
        """Normalize a grid on the shared worker pool."""
        return await async_(self.read)(grid)
