"""Normalized execution results and data source structure types.

Results come in two shapes:

- :class:`RowSet`: the statement produced tabular data.
- :class:`UpdateCount`: the statement reported how many rows it affected.

:class:`DatasourceStructure` describes the tables, columns and keys of a
data source. It is produced by :class:`StructureBuilder`, a mutable
accumulator confined to a single introspection call and sealed into
immutable values before it is returned.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, Optional, Union

from typing_extensions import Literal, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = (
    "DUPLICATE_COLUMN",
    "Column",
    "DatasourceStructure",
    "ExecutionResult",
    "HintMessage",
    "Key",
    "OperationType",
    "RowSet",
    "StructureBuilder",
    "Table",
    "UpdateCount",
    "duplicate_column_hints",
)

OperationType = Literal["SELECT", "INSERT", "UPDATE", "DELETE", "DDL", "PRAGMA", "EXECUTE", "UNKNOWN"]

DUPLICATE_COLUMN: Final = "DUPLICATE_COLUMN"
DUPLICATE_COLUMN_SEPARATOR: Final = "/"


@dataclass(frozen=True)
class HintMessage:
    """Non-fatal advisory attached to a successful result."""

    code: str
    args: "tuple[str, ...]" = ()

    def to_dict(self) -> "dict[str, Any]":
        return {"code": self.code, "args": list(self.args)}


@dataclass(frozen=True)
class RowSet:
    """Tabular statement outcome."""

    columns: "tuple[str, ...]"
    rows: "tuple[dict[str, Any], ...]"
    hints: "tuple[HintMessage, ...]" = ()
    operation_type: OperationType = "SELECT"

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> "dict[str, Any]":
        return {
            "columns": list(self.columns),
            "data": [dict(row) for row in self.rows],
            "hintMessages": [hint.to_dict() for hint in self.hints],
        }


@dataclass(frozen=True)
class UpdateCount:
    """Statement outcome that affected rows instead of returning them."""

    affected: int
    operation_type: OperationType = "UNKNOWN"

    def __post_init__(self) -> None:
        if self.affected < 0:
            # DB-API drivers report -1 when the count is unknown.
            object.__setattr__(self, "affected", 0)

    def to_dict(self) -> "dict[str, Any]":
        return {"affectedRows": self.affected}


ExecutionResult: TypeAlias = Union[RowSet, UpdateCount]


def duplicate_column_hints(columns: "Sequence[str]") -> "list[HintMessage]":
    """Build the advisory listing every column label that occurs more than once.

    All duplicated labels share a single ``DUPLICATE_COLUMN`` hint, joined
    with ``/`` in first-occurrence order.
    """
    counts = Counter(columns)
    duplicated = [name for name in dict.fromkeys(columns) if counts[name] > 1]
    if not duplicated:
        return []
    return [HintMessage(DUPLICATE_COLUMN, (DUPLICATE_COLUMN_SEPARATOR.join(duplicated),))]


@dataclass(frozen=True)
class Column:
    name: str
    data_type: Optional[str] = None
    default_value: Optional[str] = None
    is_autogenerated: bool = False

    def to_dict(self) -> "dict[str, Any]":
        return {
            "name": self.name,
            "type": self.data_type,
            "defaultValue": self.default_value,
            "isAutogenerated": self.is_autogenerated,
        }


@dataclass(frozen=True, order=True)
class Key:
    """Primary, unique or foreign key. Keys order by name."""

    name: str
    kind: str = field(default="PRIMARY", compare=False)
    column_names: "tuple[str, ...]" = field(default=(), compare=False)

    def to_dict(self) -> "dict[str, Any]":
        return {"name": self.name, "type": self.kind, "columnNames": list(self.column_names)}


@dataclass(frozen=True)
class Table:
    name: str
    schema: Optional[str] = None
    kind: str = "TABLE"
    columns: "tuple[Column, ...]" = ()
    keys: "tuple[Key, ...]" = ()

    @property
    def key_names(self) -> "list[str]":
        return [key.name for key in self.keys]

    def to_dict(self) -> "dict[str, Any]":
        return {
            "schema": self.schema,
            "name": self.name,
            "type": self.kind,
            "columns": [column.to_dict() for column in self.columns],
            "keys": [key.to_dict() for key in self.keys],
        }


@dataclass(frozen=True)
class DatasourceStructure:
    tables: "tuple[Table, ...]" = ()

    def get_table(self, name: str) -> Optional[Table]:
        return next((table for table in self.tables if table.name == name), None)

    def to_dict(self) -> "dict[str, Any]":
        return {"tables": [table.to_dict() for table in self.tables]}


class _TableDraft:
    __slots__ = ("columns", "keys", "kind", "name", "schema")

    def __init__(self, name: str, schema: Optional[str], kind: str) -> None:
        self.name = name
        self.schema = schema
        self.kind = kind
        self.columns: list[Column] = []
        self.keys: dict[str, list[Any]] = {}


class StructureBuilder:
    """Accumulates metadata rows per table while a scan runs.

    Tables are keyed by ``(schema, name)`` and keep the order in which they
    were first seen.
    """

    __slots__ = ("_tables",)

    def __init__(self) -> None:
        self._tables: dict[tuple[Optional[str], str], _TableDraft] = {}

    def __contains__(self, name: object) -> bool:
        return any(draft.name == name for draft in self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def add_table(self, name: str, schema: Optional[str] = None, kind: str = "TABLE") -> None:
        if (schema, name) not in self._tables:
            self._tables[schema, name] = _TableDraft(name, schema, kind)

    def add_column(self, table: str, column: Column, schema: Optional[str] = None) -> None:
        self._draft(table, schema).columns.append(column)

    def add_key(
        self, table: str, name: str, kind: str, column_names: "Iterable[str]" = (), schema: Optional[str] = None
    ) -> None:
        """Record a key, merging the columns of keys reported once per column."""
        draft = self._draft(table, schema)
        entry = draft.keys.setdefault(name, [kind, []])
        for column_name in column_names:
            if column_name not in entry[1]:
                entry[1].append(column_name)

    def build(self) -> DatasourceStructure:
        """Seal the accumulated metadata; keys are sorted ascending by name."""
        tables = []
        for draft in self._tables.values():
            keys = sorted(Key(name, kind, tuple(columns)) for name, (kind, columns) in draft.keys.items())
            tables.append(
                Table(
                    name=draft.name,
                    schema=draft.schema,
                    kind=draft.kind,
                    columns=tuple(draft.columns),
                    keys=tuple(keys),
                )
            )
        return DatasourceStructure(tables=tuple(tables))

    def _draft(self, table: str, schema: Optional[str]) -> _TableDraft:
        if (schema, table) not in self._tables:
            self.add_table(table, schema)
        return self._tables[schema, table]
