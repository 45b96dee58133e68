"""SQLite-specific data dictionary for metadata queries."""

from typing import TYPE_CHECKING, Any, Final

from querybridge.core.result import Column
from querybridge.data_dictionary._base import DataDictionary, quote_identifier
from querybridge.utils.logging import get_logger

if TYPE_CHECKING:
    from querybridge.core.result import StructureBuilder

__all__ = ("SqliteDataDictionary",)

logger = get_logger("data_dictionary.sqlite")

_TABLES_SQL: Final = (
    "SELECT name, type FROM sqlite_master "
    "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%' "
    "ORDER BY name"
)


class SqliteDataDictionary(DataDictionary):
    """Metadata scan over ``sqlite_master`` and the table pragmas."""

    __slots__ = ()

    dialect = "sqlite"

    def scan(self, cursor: Any, builder: "StructureBuilder") -> None:
        tables = self.fetch(cursor, _TABLES_SQL)
        logger.debug("Found %d SQLite tables and views", len(tables))
        for name, kind in tables:
            builder.add_table(name, kind="VIEW" if kind == "view" else "TABLE")
            self._scan_columns(cursor, builder, name)
            if kind == "table":
                self._scan_indexes(cursor, builder, name)
                self._scan_foreign_keys(cursor, builder, name)

    def _scan_columns(self, cursor: Any, builder: "StructureBuilder", table: str) -> None:
        # cid, name, type, notnull, dflt_value, pk
        rows = self.fetch(cursor, f"PRAGMA table_info({quote_identifier(table)})")
        pk_columns = sorted((row[5], row[1]) for row in rows if row[5])
        for _, name, data_type, _, default_value, pk in rows:
            # A lone INTEGER PRIMARY KEY aliases the rowid and is filled in by SQLite.
            autogenerated = bool(pk) and len(pk_columns) == 1 and str(data_type).upper() == "INTEGER"
            builder.add_column(
                table,
                Column(
                    name=name,
                    data_type=data_type or None,
                    default_value=None if default_value is None else str(default_value),
                    is_autogenerated=autogenerated,
                ),
            )
        if pk_columns:
            builder.add_key(table, f"pk_{table}", "PRIMARY", [name for _, name in pk_columns])

    def _scan_indexes(self, cursor: Any, builder: "StructureBuilder", table: str) -> None:
        # seq, name, unique, origin, partial
        for row in self.fetch(cursor, f"PRAGMA index_list({quote_identifier(table)})"):
            index_name, unique, origin = row[1], row[2], row[3]
            if not unique or origin == "pk":
                continue
            # seqno, cid, name
            columns = [info[2] for info in self.fetch(cursor, f"PRAGMA index_info({quote_identifier(index_name)})")]
            builder.add_key(table, index_name, "UNIQUE", columns)

    def _scan_foreign_keys(self, cursor: Any, builder: "StructureBuilder", table: str) -> None:
        # id, seq, table, from, to, on_update, on_delete, match
        for row in self.fetch(cursor, f"PRAGMA foreign_key_list({quote_identifier(table)})"):
            builder.add_key(table, f"fk_{table}_{row[2]}_{row[0]}", "FOREIGN", [row[3]])
