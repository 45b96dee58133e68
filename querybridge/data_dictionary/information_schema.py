"""Data dictionary for databases exposing the ANSI ``INFORMATION_SCHEMA`` views.

Works for SQL Server, MySQL/MariaDB and PostgreSQL. System schemas are
excluded from the scan.
"""

from typing import TYPE_CHECKING, Any, Final

from querybridge.core.result import Column
from querybridge.data_dictionary._base import DataDictionary
from querybridge.utils.logging import get_logger

if TYPE_CHECKING:
    from querybridge.core.result import StructureBuilder

__all__ = ("InformationSchemaDataDictionary",)

logger = get_logger("data_dictionary.information_schema")

_SYSTEM_SCHEMAS: Final = (
    "'INFORMATION_SCHEMA', 'information_schema', 'pg_catalog', 'sys', 'mysql', 'performance_schema', 'guest'"
)

_COLUMNS_SQL: Final = f"""
SELECT c.TABLE_SCHEMA, c.TABLE_NAME, t.TABLE_TYPE, c.COLUMN_NAME, c.DATA_TYPE, c.COLUMN_DEFAULT
FROM INFORMATION_SCHEMA.COLUMNS c
JOIN INFORMATION_SCHEMA.TABLES t
  ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
WHERE c.TABLE_SCHEMA NOT IN ({_SYSTEM_SCHEMAS})
ORDER BY c.TABLE_SCHEMA, c.TABLE_NAME, c.ORDINAL_POSITION
"""

_KEYS_SQL: Final = f"""
SELECT tc.TABLE_SCHEMA, tc.TABLE_NAME, tc.CONSTRAINT_NAME, tc.CONSTRAINT_TYPE, kcu.COLUMN_NAME
FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu
  ON kcu.CONSTRAINT_SCHEMA = tc.CONSTRAINT_SCHEMA
 AND kcu.CONSTRAINT_NAME = tc.CONSTRAINT_NAME
 AND kcu.TABLE_NAME = tc.TABLE_NAME
WHERE tc.CONSTRAINT_TYPE IN ('PRIMARY KEY', 'UNIQUE', 'FOREIGN KEY')
  AND tc.TABLE_SCHEMA NOT IN ({_SYSTEM_SCHEMAS})
ORDER BY tc.TABLE_SCHEMA, tc.TABLE_NAME, tc.CONSTRAINT_NAME, kcu.ORDINAL_POSITION
"""

_KEY_KINDS: Final = {"PRIMARY KEY": "PRIMARY", "UNIQUE": "UNIQUE", "FOREIGN KEY": "FOREIGN"}
_AUTOGENERATED_DEFAULT_MARKERS: Final = ("nextval(", "newid(", "newsequentialid(", "auto_increment", "identity")


def _is_autogenerated(default_value: Any) -> bool:
    if default_value is None:
        return False
    text = str(default_value).lower()
    return any(marker in text for marker in _AUTOGENERATED_DEFAULT_MARKERS)


class InformationSchemaDataDictionary(DataDictionary):
    """Metadata scan over ``INFORMATION_SCHEMA.COLUMNS`` and the key constraint views."""

    __slots__ = ()

    dialect = "ansi"

    def scan(self, cursor: Any, builder: "StructureBuilder") -> None:
        column_rows = self.fetch(cursor, _COLUMNS_SQL)
        for schema, table, table_type, name, data_type, default_value in column_rows:
            builder.add_table(table, schema=schema, kind="VIEW" if table_type == "VIEW" else "TABLE")
            builder.add_column(
                table,
                Column(
                    name=name,
                    data_type=data_type,
                    default_value=None if default_value is None else str(default_value),
                    is_autogenerated=_is_autogenerated(default_value),
                ),
                schema=schema,
            )

        key_rows = self.fetch(cursor, _KEYS_SQL)
        for schema, table, constraint_name, constraint_type, column_name in key_rows:
            builder.add_key(
                table, constraint_name, _KEY_KINDS.get(constraint_type, constraint_type), [column_name], schema=schema
            )
        logger.debug("Scanned %d column rows and %d key rows", len(column_rows), len(key_rows))
