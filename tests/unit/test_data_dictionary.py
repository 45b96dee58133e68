"""Tests for data dictionary scans over stubbed cursors."""

from unittest.mock import MagicMock

from querybridge.core.result import StructureBuilder
from querybridge.data_dictionary import InformationSchemaDataDictionary
from querybridge.data_dictionary._base import DataDictionary, quote_identifier


def test_quote_identifier_escapes_quotes() -> None:
    assert quote_identifier("users") == '"users"'
    assert quote_identifier('we"ird') == '"we""ird"'


def test_fetch_passes_parameters_only_when_given() -> None:
    cursor = MagicMock()
    cursor.fetchall.return_value = [(1,)]

    assert DataDictionary.fetch(cursor, "SELECT 1") == [(1,)]
    cursor.execute.assert_called_once_with("SELECT 1")

    DataDictionary.fetch(cursor, "SELECT ?", (2,))
    cursor.execute.assert_called_with("SELECT ?", (2,))


def test_information_schema_scan_builds_tables_and_keys() -> None:
    cursor = MagicMock()
    cursor.fetchall.side_effect = [
        [
            ("dbo", "orders", "BASE TABLE", "id", "int", None),
            ("dbo", "orders", "BASE TABLE", "code", "varchar", None),
            ("dbo", "orders", "BASE TABLE", "user_id", "int", None),
            ("public", "users", "BASE TABLE", "id", "integer", "nextval('users_id_seq'::regclass)"),
            ("public", "active_users", "VIEW", "id", "integer", None),
        ],
        [
            ("dbo", "orders", "uq_orders_code", "UNIQUE", "code"),
            ("dbo", "orders", "pk_orders", "PRIMARY KEY", "id"),
            ("dbo", "orders", "pk_orders", "PRIMARY KEY", "code"),
            ("dbo", "orders", "fk_orders_users", "FOREIGN KEY", "user_id"),
            ("public", "users", "users_pkey", "PRIMARY KEY", "id"),
        ],
    ]
    builder = StructureBuilder()

    InformationSchemaDataDictionary().scan(cursor, builder)
    structure = builder.build()

    assert [(table.schema, table.name, table.kind) for table in structure.tables] == [
        ("dbo", "orders", "TABLE"),
        ("public", "users", "TABLE"),
        ("public", "active_users", "VIEW"),
    ]
    orders = structure.get_table("orders")
    assert orders is not None
    assert [column.name for column in orders.columns] == ["id", "code", "user_id"]
    assert [key.to_dict() for key in orders.keys] == [
        {"name": "fk_orders_users", "type": "FOREIGN", "columnNames": ["user_id"]},
        {"name": "pk_orders", "type": "PRIMARY", "columnNames": ["id", "code"]},
        {"name": "uq_orders_code", "type": "UNIQUE", "columnNames": ["code"]},
    ]
    users = structure.get_table("users")
    assert users is not None
    assert users.columns[0].is_autogenerated is True
    assert users.columns[0].default_value == "nextval('users_id_seq'::regclass)"
    assert cursor.execute.call_count == 2
