"""Tests for result envelopes and the structure builder."""

import pytest

from querybridge.core.result import (
    DUPLICATE_COLUMN,
    Column,
    HintMessage,
    Key,
    RowSet,
    StructureBuilder,
    UpdateCount,
    duplicate_column_hints,
)


@pytest.mark.parametrize(("reported", "expected"), [(-1, 0), (0, 0), (3, 3)])
def test_update_count_is_never_negative(reported: int, expected: int) -> None:
    assert UpdateCount(affected=reported).affected == expected


def test_update_count_envelope() -> None:
    assert UpdateCount(affected=2, operation_type="UPDATE").to_dict() == {"affectedRows": 2}


def test_duplicate_column_hints_join_all_duplicates() -> None:
    hints = duplicate_column_hints(["id", "name", "id", "code", "name", "id"])
    assert hints == [HintMessage(DUPLICATE_COLUMN, ("id/name",))]


def test_duplicate_column_hints_empty_for_unique_columns() -> None:
    assert duplicate_column_hints(["id", "name"]) == []


def test_row_set_envelope() -> None:
    row_set = RowSet(
        columns=("id", "id"),
        rows=({"id": 2},),
        hints=(HintMessage(DUPLICATE_COLUMN, ("id",)),),
    )
    assert row_set.row_count == 1
    assert row_set.to_dict() == {
        "columns": ["id", "id"],
        "data": [{"id": 2}],
        "hintMessages": [{"code": "DUPLICATE_COLUMN", "args": ["id"]}],
    }


def test_structure_builder_sorts_keys_by_name() -> None:
    builder = StructureBuilder()
    builder.add_table("orders")
    builder.add_column("orders", Column("id", "INTEGER", is_autogenerated=True))
    builder.add_key("orders", "uq_orders_code", "UNIQUE", ["code"])
    builder.add_key("orders", "fk_orders_user", "FOREIGN", ["user_id"])
    builder.add_key("orders", "pk_orders", "PRIMARY", ["id"])

    structure = builder.build()

    table = structure.tables[0]
    assert table.key_names == ["fk_orders_user", "pk_orders", "uq_orders_code"]
    assert table.keys[0].to_dict() == {"name": "fk_orders_user", "type": "FOREIGN", "columnNames": ["user_id"]}
    assert table.columns == (Column("id", "INTEGER", is_autogenerated=True),)


def test_structure_builder_merges_multi_column_keys_and_keeps_table_order() -> None:
    builder = StructureBuilder()
    builder.add_key("b", "pk_b", "PRIMARY", ["x"], schema="dbo")
    builder.add_key("b", "pk_b", "PRIMARY", ["y"], schema="dbo")
    builder.add_table("a", schema="dbo", kind="VIEW")

    structure = builder.build()

    assert [table.name for table in structure.tables] == ["b", "a"]
    assert structure.tables[0].keys == (Key("pk_b", "PRIMARY", ("x", "y")),)
    assert structure.tables[0].keys[0].column_names == ("x", "y")
    assert structure.get_table("a") is not None
    assert structure.get_table("a").kind == "VIEW"  # type: ignore[union-attr]
    assert structure.get_table("missing") is None
    assert "a" in builder


def test_structure_builder_tables_are_per_schema() -> None:
    builder = StructureBuilder()
    builder.add_table("users", schema="sales")
    builder.add_table("users", schema="hr")
    assert len(builder) == 2


def test_structure_envelope() -> None:
    builder = StructureBuilder()
    builder.add_column("t", Column("id", "INTEGER"))
    builder.add_key("t", "pk_t", "PRIMARY", ["id"])
    assert builder.build().to_dict() == {
        "tables": [
            {
                "schema": None,
                "name": "t",
                "type": "TABLE",
                "columns": [{"name": "id", "type": "INTEGER", "defaultValue": None, "isAutogenerated": False}],
                "keys": [{"name": "pk_t", "type": "PRIMARY", "columnNames": ["id"]}],
            }
        ]
    }
