"""Tests for positional parameter binding."""

import json
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Any

import pytest

from querybridge.core.binding import (
    MAX_32BIT_INT,
    MAX_64BIT_INT,
    BoundSlot,
    ParameterKind,
    bind_parameters,
    classify_parameter,
    to_driver_parameters,
)
from querybridge.core.template import extract_parameter_names
from querybridge.exceptions import BindingError
from querybridge.utils.serializers import to_json


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        (None, ParameterKind.NULL),
        (7, ParameterKind.INTEGER),
        (-MAX_32BIT_INT - 1, ParameterKind.INTEGER),
        (MAX_32BIT_INT + 1, ParameterKind.LONG),
        (-MAX_64BIT_INT - 1, ParameterKind.LONG),
        (1.5, ParameterKind.DECIMAL),
        (True, ParameterKind.BOOLEAN),
        (False, ParameterKind.BOOLEAN),
        ("text", ParameterKind.STRING),
        ({"a": 1}, ParameterKind.STRUCTURED),
        ([1, 2], ParameterKind.STRUCTURED),
        ((1, 2), ParameterKind.STRUCTURED),
        (MappingProxyType({"a": 1}), ParameterKind.STRUCTURED),
        (MAX_64BIT_INT + 1, ParameterKind.UNSUPPORTED),
        (b"bytes", ParameterKind.UNSUPPORTED),
        (date(2024, 1, 1), ParameterKind.UNSUPPORTED),
        (Decimal("1.5"), ParameterKind.UNSUPPORTED),
    ],
)
def test_classify_parameter(value: Any, kind: ParameterKind) -> None:
    assert classify_parameter(value) is kind


def test_prepared_query_with_single_integer_slot() -> None:
    """``{{id}}`` with ``{id: 7}`` binds one integer slot at position 1."""
    names = extract_parameter_names("SELECT * FROM t WHERE id={{id}}")
    slots = bind_parameters(names, {"id": 7})
    assert slots == [BoundSlot(position=1, name="id", value=7, kind=ParameterKind.INTEGER)]


def test_duplicate_placeholders_bind_the_same_value_twice() -> None:
    names = ["a", "b", "a"]
    slots = bind_parameters(names, {"a": "x", "b": 2})
    assert [slot.position for slot in slots] == [1, 2, 3]
    assert [slot.name for slot in slots] == names
    assert slots[0].value == slots[2].value == "x"
    assert to_driver_parameters(slots) == ("x", 2, "x")


def test_missing_parameter_binds_null() -> None:
    slots = bind_parameters(["missing"], {})
    assert slots[0].value is None
    assert slots[0].kind is ParameterKind.NULL


@pytest.mark.parametrize("value", [0.1, 1.1, 3.141592653589793, 1e-10, 123456789.123, -2.5])
def test_float_binds_as_exact_decimal_of_its_string_form(value: float) -> None:
    """Reading the bound decimal back reproduces the float exactly."""
    slot = bind_parameters(["f"], {"f": value})[0]
    assert slot.kind is ParameterKind.DECIMAL
    assert isinstance(slot.value, Decimal)
    assert slot.value == Decimal(str(value))
    assert float(slot.value) == value


@pytest.mark.parametrize("value", [{"a": [1, 2], "b": {"c": None}}, [1, "two", 3.0], ("x", True)])
def test_structured_values_bind_as_json_text(value: Any) -> None:
    slot = bind_parameters(["s"], {"s": value})[0]
    assert slot.kind is ParameterKind.STRUCTURED
    assert slot.value == to_json(value)
    assert json.loads(slot.value) == json.loads(json.dumps(value))


def test_long_and_boolean_values_keep_their_python_type() -> None:
    long_slot, bool_slot = bind_parameters(["l", "b"], {"l": MAX_32BIT_INT + 10, "b": True})
    assert long_slot.kind is ParameterKind.LONG
    assert long_slot.value == MAX_32BIT_INT + 10
    assert bool_slot.value is True


def test_unsupported_type_names_parameter_and_type() -> None:
    with pytest.raises(BindingError) as exc_info:
        bind_parameters(["ok", "when"], {"ok": 1, "when": date(2024, 1, 1)})
    assert exc_info.value.name == "when"
    assert exc_info.value.type_name == "date"
    assert "when" in str(exc_info.value)
    assert exc_info.value.code == "PREPARED_STATEMENT_BIND_PARAMETERS_ERROR"


def test_unencodable_structured_value_raises_binding_error() -> None:
    with pytest.raises(BindingError):
        bind_parameters(["s"], {"s": {"when": object()}})


def test_type_coercion_map_adapts_bound_values() -> None:
    slots = bind_parameters(
        ["f", "b", "n"],
        {"f": 0.25, "b": True, "n": None},
        type_coercion_map={ParameterKind.DECIMAL: str, ParameterKind.BOOLEAN: int, ParameterKind.NULL: str},
    )
    assert to_driver_parameters(slots) == ("0.25", 1, None)
