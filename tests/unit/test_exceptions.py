"""Tests for the exception hierarchy."""

import pytest

from querybridge.exceptions import (
    ArgumentError,
    BindingError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    QueryBridgeError,
    StructureError,
    wrap_exceptions,
)
from querybridge.utils.serializers import SerializationError


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ArgumentError(), "QUERY_ARGUMENT_ERROR"),
        (ConnectionError(), "CONNECTION_ERROR"),
        (BindingError("bad"), "PREPARED_STATEMENT_BIND_PARAMETERS_ERROR"),
        (ExecutionError(), "QUERY_EXECUTION_ERROR"),
        (StructureError(), "DATASOURCE_GET_STRUCTURE_ERROR"),
        (SerializationError("bad"), "SERIALIZATION_ERROR"),
    ],
)
def test_error_codes(error: QueryBridgeError, code: str) -> None:
    assert isinstance(error, QueryBridgeError)
    assert error.code == code
    assert str(error)


def test_error_str_and_repr() -> None:
    error = QueryBridgeError("first", "second")
    assert error.detail == "first"
    assert str(error) == "second first"
    assert repr(error) == "QueryBridgeError - first"
    assert repr(QueryBridgeError()) == "QueryBridgeError"


def test_binding_error_unsupported_message() -> None:
    error = BindingError.unsupported("when", b"x")
    assert str(error) == "Unsupported parameter type (Parameter: when, Type: bytes)"
    assert (error.name, error.type_name) == ("when", "bytes")


def test_execution_error_keeps_statement() -> None:
    error = ExecutionError("boom", sql="SELECT 1")
    assert str(error) == "boom"
    assert error.sql == "SELECT 1"


def test_wrap_exceptions_passes_domain_errors_through() -> None:
    with pytest.raises(ArgumentError), wrap_exceptions(StructureError):
        raise ArgumentError("nope")


def test_wrap_exceptions_wraps_other_errors() -> None:
    with pytest.raises(StructureError) as exc_info, wrap_exceptions(StructureError):
        raise KeyError
    assert str(exc_info.value) == "KeyError"
    assert isinstance(exc_info.value.__cause__, KeyError)
