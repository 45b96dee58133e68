"""Statement classification used to label results and log records."""

from functools import lru_cache
from typing import TYPE_CHECKING, Optional

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import SqlglotError

from querybridge.core.template import PLACEHOLDER_PATTERN

if TYPE_CHECKING:
    from querybridge.core.result import OperationType

__all__ = ("detect_operation_type",)


def _operation_from_expression(expression: "Optional[exp.Expression]") -> "OperationType":
    if isinstance(expression, (exp.Select, exp.Union)):
        return "SELECT"
    if isinstance(expression, exp.Insert):
        return "INSERT"
    if isinstance(expression, exp.Update):
        return "UPDATE"
    if isinstance(expression, exp.Delete):
        return "DELETE"
    if isinstance(expression, (exp.Create, exp.Drop, exp.Alter)):
        return "DDL"
    if isinstance(expression, exp.Pragma):
        return "PRAGMA"
    if isinstance(expression, exp.Command):
        return "EXECUTE"
    return "UNKNOWN"


@lru_cache(maxsize=512)
def detect_operation_type(template: str, dialect: Optional[str] = None) -> "OperationType":
    """Classify a query template by parsing it with sqlglot.

    Placeholders are parsed as bind markers. Templates sqlglot cannot parse
    (vendor syntax, text placeholders in identifier positions) are ``UNKNOWN``.
    """
    sql = PLACEHOLDER_PATTERN.sub("?", template)
    try:
        expressions = sqlglot.parse(sql, read=dialect)
    except (SqlglotError, ValueError):
        return "UNKNOWN"
    statements = [expression for expression in expressions if expression is not None]
    if len(statements) != 1:
        return "UNKNOWN"
    return _operation_from_expression(statements[0])
