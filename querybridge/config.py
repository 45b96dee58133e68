"""Query and executor configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Optional

from querybridge.core.binding import ParameterKind, TypeCoercionMap
from querybridge.core.grid import DEFAULT_ROW_INDEX_FIELD
from querybridge.core.template import ParameterStyle
from querybridge.exceptions import ArgumentError, ImproperConfigurationError
from querybridge.utils.logging import get_logger

__all__ = (
    "DEFAULT_STRUCTURE_TIMEOUT_MS",
    "ENV_PREFIX",
    "ExecutorConfig",
    "QueryConfig",
    "QueryExecutionContext",
    "SQLITE_TYPE_COERCION_MAP",
)

logger = get_logger("config")

DEFAULT_STRUCTURE_TIMEOUT_MS: Final = 8000
ENV_PREFIX: Final = "QUERYBRIDGE_"
SQLITE_TYPE_COERCION_MAP: Final[TypeCoercionMap] = MappingProxyType({ParameterKind.DECIMAL: float})
"""Coercions for :mod:`sqlite3`, which cannot bind :class:`~decimal.Decimal` values."""

_TRUE_VALUES: Final = frozenset({"1", "true", "yes", "on"})


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


@dataclass(frozen=True)
class QueryConfig:
    """Query settings as stored with a saved query."""

    sql: str
    disable_prepared_statement: bool = False

    @classmethod
    def from_mapping(cls, data: "Mapping[str, Any]") -> "QueryConfig":
        """Read a query configuration; camelCase and snake_case keys are both accepted.

        Raises:
            ArgumentError: ``sql`` is missing or not a string.
        """
        sql = data.get("sql")
        if sql is None:
            sql = ""
        if not isinstance(sql, str):
            msg = f"Query must be a string, not {type(sql).__name__}"
            raise ArgumentError(msg)
        disabled = data.get("disablePreparedStatement", data.get("disable_prepared_statement", False))
        return cls(sql=sql, disable_prepared_statement=_as_bool(disabled))


@dataclass(frozen=True)
class QueryExecutionContext:
    """Everything one execution needs, validated before any I/O."""

    query: str
    request_params: "Mapping[str, Any]" = field(default_factory=dict)
    disable_prepared_statement: bool = False

    @property
    def prepared_statement(self) -> bool:
        return not self.disable_prepared_statement


@dataclass(frozen=True)
class ExecutorConfig:
    """Driver-facing settings of a :class:`~querybridge.driver.QueryExecutor`."""

    parameter_style: ParameterStyle = ParameterStyle.QMARK
    structure_timeout: int = DEFAULT_STRUCTURE_TIMEOUT_MS
    """Structure introspection timeout in milliseconds."""
    type_coercion_map: "Optional[TypeCoercionMap]" = None
    dialect: Optional[str] = None
    """sqlglot dialect used to classify statements for logging and results."""
    row_index_field: str = DEFAULT_ROW_INDEX_FIELD

    def __post_init__(self) -> None:
        if self.structure_timeout <= 0:
            msg = f"structure_timeout must be positive, got {self.structure_timeout}"
            raise ImproperConfigurationError(msg)
        if self.type_coercion_map is not None:
            unknown = [kind for kind in self.type_coercion_map if not isinstance(kind, ParameterKind)]
            if unknown:
                msg = f"type_coercion_map keys must be ParameterKind members, got {unknown!r}"
                raise ImproperConfigurationError(msg)

    @property
    def structure_timeout_seconds(self) -> float:
        return self.structure_timeout / 1000

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, environ: "Optional[Mapping[str, str]]" = None, **overrides: Any
    ) -> "ExecutorConfig":
        """Build a configuration from ``<prefix>STRUCTURE_TIMEOUT_MS``, ``<prefix>PARAMETER_STYLE`` and ``<prefix>DIALECT``.

        Args:
            prefix: Environment variable prefix.
            environ: Mapping to read instead of ``os.environ``.
            **overrides: Explicit values taking precedence over the environment.

        Raises:
            ImproperConfigurationError: A variable holds an unusable value.

        Returns:
            The executor configuration.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        timeout = env.get(f"{prefix}STRUCTURE_TIMEOUT_MS")
        if timeout:
            try:
                values["structure_timeout"] = int(timeout)
            except ValueError as exc:
                msg = f"{prefix}STRUCTURE_TIMEOUT_MS must be an integer, got {timeout!r}"
                raise ImproperConfigurationError(msg) from exc

        style = env.get(f"{prefix}PARAMETER_STYLE")
        if style:
            try:
                values["parameter_style"] = ParameterStyle(style)
            except ValueError:
                try:
                    values["parameter_style"] = ParameterStyle.from_paramstyle(style)
                except ValueError as exc:
                    raise ImproperConfigurationError(str(exc)) from exc

        dialect = env.get(f"{prefix}DIALECT")
        if dialect:
            values["dialect"] = dialect

        values.update(overrides)
        logger.debug("Executor configuration loaded from environment: %s", sorted(values))
        return cls(**values)
