"""Positional binding of template placeholders to driver parameters."""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from functools import singledispatch
from typing import TYPE_CHECKING, Any, Callable, Final, Optional

from querybridge.exceptions import BindingError
from querybridge.utils.serializers import to_json

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = (
    "MAX_32BIT_INT",
    "MAX_64BIT_INT",
    "BoundSlot",
    "ParameterKind",
    "TypeCoercionMap",
    "bind_parameters",
    "classify_parameter",
    "to_driver_parameters",
)

MAX_32BIT_INT: Final[int] = 2147483647
MAX_64BIT_INT: Final[int] = 9223372036854775807


class ParameterKind(str, Enum):
    """Closed set of value kinds a placeholder may bind to."""

    NULL = "null"
    INTEGER = "integer"
    LONG = "long"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    STRING = "string"
    STRUCTURED = "structured"
    UNSUPPORTED = "unsupported"

    def __str__(self) -> str:
        return self.value


TypeCoercionMap = Mapping[ParameterKind, Callable[[Any], Any]]


@dataclass(frozen=True)
class BoundSlot:
    """One prepared-statement parameter position."""

    position: int
    """1-based bind position, the rank of the placeholder occurrence."""
    name: str
    value: Any
    """Value as handed to the driver."""
    kind: ParameterKind


@singledispatch
def classify_parameter(value: Any) -> ParameterKind:
    """Return the :class:`ParameterKind` for a runtime value.

    Types without a registered handler are :attr:`ParameterKind.UNSUPPORTED`.
    """
    if isinstance(value, Mapping):
        return ParameterKind.STRUCTURED
    return ParameterKind.UNSUPPORTED


@classify_parameter.register(type(None))
def _(value: None) -> ParameterKind:
    return ParameterKind.NULL


@classify_parameter.register(bool)
def _(value: bool) -> ParameterKind:
    return ParameterKind.BOOLEAN


@classify_parameter.register(int)
def _(value: int) -> ParameterKind:
    if -MAX_32BIT_INT - 1 <= value <= MAX_32BIT_INT:
        return ParameterKind.INTEGER
    if -MAX_64BIT_INT - 1 <= value <= MAX_64BIT_INT:
        return ParameterKind.LONG
    return ParameterKind.UNSUPPORTED


@classify_parameter.register(float)
def _(value: float) -> ParameterKind:
    return ParameterKind.DECIMAL


@classify_parameter.register(str)
def _(value: str) -> ParameterKind:
    return ParameterKind.STRING


@classify_parameter.register(list)
@classify_parameter.register(tuple)
@classify_parameter.register(dict)
def _(value: Any) -> ParameterKind:
    return ParameterKind.STRUCTURED


def _to_structured(value: Any) -> str:
    if isinstance(value, Mapping) and not isinstance(value, dict):
        value = dict(value)
    return to_json(value)


_BINDERS: "Final[dict[ParameterKind, Callable[[Any], Any]]]" = {
    ParameterKind.NULL: lambda _: None,
    ParameterKind.INTEGER: int,
    ParameterKind.LONG: int,
    # str() gives the shortest repr that round-trips, so no binary float drift.
    ParameterKind.DECIMAL: lambda v: Decimal(str(v)),
    ParameterKind.BOOLEAN: bool,
    ParameterKind.STRING: str,
    ParameterKind.STRUCTURED: _to_structured,
}


def _bind_value(name: str, value: Any, type_coercion_map: "Optional[TypeCoercionMap]") -> "tuple[Any, ParameterKind]":
    kind = classify_parameter(value)
    binder = _BINDERS.get(kind)
    if binder is None:
        raise BindingError.unsupported(name, value)
    bound = binder(value)
    if type_coercion_map and kind in type_coercion_map and bound is not None:
        bound = type_coercion_map[kind](bound)
    return bound, kind


def bind_parameters(
    names: "Sequence[str]",
    parameters: "Mapping[str, Any]",
    type_coercion_map: "Optional[TypeCoercionMap]" = None,
) -> "list[BoundSlot]":
    """Pair placeholder occurrences with parameter values, by position.

    A name missing from ``parameters`` binds SQL ``NULL``. A name occurring
    more than once is bound once per occurrence.

    Args:
        names: Placeholder names in occurrence order.
        parameters: Runtime parameter values keyed by name.
        type_coercion_map: Optional per-kind adaptation applied after binding.

    Raises:
        BindingError: A value has an unsupported type, or conversion failed.

    Returns:
        One slot per placeholder occurrence.
    """
    slots: list[BoundSlot] = []
    for index, name in enumerate(names):
        value = parameters.get(name)
        try:
            bound, kind = _bind_value(name, value, type_coercion_map)
        except BindingError:
            raise
        except Exception as exc:
            raise BindingError(str(exc) or type(exc).__name__) from exc
        slots.append(BoundSlot(position=index + 1, name=name, value=bound, kind=kind))
    return slots


def to_driver_parameters(slots: "Sequence[BoundSlot]") -> "tuple[Any, ...]":
    """Flatten bound slots into the positional tuple passed to ``cursor.execute``."""
    return tuple(slot.value for slot in sorted(slots, key=lambda slot: slot.position))
