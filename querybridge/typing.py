from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional, Protocol, Union, runtime_checkable

from typing_extensions import TypeAlias

__all__ = (
    "CloseableProtocol",
    "ConnectionPoolProtocol",
    "ConnectionProtocol",
    "CursorProtocol",
    "GridValues",
    "ParameterValue",
    "RequestParameters",
    "RowMap",
)

ParameterValue: TypeAlias = Union[None, int, float, bool, str, Mapping[str, Any], Sequence[Any]]
"""Runtime value accepted for a template placeholder."""
RequestParameters: TypeAlias = Mapping[str, Any]
RowMap: TypeAlias = dict[str, Any]
GridValues: TypeAlias = Sequence[Sequence[Any]]


@runtime_checkable
class CloseableProtocol(Protocol):
    """Anything holding a driver resource that must be closed."""

    def close(self) -> Any: ...


@runtime_checkable
class CursorProtocol(Protocol):
    """The DB-API 2.0 cursor surface the executor relies on."""

    description: "Optional[Sequence[Sequence[Any]]]"
    rowcount: int

    def execute(self, operation: str, parameters: Any = ...) -> Any: ...

    def fetchall(self) -> "list[Any]": ...

    def close(self) -> Any: ...


@runtime_checkable
class ConnectionProtocol(Protocol):
    """A borrowed DB-API 2.0 connection.

    Closing a borrowed connection hands it back to its pool.
    """

    def cursor(self) -> Any: ...

    def close(self) -> Any: ...


@runtime_checkable
class ConnectionPoolProtocol(Protocol):
    """An externally owned pool of DB-API connections."""

    @property
    def is_closed(self) -> bool: ...

    @property
    def is_running(self) -> bool: ...

    def borrow(self) -> Any: ...


if TYPE_CHECKING:
    ConnectionT = ConnectionProtocol
else:
    ConnectionT = Any
