"""Connection acquisition and guaranteed release of driver handles."""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

from querybridge.exceptions import ConnectionError  # noqa: A004
from querybridge.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from querybridge.typing import ConnectionPoolProtocol

__all__ = ("ResourceScope", "acquire_connection", "managed_resources", "release_resources")

logger = get_logger("core.lifecycle")


def acquire_connection(pool: "Optional[ConnectionPoolProtocol]") -> Any:
    """Borrow a connection after checking the pool can hand one out.

    Args:
        pool: The externally owned connection pool.

    Raises:
        ConnectionError: The pool is missing, closed or not running, or borrowing failed.

    Returns:
        A borrowed connection. Closing it returns it to the pool.
    """
    if pool is None or pool.is_closed or not pool.is_running:
        msg = "Connection pool is not available"
        raise ConnectionError(msg)
    try:
        return pool.borrow()
    except ConnectionError:
        raise
    except Exception as exc:
        raise ConnectionError(str(exc) or type(exc).__name__) from exc


def release_resources(*handles: Any) -> None:
    """Close every non-``None`` handle, in the order given.

    A failure closing one handle is logged and does not stop the others from
    being closed.
    """
    for handle in handles:
        if handle is None:
            continue
        try:
            handle.close()
        except Exception:
            logger.exception("close %s error", type(handle).__name__)


class ResourceScope:
    """Owns one borrowed connection and the handles opened through it."""

    __slots__ = ("_handles", "connection")

    def __init__(self, connection: Any) -> None:
        self.connection = connection
        self._handles: list[Any] = []

    def cursor(self) -> Any:
        """Open a cursor that is released together with the scope."""
        cursor = self.connection.cursor()
        self._handles.append(cursor)
        return cursor

    def track(self, handle: Any) -> Any:
        """Register an externally opened handle for release."""
        self._handles.append(handle)
        return handle

    def release(self) -> None:
        """Close handles newest first, then return the connection.

        Each handle is closed at most once; later calls close nothing.
        """
        handles, self._handles = self._handles, []
        connection, self.connection = self.connection, None
        release_resources(*reversed(handles), connection)


@contextmanager
def managed_resources(pool: "Optional[ConnectionPoolProtocol]") -> "Iterator[ResourceScope]":
    """Borrow a connection for the duration of the block.

    Every handle opened through the yielded scope is closed on exit, whether
    the block completes, raises or is interrupted.

    Yields:
        The resource scope owning the borrowed connection.
    """
    scope = ResourceScope(acquire_connection(pool))
    try:
        yield scope
    finally:
        scope.release()
