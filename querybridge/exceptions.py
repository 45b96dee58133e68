from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, ClassVar, Optional

__all__ = (
    "ArgumentError",
    "BindingError",
    "ConnectionError",
    "ExecutionError",
    "ImproperConfigurationError",
    "QueryBridgeError",
    "StructureError",
    "wrap_exceptions",
)


class QueryBridgeError(Exception):
    """Base exception class from which all querybridge exceptions inherit."""

    code: ClassVar[str] = "QUERYBRIDGE_ERROR"
    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``QueryBridgeError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(QueryBridgeError):
    """Improper Configuration error.

    Raised when executor or environment configuration values cannot be used.
    """

    code = "IMPROPER_CONFIGURATION"


class ArgumentError(QueryBridgeError):
    """Invalid query arguments, detected before any I/O happens."""

    code = "QUERY_ARGUMENT_ERROR"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Invalid query argument."
        super().__init__(message)


class ConnectionError(QueryBridgeError):  # noqa: A001
    """The connection pool is unusable or could not hand out a connection."""

    code = "CONNECTION_ERROR"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Could not acquire a connection from the pool."
        super().__init__(message)


class BindingError(QueryBridgeError):
    """A parameter value could not be bound to a prepared statement slot."""

    code = "PREPARED_STATEMENT_BIND_PARAMETERS_ERROR"

    name: Optional[str]
    type_name: Optional[str]

    def __init__(self, message: str, name: Optional[str] = None, type_name: Optional[str] = None) -> None:
        detail_message = message
        if name is not None and type_name is not None:
            detail_message = f"{message} (Parameter: {name}, Type: {type_name})"
        super().__init__(detail=detail_message)
        self.name = name
        self.type_name = type_name

    @classmethod
    def unsupported(cls, name: str, value: Any) -> "BindingError":
        """Build the error raised for a value whose runtime type cannot be bound.

        Returns:
            The binding error naming the parameter and its type.
        """
        return cls("Unsupported parameter type", name=name, type_name=type(value).__name__)


class ExecutionError(QueryBridgeError):
    """Driver-level failure while executing a statement."""

    code = "QUERY_EXECUTION_ERROR"

    sql: Optional[str]

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        if message is None:
            message = "Query execution failed."
        super().__init__(detail=message)
        self.sql = sql


class StructureError(QueryBridgeError):
    """Failure or timeout while reading the data source structure."""

    code = "DATASOURCE_GET_STRUCTURE_ERROR"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Could not read the data source structure."
        super().__init__(message)


@contextmanager
def wrap_exceptions(error_type: "type[QueryBridgeError]" = ExecutionError) -> Generator[None, None, None]:
    """Let querybridge errors through and wrap anything else in ``error_type``.

    Args:
        error_type: Exception class used for unexpected failures.

    Raises:
        QueryBridgeError: The original domain error, or ``error_type`` wrapping an unexpected one.
    """
    try:
        yield
    except QueryBridgeError:
        raise
    except Exception as exc:
        raise error_type(str(exc) or type(exc).__name__) from exc
