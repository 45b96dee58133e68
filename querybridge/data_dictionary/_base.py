"""Base class for dialect-specific metadata scans."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from mypy_extensions import mypyc_attr

if TYPE_CHECKING:
    from querybridge.core.result import StructureBuilder

__all__ = ("DataDictionary", "quote_identifier")


def quote_identifier(name: str) -> str:
    """Quote an identifier with ANSI double quotes."""
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


@mypyc_attr(allow_interpreted_subclasses=True)
class DataDictionary(ABC):
    """Reads tables, columns and keys through a DB-API cursor.

    Implementations run their metadata queries on the cursor they are given
    and record what they find on the builder. They never open or close
    handles themselves; the caller owns the cursor's lifecycle.
    """

    __slots__ = ()

    dialect: ClassVar[str]

    @abstractmethod
    def scan(self, cursor: Any, builder: "StructureBuilder") -> None:
        """Populate ``builder`` from the data source behind ``cursor``."""

    @staticmethod
    def fetch(cursor: Any, sql: str, parameters: "tuple[Any, ...]" = ()) -> "list[Any]":
        if parameters:
            cursor.execute(sql, parameters)
        else:
            cursor.execute(sql)
        return list(cursor.fetchall())
