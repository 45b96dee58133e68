"""Structure introspection over a borrowed connection."""

from typing import TYPE_CHECKING, Optional

from querybridge.core.lifecycle import managed_resources
from querybridge.core.result import StructureBuilder
from querybridge.exceptions import StructureError, wrap_exceptions
from querybridge.utils.logging import get_logger

if TYPE_CHECKING:
    from querybridge.core.result import DatasourceStructure
    from querybridge.data_dictionary import DataDictionary
    from querybridge.typing import ConnectionPoolProtocol

__all__ = ("read_structure",)

logger = get_logger("driver.structure")


def read_structure(
    pool: "Optional[ConnectionPoolProtocol]", data_dictionary: "DataDictionary"
) -> "DatasourceStructure":
    """Scan the data source behind ``pool`` with ``data_dictionary``.

    The connection and cursor are released before the builder is sealed, on
    success and on failure alike.

    Raises:
        ConnectionError: No connection could be borrowed.
        StructureError: The metadata scan failed.

    Returns:
        Tables in scan order, each with its keys sorted by name.
    """
    builder = StructureBuilder()
    with wrap_exceptions(StructureError), managed_resources(pool) as scope:
        data_dictionary.scan(scope.cursor(), builder)
    structure = builder.build()
    logger.debug("Read structure with %d tables using %s", len(structure.tables), data_dictionary.dialect)
    return structure
