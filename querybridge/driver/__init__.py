"""Driver-facing execution entry points."""

from querybridge.driver.executor import QueryExecutor
from querybridge.driver.structure import read_structure

__all__ = ("QueryExecutor", "read_structure")
