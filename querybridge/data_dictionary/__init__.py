"""Dialect-specific metadata scans used by structure introspection."""

from querybridge.data_dictionary._base import DataDictionary, quote_identifier
from querybridge.data_dictionary.information_schema import InformationSchemaDataDictionary
from querybridge.data_dictionary.sqlite import SqliteDataDictionary

__all__ = ("DataDictionary", "InformationSchemaDataDictionary", "SqliteDataDictionary", "quote_identifier")
