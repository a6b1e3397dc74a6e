"""
Table API tools for the remote document backend.

Exports the abstract interface and implementations.
"""

from tools.table_api.base import TableClient, TableError, TableRequestError
from tools.table_api.mock_client import MockTableClient
from tools.table_api.postgrest_client import PostgrestTableClient

__all__ = [
    "TableClient",
    "TableError",
    "TableRequestError",
    "MockTableClient",
    "PostgrestTableClient",
]
