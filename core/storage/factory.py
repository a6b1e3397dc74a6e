"""
Storage factory for creating the document store.

The backend is decided once, from configuration, when the application
starts: remote credentials present means the remote table, anything else
means the local JSON file. Everything above this module only sees a
BaseStore.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from core.logging import get_logger
from core.storage.base import BaseStore


if TYPE_CHECKING:
    from core.config import Settings
    from tools.table_api.base import TableClient


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    LOCAL = "local"
    REMOTE = "remote"


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """
    Determine which storage backend to use based on settings.

    Both the remote endpoint and its credential must be non-empty to
    select the remote table.
    """
    if settings.has_remote_credentials:
        return StorageBackend.REMOTE
    return StorageBackend.LOCAL


def create_store(
    settings: "Settings",
    table_client: Optional["TableClient"] = None,
) -> BaseStore:
    """
    Create a document store based on settings.

    Args:
        settings: Application settings
        table_client: Transport override for the remote backend; defaults
            to a PostgREST client built from settings

    Returns:
        Configured store instance (not yet set up)
    """
    backend = get_storage_backend(settings)

    if backend == StorageBackend.REMOTE:
        from core.storage.remote import RemoteTableStore

        if table_client is None:
            from tools.table_api.postgrest_client import PostgrestTableClient

            table_client = PostgrestTableClient(
                url=settings.supabase_url,
                service_key=settings.supabase_service_role,
                timeout=settings.remote_timeout_seconds,
            )

        logger.info(
            "Creating remote table store",
            table=settings.remote_table,
            history_table=settings.remote_history_table,
        )
        return RemoteTableStore(
            client=table_client,
            document_key=settings.document_key,
            table=settings.remote_table,
            history_table=settings.remote_history_table,
        )

    elif backend == StorageBackend.LOCAL:
        from core.storage.local import LocalFileStore

        logger.info("Creating local file store", data_file=settings.data_file)
        return LocalFileStore(
            data_file=settings.data_file,
            fallback_file=settings.fallback_data_file,
        )

    else:
        raise ValueError(f"Unsupported backend: {backend}")
