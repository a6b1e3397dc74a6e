"""
Storage abstraction layer.

Provides the single document store used by the mutation gateway.

Supported backends:
- Local JSON file (default, with /tmp fallback)
- Remote key/payload table (when Supabase credentials are configured)
"""

from core.storage.base import (
    BackupFailed,
    BaseStore,
    Document,
    StartupFatal,
    StorageError,
    WriteFailed,
)
from core.storage.factory import (
    create_store,
    get_storage_backend,
    StorageBackend,
)

__all__ = [
    # Abstract interface and model
    "BaseStore",
    "Document",
    # Errors
    "StorageError",
    "WriteFailed",
    "BackupFailed",
    "StartupFatal",
    # Factory functions
    "create_store",
    "get_storage_backend",
    "StorageBackend",
]
