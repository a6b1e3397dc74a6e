"""
Pre-mutation snapshots.

Before the live document is overwritten, the state being replaced is
appended to the active store's history sink. Snapshots are best effort:
a failure is logged and the mutation carries on.
"""

from core.logging import get_logger
from core.storage.base import BaseStore, Document


logger = get_logger(__name__)


class SnapshotManager:
    """Writes history snapshots through a store, swallowing failures."""

    def __init__(self, store: BaseStore):
        self._store = store

    async def capture(self, document: Document) -> bool:
        """
        Persist ``document`` to the history sink.

        Returns True if the snapshot was written. Never raises.
        """
        try:
            await self._store.write_snapshot(document)
        except Exception as e:
            logger.warning(
                "Backup failed, continuing without snapshot",
                backend=self._store.backend_name,
                version=document.version,
                error=str(e),
            )
            return False
        return True
