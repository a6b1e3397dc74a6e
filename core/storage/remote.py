"""
Remote table storage backend.

The document lives in a ``key -> payload`` table as the single row keyed
by the document name. Snapshots are appended to a parallel history table
with the same columns.
"""

from core.logging import get_logger
from core.storage.base import BackupFailed, BaseStore, Document, WriteFailed
from tools.table_api.base import TableClient, TableError


logger = get_logger(__name__)


class RemoteTableStore(BaseStore):
    """
    Document store backed by a remote table.

    Uses a TableClient for transport; the client is owned by the store and
    closed with it.
    """

    backend_name = "remote"

    def __init__(
        self,
        client: TableClient,
        document_key: str = "cards",
        table: str = "configs",
        history_table: str = "configs_history",
    ):
        """
        Initialize the remote store.

        Args:
            client: Table transport
            document_key: Value of the ``key`` column for the live document
            table: Table holding the live document
            history_table: Append-only table receiving snapshots
        """
        self._client = client
        self._document_key = document_key
        self._table = table
        self._history_table = history_table

    async def setup(self) -> None:
        """Nothing to create; tables are provisioned out of band."""
        logger.info(
            "Using remote table",
            table=self._table,
            history_table=self._history_table,
            key=self._document_key,
        )

    async def read(self) -> Document:
        """Fetch the payload row; a missing row or error yields the default."""
        try:
            row = await self._client.select_one(
                self._table,
                match={"key": self._document_key},
                columns="payload",
            )
        except TableError as e:
            logger.warning(
                "Read degraded, serving default document",
                backend=self.backend_name,
                table=self._table,
                error=str(e),
            )
            return Document.default()

        if row is None or not row.get("payload"):
            return Document.default()
        return Document.from_dict(row["payload"])

    async def write(self, document: Document) -> None:
        """Upsert the payload row, replacing it entirely."""
        try:
            await self._client.upsert(
                self._table,
                {"key": self._document_key, "payload": document.to_dict()},
                on_conflict="key",
            )
        except TableError as e:
            logger.error(
                "Document write failed",
                backend=self.backend_name,
                table=self._table,
                error=str(e),
            )
            raise WriteFailed(f"Upsert into {self._table} failed: {e}") from e

        logger.debug(
            "Document written",
            table=self._table,
            version=document.version,
            cards=len(document.cards),
        )

    async def write_snapshot(self, document: Document) -> None:
        try:
            await self._client.insert(
                self._history_table,
                {"key": self._document_key, "payload": document.to_dict()},
            )
        except TableError as e:
            raise BackupFailed(f"Insert into {self._history_table} failed: {e}") from e

    async def close(self) -> None:
        await self._client.close()
        logger.info("Remote table client closed")
