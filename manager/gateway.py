"""
Mutation gateway - the only way the card document changes.

Sits between the API layer and the active document store and runs the
two write sequences:

- replace: read current -> snapshot current -> write caller document
- upsert:  read current -> merge by id -> snapshot current -> write

Credentials and body shape are checked before the store is touched.
There is deliberately no lock around read-then-write: two overlapping
upserts can read the same version and the later write wins (lost update).
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from core.logging import get_logger
from core.merge import merge_cards_by_id
from core.storage.base import DEFAULT_VERSION, BaseStore, Document
from manager.snapshots import SnapshotManager


logger = get_logger(__name__)


@dataclass
class UpsertResult:
    """Outcome of a merge-upsert."""
    version: int
    updated: int


class CardsGateway:
    """
    Entry point for reading and mutating the card document.

    The store is injected; the gateway never knows which backend is
    active.
    """

    def __init__(
        self,
        store: BaseStore,
        admin_secret: str,
        snapshots: Optional[SnapshotManager] = None,
    ):
        """
        Initialize the gateway.

        Args:
            store: Active document store (already set up)
            admin_secret: Shared secret required for writes
            snapshots: Snapshot manager (defaults to one over ``store``)
        """
        self._store = store
        self._admin_secret = admin_secret
        self._snapshots = snapshots or SnapshotManager(store)

    @property
    def store(self) -> BaseStore:
        return self._store

    def check_credential(self, credential: Optional[str]) -> None:
        """
        Exact comparison against the configured secret.

        Raises:
            Unauthorized: If the credential is missing or wrong
        """
        if not credential or credential != self._admin_secret:
            raise Unauthorized("Missing or invalid admin secret")

    async def get_document(self) -> Document:
        """Current document; degrades to the default instead of failing."""
        try:
            return await self._store.read()
        except Exception as e:
            logger.error(
                "Read degraded, serving default document",
                backend=self._store.backend_name,
                error=str(e),
                exc_info=True,
            )
            return Document.default()

    async def replace_document(self, credential: Optional[str], body: Any) -> Document:
        """
        Overwrite the whole document with the caller's cards and version.

        Raises:
            Unauthorized: Bad credential (nothing read or written)
            InvalidBody: Bad body (nothing read or written)
            WriteFailed: The store rejected the new document
        """
        self.check_credential(credential)
        cards = _require_cards(body)
        version = _caller_version(body.get("version"))

        new_document = Document(version=version, cards=copy.deepcopy(list(cards)))

        current = await self._store.read()
        await self._snapshots.capture(current)
        await self._store.write(new_document)

        logger.info(
            "Document replaced",
            backend=self._store.backend_name,
            previous_version=current.version,
            version=new_document.version,
            cards=len(new_document.cards),
        )
        return new_document

    async def upsert_document(self, credential: Optional[str], body: Any) -> UpsertResult:
        """
        Merge the caller's cards into the stored ones by id.

        The new version is always the stored version plus one; any version
        in the body is ignored.

        Raises:
            Unauthorized: Bad credential (nothing read or written)
            InvalidBody: Bad body (nothing read or written)
            WriteFailed: The store rejected the merged document
        """
        self.check_credential(credential)
        cards = _require_cards(body)

        current = await self._store.read()
        merged = merge_cards_by_id(current.cards, cards)
        new_document = Document(
            version=current.version + 1,
            cards=copy.deepcopy(merged),
        )

        await self._snapshots.capture(current)
        await self._store.write(new_document)

        logger.info(
            "Document upserted",
            backend=self._store.backend_name,
            previous_version=current.version,
            version=new_document.version,
            incoming=len(cards),
            cards=len(new_document.cards),
        )
        return UpsertResult(version=new_document.version, updated=len(cards))


def _require_cards(body: Any) -> list[Any]:
    """Return the body's cards, or raise InvalidBody."""
    if not isinstance(body, Mapping):
        raise InvalidBody("Body must be a JSON object")
    cards = body.get("cards")
    if not isinstance(cards, (list, tuple)):
        raise InvalidBody("'cards' must be an array")
    return list(cards)


def _caller_version(value: Any) -> int:
    """
    Version supplied with a full replace.

    Missing or falsy values mean 1. Anything else must be a whole number
    (or a string holding one) of at least 1.
    """
    if not value:
        return DEFAULT_VERSION
    if isinstance(value, bool):
        raise InvalidBody("'version' must be a positive integer")

    if isinstance(value, int):
        version = value
    elif isinstance(value, float) and value.is_integer():
        version = int(value)
    elif isinstance(value, str):
        try:
            version = int(value.strip())
        except ValueError:
            raise InvalidBody("'version' must be a positive integer")
    else:
        raise InvalidBody("'version' must be a positive integer")

    if version < 1:
        raise InvalidBody("'version' must be a positive integer")
    return version


class GatewayError(Exception):
    """Base exception for rejected requests."""
    pass


class Unauthorized(GatewayError):
    """Admin credential missing or wrong."""
    pass


class InvalidBody(GatewayError):
    """Request body is not an object with a 'cards' array."""
    pass
