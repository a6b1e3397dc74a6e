"""
Abstract base classes for document stores.

This module defines the contract that every storage implementation must
follow, so the mutation gateway can run the same replace/upsert/snapshot
sequence over a local JSON file or a remote table without knowing which
one is active.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


DEFAULT_VERSION = 1


def coerce_version(value: Any, default: int = DEFAULT_VERSION) -> int:
    """
    Best-effort conversion of a stored version to a positive integer.

    Anything unusable (missing, falsy, non-numeric, below 1) becomes
    ``default``. Used on data read back from a backend, never on caller
    input.
    """
    if isinstance(value, bool) or not value:
        return default
    try:
        version = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return version if version >= 1 else default


@dataclass
class Document:
    """
    The single versioned card document.

    ``cards`` is always a list. Conversions to and from dicts deep-copy the
    cards so a document handed to a caller never aliases stored state.
    """
    version: int = DEFAULT_VERSION
    cards: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": self.version,
            "cards": copy.deepcopy(self.cards),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Document":
        """Create from a stored payload, normalizing missing or bad fields."""
        if not isinstance(data, dict):
            return cls()
        cards = data.get("cards")
        return cls(
            version=coerce_version(data.get("version")),
            cards=copy.deepcopy(cards) if isinstance(cards, list) else [],
        )

    @classmethod
    def default(cls) -> "Document":
        """The empty document a fresh deployment starts from."""
        return cls()


class BaseStore(ABC):
    """
    Abstract base class for document persistence.

    Reads are self-healing: a backend failure yields ``Document.default()``
    and a logged event, never an exception. Writes of the live document
    raise ``WriteFailed``. Snapshot writes raise ``BackupFailed`` and it is
    up to the caller (see ``manager.snapshots``) to swallow them.
    """

    #: Short backend name used in log events
    backend_name: str = "base"

    @abstractmethod
    async def setup(self) -> None:
        """
        Prepare the backend (directories, seed document, clients).

        Raises:
            StartupFatal: If the store cannot be made usable
        """
        pass

    @abstractmethod
    async def read(self) -> Document:
        """Return the current document, or the default one on failure."""
        pass

    @abstractmethod
    async def write(self, document: Document) -> None:
        """
        Replace the stored document entirely.

        Raises:
            WriteFailed: If the document could not be persisted
        """
        pass

    @abstractmethod
    async def write_snapshot(self, document: Document) -> None:
        """
        Append an immutable copy of ``document`` to the history sink.

        Raises:
            BackupFailed: If the snapshot could not be written
        """
        pass

    async def close(self) -> None:
        """Clean up resources (clients, handles)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class WriteFailed(StorageError):
    """The live document could not be persisted."""
    pass


class BackupFailed(StorageError):
    """A pre-mutation snapshot could not be written."""
    pass


class StartupFatal(StorageError):
    """No usable storage location; the service must not start."""
    pass
