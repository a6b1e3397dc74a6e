"""
Local JSON file storage backend.

Keeps the document in a single JSON file and pre-mutation snapshots in a
``history`` directory next to it. If the configured location cannot be
prepared (read-only filesystem, parent path is a file, ...) the store falls
back to a scratch location that does not survive host restarts.
"""

import json
import os
import stat
import tempfile
import time
from pathlib import Path
from typing import Optional

from core.logging import get_logger
from core.storage.base import (
    BackupFailed,
    BaseStore,
    Document,
    StartupFatal,
    WriteFailed,
)


logger = get_logger(__name__)


HISTORY_DIR_NAME = "history"


def _dump(document: Document) -> str:
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)


def _target_mode(path: Path) -> int:
    """Permission bits for a rewrite of ``path``: its current mode, else 0666 minus umask."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class LocalFileStore(BaseStore):
    """
    File-based document store.

    Writes go through a temp file in the same directory followed by an
    ``os.replace``, so a concurrent reader sees either the old or the new
    file, never a partial one.
    """

    backend_name = "local"

    def __init__(
        self,
        data_file: str | Path,
        fallback_file: str | Path = "/tmp/cards.json",
    ):
        """
        Initialize the local store.

        Args:
            data_file: Preferred location of the document
            fallback_file: Non-persistent location used when data_file
                cannot be prepared
        """
        self._data_file = Path(data_file)
        self._fallback_file = Path(fallback_file)
        self._path: Optional[Path] = None

    @property
    def active_path(self) -> Path:
        """The file currently backing the store."""
        if self._path is None:
            raise RuntimeError("Store not initialized. Call setup() first.")
        return self._path

    @property
    def history_dir(self) -> Path:
        return self.active_path.parent / HISTORY_DIR_NAME

    @property
    def is_fallback(self) -> bool:
        return self._path is not None and self._path == self._fallback_file

    async def setup(self) -> None:
        """Ensure the data file exists, falling back if needed."""
        try:
            self._prepare(self._data_file)
        except OSError as e:
            logger.warning(
                "Data directory not usable, trying fallback",
                path=str(self._data_file),
                fallback=str(self._fallback_file),
                error=str(e),
            )
        else:
            self._path = self._data_file
            logger.info("Using data file", path=str(self._path))
            return

        try:
            self._prepare(self._fallback_file)
        except OSError as e:
            logger.error(
                "Could not prepare data file at primary or fallback location",
                path=str(self._data_file),
                fallback=str(self._fallback_file),
                error=str(e),
            )
            raise StartupFatal(
                f"No writable location for {self._data_file} "
                f"or fallback {self._fallback_file}: {e}"
            ) from e

        self._path = self._fallback_file
        logger.warning(
            "Using fallback data file (not persistent across restarts)",
            path=str(self._path),
        )

    def _prepare(self, path: Path) -> None:
        """Create parent directories and seed the default document."""
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            self._replace_file(path, _dump(Document.default()))

    async def read(self) -> Document:
        """Parse the data file; any failure yields the default document."""
        path = self.active_path
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(
                "Read degraded, serving default document",
                backend=self.backend_name,
                path=str(path),
                error=str(e),
            )
            return Document.default()

        return Document.from_dict(data)

    async def write(self, document: Document) -> None:
        """Overwrite the data file atomically."""
        path = self.active_path
        try:
            self._replace_file(path, _dump(document))
        except (OSError, TypeError, ValueError) as e:
            logger.error(
                "Document write failed",
                backend=self.backend_name,
                path=str(path),
                error=str(e),
            )
            raise WriteFailed(f"Could not write {path}: {e}") from e

        logger.debug(
            "Document written",
            path=str(path),
            version=document.version,
            cards=len(document.cards),
        )

    async def write_snapshot(self, document: Document) -> None:
        """Write ``history/cards_<epoch-ms>.json`` without overwriting."""
        try:
            history_dir = self.history_dir
            history_dir.mkdir(parents=True, exist_ok=True)
            content = _dump(document)
            path = self._create_snapshot_file(history_dir, content)
        except (OSError, TypeError, ValueError) as e:
            raise BackupFailed(f"Could not write local snapshot: {e}") from e

        logger.debug("Snapshot written", path=str(path), version=document.version)

    def _create_snapshot_file(self, history_dir: Path, content: str) -> Path:
        stem = f"{self.active_path.stem}_{int(time.time() * 1000)}"
        suffix = 0
        while True:
            name = f"{stem}.json" if suffix == 0 else f"{stem}-{suffix}.json"
            path = history_dir / name
            try:
                # Exclusive create: existing snapshots are immutable
                with open(path, "x", encoding="utf-8") as f:
                    f.write(content)
            except FileExistsError:
                suffix += 1
                continue
            return path

    @staticmethod
    def _replace_file(path: Path, content: str) -> None:
        mode = _target_mode(path)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            # mkstemp creates 0600; the replaced file keeps its own mode
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
