"""
Tests for LocalFileStore.

Covers seeding, the /tmp-style fallback, self-healing reads, atomic
writes and history snapshots.
"""

import json
import os
import stat

import pytest
from structlog.testing import capture_logs

from core.storage.base import BackupFailed, Document, StartupFatal, WriteFailed
from core.storage.local import LocalFileStore


def _blocked_path(tmp_path):
    """A path whose parent 'directory' is a regular file (unusable even as root)."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    return blocker / "data" / "cards.json"


@pytest.mark.asyncio
async def test_setup_creates_directory_and_seeds_default(tmp_path):
    path = tmp_path / "nested" / "dir" / "cards.json"
    store = LocalFileStore(data_file=path, fallback_file=tmp_path / "fb.json")

    await store.setup()

    assert store.active_path == path
    assert not store.is_fallback
    assert json.loads(path.read_text()) == {"version": 1, "cards": []}


@pytest.mark.asyncio
async def test_setup_keeps_existing_document(tmp_path):
    path = tmp_path / "cards.json"
    path.write_text(json.dumps({"version": 7, "cards": [{"id": "a"}]}))
    store = LocalFileStore(data_file=path, fallback_file=tmp_path / "fb.json")

    await store.setup()
    document = await store.read()

    assert document.version == 7
    assert document.cards == [{"id": "a"}]


@pytest.mark.asyncio
async def test_unwritable_primary_falls_back(tmp_path):
    fallback = tmp_path / "fallback" / "cards.json"
    store = LocalFileStore(data_file=_blocked_path(tmp_path), fallback_file=fallback)

    with capture_logs() as logs:
        await store.setup()

    assert store.active_path == fallback
    assert store.is_fallback
    assert json.loads(fallback.read_text()) == {"version": 1, "cards": []}
    assert any(
        entry["log_level"] == "warning" and "fallback" in entry["event"].lower()
        for entry in logs
    )

    # Reads and writes go to the fallback transparently
    await store.write(Document(version=2, cards=[{"id": "x"}]))
    assert (await store.read()).to_dict() == {"version": 2, "cards": [{"id": "x"}]}


@pytest.mark.asyncio
async def test_both_locations_unusable_is_fatal(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file")
    store = LocalFileStore(
        data_file=blocker / "a" / "cards.json",
        fallback_file=blocker / "b" / "cards.json",
    )

    with pytest.raises(StartupFatal):
        await store.setup()


def test_active_path_requires_setup(tmp_path):
    store = LocalFileStore(data_file=tmp_path / "cards.json")

    with pytest.raises(RuntimeError):
        store.active_path


@pytest.mark.asyncio
async def test_corrupt_file_reads_as_default(local_store):
    local_store.active_path.write_text("{not json")

    with capture_logs() as logs:
        document = await local_store.read()

    assert document == Document.default()
    assert any("degraded" in entry["event"].lower() for entry in logs)


@pytest.mark.asyncio
async def test_missing_file_reads_as_default(local_store):
    local_store.active_path.unlink()

    assert await local_store.read() == Document(version=1, cards=[])


@pytest.mark.asyncio
async def test_read_normalizes_bad_fields(local_store):
    local_store.active_path.write_text(json.dumps({"version": "nope", "cards": None}))

    document = await local_store.read()

    assert document.version == 1
    assert document.cards == []


@pytest.mark.asyncio
async def test_write_replaces_file_without_leftovers(local_store):
    document = Document(version=4, cards=[{"id": "a", "name": "Alpha"}])

    await local_store.write(document)

    data_dir = local_store.active_path.parent
    assert json.loads(local_store.active_path.read_text()) == document.to_dict()
    assert [p.name for p in data_dir.iterdir() if p.name.endswith(".tmp")] == []


@pytest.fixture
def umask_022():
    previous = os.umask(0o022)
    yield
    os.umask(previous)


@pytest.mark.asyncio
async def test_seeded_file_follows_umask(tmp_path, umask_022):
    path = tmp_path / "cards.json"
    store = LocalFileStore(data_file=path, fallback_file=tmp_path / "fb.json")

    await store.setup()

    assert stat.S_IMODE(path.stat().st_mode) == 0o644


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", [0o644, 0o640, 0o600])
async def test_write_keeps_file_mode(local_store, umask_022, mode):
    local_store.active_path.chmod(mode)

    await local_store.write(Document(version=2, cards=[{"id": "a"}]))

    assert stat.S_IMODE(local_store.active_path.stat().st_mode) == mode


@pytest.mark.asyncio
async def test_write_failure_raises_write_failed(local_store):
    # Replace the data directory with a file so the temp file cannot be created
    data_dir = local_store.active_path.parent
    for child in data_dir.iterdir():
        child.unlink()
    data_dir.rmdir()
    data_dir.write_text("blocked")

    with pytest.raises(WriteFailed):
        await local_store.write(Document(version=2))


@pytest.mark.asyncio
async def test_snapshots_go_to_history_and_never_overwrite(local_store):
    await local_store.write_snapshot(Document(version=1, cards=[{"id": "a"}]))
    await local_store.write_snapshot(Document(version=2, cards=[{"id": "b"}]))

    history = sorted(local_store.history_dir.iterdir())
    assert len(history) == 2
    assert all(p.name.startswith("cards_") and p.suffix == ".json" for p in history)
    versions = sorted(json.loads(p.read_text())["version"] for p in history)
    assert versions == [1, 2]


@pytest.mark.asyncio
async def test_snapshot_failure_raises_backup_failed(local_store):
    local_store.history_dir.write_text("blocked")

    with pytest.raises(BackupFailed):
        await local_store.write_snapshot(Document())


@pytest.mark.asyncio
async def test_reads_are_independent_copies(local_store):
    await local_store.write(Document(version=2, cards=[{"id": "a", "tags": ["x"]}]))

    first = await local_store.read()
    first.cards[0]["tags"].append("mutated")
    first.cards.append({"id": "b"})
    second = await local_store.read()

    assert second.cards == [{"id": "a", "tags": ["x"]}]
