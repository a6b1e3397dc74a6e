"""
Pytest configuration and fixtures.
"""

import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from core.config import Settings  # noqa: E402
from core.storage.local import LocalFileStore  # noqa: E402
from core.storage.remote import RemoteTableStore  # noqa: E402
from tools.table_api.mock_client import MockTableClient  # noqa: E402


ADMIN_SECRET = "s3cret"


@pytest.fixture
def settings_factory(tmp_path):
    """Build Settings isolated from the real environment and .env file."""

    def _make(**overrides) -> Settings:
        values = {
            "admin_secret": ADMIN_SECRET,
            "data_file": str(tmp_path / "data" / "cards.json"),
            "fallback_data_file": str(tmp_path / "fallback" / "cards.json"),
            "supabase_url": "",
            "supabase_service_role": "",
            "allowed_origins": "",
            "environment": "development",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest_asyncio.fixture
async def local_store(tmp_path):
    """A set-up local store rooted in tmp_path."""
    store = LocalFileStore(
        data_file=tmp_path / "data" / "cards.json",
        fallback_file=tmp_path / "fallback" / "cards.json",
    )
    await store.setup()
    return store


@pytest.fixture
def table_client():
    return MockTableClient()


@pytest_asyncio.fixture
async def remote_store(table_client):
    store = RemoteTableStore(table_client)
    await store.setup()
    return store


@pytest_asyncio.fixture(params=["local", "remote"])
async def any_store(request, tmp_path):
    """Each backend in turn, for behaviour both must share."""
    if request.param == "local":
        store = LocalFileStore(
            data_file=tmp_path / "data" / "cards.json",
            fallback_file=tmp_path / "fallback" / "cards.json",
        )
    else:
        store = RemoteTableStore(MockTableClient())
    await store.setup()
    return store
