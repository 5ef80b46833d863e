"""Fixtures shared by key-value store tests."""

import pytest

from tvbridge_app.storage.memory import InMemoryKeyValueStore
from tvbridge_app.storage.sqlite_store import SqliteKeyValueStore


@pytest.fixture(params=["memory", "sqlite"])
def kv_store(request, tmp_path, seconds_clock):
    """Each backend under the same manually advanced clock."""
    if request.param == "memory":
        return InMemoryKeyValueStore("test", clock=seconds_clock)
    return SqliteKeyValueStore(str(tmp_path / "kv.db"), namespace="test", clock=seconds_clock)
