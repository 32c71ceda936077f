"""Test configuration and shared fixtures for azure-blockstore tests."""

import pytest

from azure_blockstore.backends.memory import InMemoryObjectStore
from azure_blockstore.identifiers import cid_for
from azure_blockstore.stores import Blockstore, Datastore

# Small chunks so modest payloads exercise multi-chunk reads
CHUNK_SIZE = 16


@pytest.fixture
def object_store():
    """Provide a clean in-memory container for each test."""
    return InMemoryObjectStore("blocks", chunk_size=CHUNK_SIZE)


@pytest.fixture
def blockstore(object_store):
    """Opened block store on the in-memory container."""
    store = Blockstore(object_store)
    store.open()
    return store


@pytest.fixture
def datastore(object_store):
    """Opened datastore namespaced under ipfs/datastore."""
    store = Datastore(object_store, path="ipfs/datastore")
    store.open()
    return store


@pytest.fixture
def make_block():
    """Build (cid, data) pairs with distinct content."""

    def _make(i: int = 0, size: int | None = None):
        data = f"block-{i}".encode() if size is None else bytes((i + n) % 256 for n in range(size))
        return cid_for(data), data

    return _make
