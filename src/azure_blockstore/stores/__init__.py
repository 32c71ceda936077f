"""Store adapters implementing the generic block/key-value contract."""

from .base import BaseStore, StoreState
from .blockstore import AzureBlockstore, Blockstore
from .datastore import AzureDatastore, Datastore, normalize_key

__all__ = [
    "BaseStore",
    "StoreState",
    "Blockstore",
    "AzureBlockstore",
    "Datastore",
    "AzureDatastore",
    "normalize_key",
]
