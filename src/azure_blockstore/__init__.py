"""azure-blockstore - content-addressed block and key/value stores on Azure Blob Storage."""

from ._version import __version__

# Make key components available at package level
from .backends import AzureObjectStore, InMemoryObjectStore, ObjectStore
from .identifiers import cid_for, parse_cid
from .sharding import Flat, NextToLast, ShardingStrategy
from .stores import AzureBlockstore, AzureDatastore, Blockstore, Datastore

__all__ = [
    "AzureBlockstore",
    "AzureDatastore",
    "AzureObjectStore",
    "Blockstore",
    "Datastore",
    "Flat",
    "InMemoryObjectStore",
    "NextToLast",
    "ObjectStore",
    "ShardingStrategy",
    "cid_for",
    "parse_cid",
    "__version__",
]
