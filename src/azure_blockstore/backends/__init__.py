"""Object store backends for azure-blockstore."""

from .azure import AzureObjectStore
from .base import AbortSignal, DownloadResult, ObjectStore, is_aborted
from .memory import InMemoryObjectStore

__all__ = [
    "AbortSignal",
    "DownloadResult",
    "ObjectStore",
    "is_aborted",
    "AzureObjectStore",
    "InMemoryObjectStore",
]
