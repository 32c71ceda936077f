"""Object store protocol for blob backends.

Defines the primitive operations the store adapters are built on. Any
implementation can be plugged in without changing adapter code.

Implementations include:
- AzureObjectStore: Azure Blob Storage container
- InMemoryObjectStore: Thread-safe dict (for tests and local development)
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class AbortSignal(Protocol):
    """Cooperative cancellation flag. ``threading.Event`` satisfies it."""

    def is_set(self) -> bool:
        ...


def is_aborted(abort: AbortSignal | None) -> bool:
    """Return True if an abort signal was supplied and has fired."""
    return abort is not None and abort.is_set()


@dataclass
class DownloadResult:
    """Response of a download call.

    ``stream`` yields the body in chunks. A backend that reports success but
    has no body leaves it as None. ``size`` is the body length the backend
    reported, when it reports one.
    """

    stream: Iterable[bytes] | None
    size: int | None = None


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for the blob container a store adapter writes to.

    All names are container-relative blob names. Every call accepts an
    optional ``abort`` signal that implementations honour where they can.
    """

    container: str

    def upload(self, name: str, data: bytes, *, abort: AbortSignal | None = None) -> None:
        """Create or overwrite the blob ``name`` with ``data``."""
        ...

    def download(self, name: str, *, abort: AbortSignal | None = None) -> DownloadResult:
        """Open the blob ``name`` for reading.

        Raises:
            Exception: Backend error; ``is_not_found`` identifies a missing blob
        """
        ...

    def exists(self, name: str, *, abort: AbortSignal | None = None) -> bool:
        """Check if blob exists."""
        ...

    def delete_if_exists(self, name: str, *, abort: AbortSignal | None = None) -> bool:
        """Delete the blob ``name``.

        Returns:
            True if deleted, False if it didn't exist
        """
        ...

    def list_names(self, prefix: str | None = None, *, abort: AbortSignal | None = None) -> Iterator[str]:
        """Lazily iterate blob names, optionally restricted to a prefix."""
        ...

    def get_container_properties(self, *, abort: AbortSignal | None = None) -> dict:
        """Return container properties; fails with a not-found error if absent."""
        ...

    def create_container(self, *, abort: AbortSignal | None = None) -> None:
        """Create the container."""
        ...

    # Error classification. Adapters never inspect backend exceptions
    # themselves.

    def is_not_found(self, error: BaseException) -> bool:
        ...

    def is_forbidden(self, error: BaseException) -> bool:
        ...

    def is_already_exists(self, error: BaseException) -> bool:
        ...
