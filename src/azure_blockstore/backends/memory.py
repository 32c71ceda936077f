"""In-memory implementation of ObjectStore for testing.

This provides a thread-safe, in-memory container that mimics the
semantics of blob storage: overwrite on upload, chunked downloads,
idempotent deletes and lexicographically ordered listings.
"""

import logging
import threading
from collections.abc import Iterator

from .base import AbortSignal, DownloadResult, is_aborted

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class InMemoryStoreError(Exception):
    """Backend failure raised by InMemoryObjectStore, tagged with an HTTP-like status."""

    status_code = 500

    def __init__(self, message: str = "", status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class BlobNotFoundError(InMemoryStoreError):
    status_code = 404


class ContainerNotFoundError(InMemoryStoreError):
    status_code = 404


class ContainerExistsError(InMemoryStoreError):
    status_code = 409


class AbortedError(InMemoryStoreError):
    """The abort signal fired before the call mutated any state."""

    status_code = 499


class InMemoryObjectStore:
    """In-memory blob container.

    This implementation is thread-safe and uses the same overwrite and
    not-found semantics as a cloud container, making it suitable for
    unit tests and local development.

    Note: Data is lost when process exits!
    """

    def __init__(
        self,
        container: str = "blocks",
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        container_exists: bool = True,
    ):
        """Initialize an empty container.

        Args:
            container: Container name
            chunk_size: Size of the chunks download streams are split into
            container_exists: Start with the container provisioned
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.container = container
        self.chunk_size = chunk_size
        self._container_exists = container_exists
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def _check_abort(self, abort: AbortSignal | None) -> None:
        if is_aborted(abort):
            raise AbortedError("Operation aborted")

    def _require_container(self) -> None:
        # Caller holds the lock
        if not self._container_exists:
            raise ContainerNotFoundError(f"Container not found: {self.container}")

    def upload(self, name: str, data: bytes, *, abort: AbortSignal | None = None) -> None:
        """Create or overwrite a blob."""
        self._check_abort(abort)
        with self._lock:
            self._require_container()
            self._blobs[name] = bytes(data)
        logger.debug(f"Saved {len(data)} bytes to {name}")

    def download(self, name: str, *, abort: AbortSignal | None = None) -> DownloadResult:
        """Return a chunked stream over a snapshot of the blob."""
        self._check_abort(abort)
        with self._lock:
            self._require_container()
            if name not in self._blobs:
                raise BlobNotFoundError(f"Blob not found: {name}")
            data = self._blobs[name]
        return DownloadResult(stream=self._chunks(data), size=len(data))

    def _chunks(self, data: bytes) -> Iterator[bytes]:
        for start in range(0, len(data), self.chunk_size):
            yield data[start:start + self.chunk_size]

    def exists(self, name: str, *, abort: AbortSignal | None = None) -> bool:
        self._check_abort(abort)
        with self._lock:
            self._require_container()
            return name in self._blobs

    def delete_if_exists(self, name: str, *, abort: AbortSignal | None = None) -> bool:
        self._check_abort(abort)
        with self._lock:
            self._require_container()
            if name not in self._blobs:
                return False
            del self._blobs[name]
        logger.debug(f"Deleted key: {name}")
        return True

    def list_names(self, prefix: str | None = None, *, abort: AbortSignal | None = None) -> Iterator[str]:
        """List names in lexicographic order from a snapshot taken on first use."""
        self._check_abort(abort)
        with self._lock:
            self._require_container()
            names = sorted(n for n in self._blobs if not prefix or n.startswith(prefix))
        yield from names

    def get_container_properties(self, *, abort: AbortSignal | None = None) -> dict:
        self._check_abort(abort)
        with self._lock:
            self._require_container()
            return {"name": self.container, "blob_count": len(self._blobs)}

    def create_container(self, *, abort: AbortSignal | None = None) -> None:
        self._check_abort(abort)
        with self._lock:
            if self._container_exists:
                raise ContainerExistsError(f"Container already exists: {self.container}")
            self._container_exists = True
        logger.info(f"Created container: {self.container}")

    def is_not_found(self, error: BaseException) -> bool:
        return isinstance(error, InMemoryStoreError) and error.status_code == 404

    def is_forbidden(self, error: BaseException) -> bool:
        return isinstance(error, InMemoryStoreError) and error.status_code == 403

    def is_already_exists(self, error: BaseException) -> bool:
        return isinstance(error, InMemoryStoreError) and error.status_code == 409

    # Test helpers

    @property
    def container_exists(self) -> bool:
        return self._container_exists

    def size(self) -> int:
        """Get number of stored blobs."""
        with self._lock:
            return len(self._blobs)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._blobs)
