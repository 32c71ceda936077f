"""Shared store adapter logic.

``BaseStore`` implements the generic store contract on top of an
``ObjectStore``. Subclasses only decide how keys map to blob names:

- Blockstore: CIDs through a sharding strategy
- Datastore: string keys under a namespace path

Every operation issues exactly one backend call per key, never retries,
and converts backend failures into the ``azure_blockstore.errors``
hierarchy using the backend's own error classification.
"""

import logging
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any

from ..backends.base import AbortSignal, ObjectStore, is_aborted
from ..errors import (
    BackendError,
    BackendInvariantError,
    BlockstoreError,
    CancelledError,
    ConfigurationError,
    DecodeError,
    DeleteFailedError,
    NotFoundError,
    NotOpenedError,
    OpenFailedError,
    WriteFailedError,
)

logger = logging.getLogger(__name__)

DECODE_ERROR_POLICIES = ("strict", "skip")


class StoreState(str, Enum):
    """Lifecycle of a store adapter."""

    UNOPENED = "unopened"
    OPENED = "opened"
    CLOSED = "closed"


class BaseStore:
    """Generic put/get/has/delete/get_all/open adapter over an ObjectStore."""

    def __init__(
        self,
        object_store: ObjectStore,
        *,
        create_if_missing: bool = False,
        decode_errors: str = "strict",
    ):
        """Initialize the adapter.

        Args:
            object_store: Backend container; owned by the caller
            create_if_missing: Create the container in open() if absent
            decode_errors: "strict" to end get_all() with DecodeError on a
                blob name this store did not write, "skip" to log and move on

        Raises:
            ConfigurationError: If object_store is None or the policy is unknown
        """
        if object_store is None:
            raise ConfigurationError(
                f"An object store must be supplied to {type(self).__name__}."
            )
        if decode_errors not in DECODE_ERROR_POLICIES:
            raise ConfigurationError(
                f"decode_errors must be one of {DECODE_ERROR_POLICIES}, got {decode_errors!r}"
            )
        self.object_store = object_store
        self.create_if_missing = create_if_missing
        self.decode_errors = decode_errors
        self._state = StoreState.UNOPENED

    # Key mapping, provided by subclasses

    def _encode_key(self, key: Any) -> str:
        raise NotImplementedError

    def _decode_name(self, name: str) -> Any:
        raise NotImplementedError

    def _list_prefix(self) -> str | None:
        return None

    # Lifecycle

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def container(self) -> str | None:
        return getattr(self.object_store, "container", None)

    def open(self, *, abort: AbortSignal | None = None) -> None:
        """Verify the container exists, creating it if configured to.

        Safe to call repeatedly.

        Raises:
            OpenFailedError: If the container is missing and create_if_missing
                is False, or the backend cannot be reached
            CancelledError: If the abort signal fired
        """
        if self._state is StoreState.CLOSED:
            raise NotOpenedError(f"{type(self).__name__} is closed", operation="open")
        self._raise_if_aborted("open", self.container, abort)

        try:
            self.object_store.get_container_properties(abort=abort)
        except Exception as e:
            self._raise_if_aborted("open", self.container, abort, cause=e)
            if not self.object_store.is_not_found(e):
                raise OpenFailedError(operation="open", key=self.container, cause=e) from e
            if not self.create_if_missing:
                raise OpenFailedError(
                    f"Container {self.container} does not exist and create_if_missing is False",
                    operation="open",
                    key=self.container,
                    cause=e,
                ) from e
            self._create_container(abort)

        self._raise_if_aborted("open", self.container, abort)
        self._state = StoreState.OPENED
        logger.debug(f"Opened {type(self).__name__} on container {self.container}")

    def _create_container(self, abort: AbortSignal | None) -> None:
        logger.info(f"Creating container: {self.container}")
        try:
            self.object_store.create_container(abort=abort)
        except Exception as e:
            self._raise_if_aborted("open", self.container, abort, cause=e)
            if self.object_store.is_already_exists(e):
                # Created concurrently by another opener
                logger.debug(f"Container {self.container} already exists")
                return
            raise OpenFailedError(operation="create_container", key=self.container, cause=e) from e

    def close(self) -> None:
        """Mark the store closed. The backend client is left untouched."""
        self._state = StoreState.CLOSED

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Helpers

    def _raise_if_aborted(
        self,
        operation: str,
        key: Any,
        abort: AbortSignal | None,
        cause: BaseException | None = None,
    ) -> None:
        if is_aborted(abort):
            if cause is not None:
                raise CancelledError(operation=operation, key=key, cause=cause) from cause
            raise CancelledError(operation=operation, key=key)

    def _prepare(self, operation: str, key: Any, abort: AbortSignal | None) -> str:
        if self._state is not StoreState.OPENED:
            raise NotOpenedError(
                f"{type(self).__name__} must be opened before {operation}() (state: {self._state.value})",
                operation=operation,
                key=key,
            )
        self._raise_if_aborted(operation, key, abort)
        return self._encode_key(key)

    def _raise_read_error(self, operation: str, key: Any, error: Exception, abort: AbortSignal | None):
        self._raise_if_aborted(operation, key, abort, cause=error)
        if self.object_store.is_not_found(error):
            logger.debug(f"Key not found: {key}")
            raise NotFoundError(f"Not found: {key}", operation=operation, key=key, cause=error) from error
        logger.error(f"Failed to {operation} {key}: {error}")
        raise BackendError(operation=operation, key=key, cause=error) from error

    def _read_stream(self, stream: Iterable[bytes], key: Any, abort: AbortSignal | None) -> bytes:
        chunks = []
        try:
            for chunk in stream:
                self._raise_if_aborted("get", key, abort)
                chunks.append(chunk)
        except BlockstoreError:
            raise
        except Exception as e:
            self._raise_read_error("get", key, e, abort)
        return b"".join(chunks)

    # Generic store contract

    def put(self, key: Any, data: bytes, *, abort: AbortSignal | None = None) -> Any:
        """Store ``data`` under ``key``, overwriting any existing value.

        Returns:
            The key, unchanged

        Raises:
            WriteFailedError: If the backend rejected the upload
            CancelledError: If the abort signal fired before the upload completed
        """
        name = self._prepare("put", key, abort)
        try:
            self.object_store.upload(name, data, abort=abort)
        except Exception as e:
            self._raise_if_aborted("put", key, abort, cause=e)
            logger.error(f"Failed to put {key}: {e}")
            raise WriteFailedError(operation="put", key=key, cause=e) from e

        self._raise_if_aborted("put", key, abort)
        logger.debug(f"Stored {len(data)} bytes to blob {name}")
        return key

    def get(self, key: Any, *, abort: AbortSignal | None = None) -> bytes:
        """Read the full value stored under ``key``.

        Raises:
            NotFoundError: If nothing is stored under the key
            BackendInvariantError: If the backend returned no body, or a body
                whose length differs from the reported size
            BackendError: For any other backend failure
            CancelledError: If the abort signal fired
        """
        name = self._prepare("get", key, abort)
        try:
            response = self.object_store.download(name, abort=abort)
        except Exception as e:
            self._raise_read_error("get", key, e, abort)

        if response is None or response.stream is None:
            raise BackendInvariantError(
                f"Backend returned no readable body for {name}", operation="get", key=key
            )
        data = self._read_stream(response.stream, key, abort)
        if response.size is not None and len(data) != response.size:
            raise BackendInvariantError(
                f"Read {len(data)} bytes from {name}, backend reported {response.size}",
                operation="get",
                key=key,
            )
        return data

    def has(self, key: Any, *, abort: AbortSignal | None = None) -> bool:
        """Check if a value is stored under ``key``.

        Not-found and permission-denied responses both count as absent, since
        a container policy without list rights cannot tell them apart.

        Raises:
            BackendError: For any other backend failure
        """
        name = self._prepare("has", key, abort)
        try:
            return bool(self.object_store.exists(name, abort=abort))
        except Exception as e:
            self._raise_if_aborted("has", key, abort, cause=e)
            if self.object_store.is_not_found(e) or self.object_store.is_forbidden(e):
                return False
            raise BackendError(operation="has", key=key, cause=e) from e

    def delete(self, key: Any, *, abort: AbortSignal | None = None) -> None:
        """Delete the value under ``key``. Deleting a missing key succeeds.

        Raises:
            DeleteFailedError: If the backend rejected the delete
        """
        name = self._prepare("delete", key, abort)
        try:
            self.object_store.delete_if_exists(name, abort=abort)
        except Exception as e:
            self._raise_if_aborted("delete", key, abort, cause=e)
            if self.object_store.is_not_found(e):
                return
            logger.error(f"Failed to delete {key}: {e}")
            raise DeleteFailedError(operation="delete", key=key, cause=e) from e

    def get_all(self, *, abort: AbortSignal | None = None) -> Iterator[tuple[Any, bytes]]:
        """Lazily yield every (key, value) pair in the container.

        The iterator is one-shot. Order follows the backend listing. Values
        deleted between listing and reading are skipped.

        Raises:
            DecodeError: On a foreign blob name when decode_errors is "strict"
            CancelledError: If the abort signal fires mid-iteration
        """
        self._prepare_listing("get_all", abort)
        return self._iter_pairs(self._list_prefix(), "get_all", abort)

    def _prepare_listing(self, operation: str, abort: AbortSignal | None) -> None:
        if self._state is not StoreState.OPENED:
            raise NotOpenedError(
                f"{type(self).__name__} must be opened before {operation}() (state: {self._state.value})",
                operation=operation,
            )
        self._raise_if_aborted(operation, None, abort)

    def _iter_keys(self, prefix: str | None, operation: str, abort: AbortSignal | None) -> Iterator[Any]:
        try:
            for name in self.object_store.list_names(prefix, abort=abort):
                self._raise_if_aborted(operation, None, abort)
                try:
                    key = self._decode_name(name)
                except DecodeError as e:
                    if self.decode_errors == "skip":
                        logger.warning(f"Skipping blob not written by this store: {name} ({e})")
                        continue
                    raise
                yield key
        except BlockstoreError:
            raise
        except Exception as e:
            self._raise_if_aborted(operation, None, abort, cause=e)
            logger.error(f"Failed to list container {self.container}: {e}")
            raise BackendError(operation=operation, key=prefix, cause=e) from e

    def _iter_pairs(self, prefix: str | None, operation: str, abort: AbortSignal | None) -> Iterator[tuple[Any, bytes]]:
        for key in self._iter_keys(prefix, operation, abort):
            try:
                value = self.get(key, abort=abort)
            except NotFoundError:
                logger.debug(f"Key {key} deleted during listing, skipping")
                continue
            yield key, value

    # Batch helpers

    def put_many(self, pairs: Iterable[tuple[Any, bytes]], *, abort: AbortSignal | None = None) -> Iterator[Any]:
        """Store each (key, value) pair, yielding keys as they are written."""
        for key, data in pairs:
            yield self.put(key, data, abort=abort)

    def get_many(self, keys: Iterable[Any], *, abort: AbortSignal | None = None) -> Iterator[tuple[Any, bytes]]:
        """Yield (key, value) for each key; a missing key raises NotFoundError."""
        for key in keys:
            yield key, self.get(key, abort=abort)

    def delete_many(self, keys: Iterable[Any], *, abort: AbortSignal | None = None) -> Iterator[Any]:
        """Delete each key, yielding keys as they are removed."""
        for key in keys:
            self.delete(key, abort=abort)
            yield key

    def __repr__(self) -> str:
        return f"{type(self).__name__}(container={self.container!r}, state={self._state.value})"
