"""String-keyed datastore backed by a blob container.

Keys are slash separated paths such as ``/pins/abc``. They are stored
under an optional namespace path inside the container:

    path="ipfs/datastore", key="/pins/abc" -> blob "ipfs/datastore/pins/abc"
"""

import re
from collections.abc import Iterator

from azure.storage.blob import BlobServiceClient

from ..backends.azure import AzureObjectStore
from ..backends.base import AbortSignal, ObjectStore
from ..errors import ConfigurationError, DecodeError
from .base import BaseStore

_SLASHES = re.compile(r"/{2,}")


def normalize_key(key: str) -> str:
    """Normalize a key to a single leading slash with no empty segments.

    Examples:
        normalize_key("a//b/") -> "/a/b"

    Raises:
        ValueError: If the key is empty
    """
    if not isinstance(key, str):
        raise TypeError(f"Datastore keys must be strings, got {type(key).__name__}")
    cleaned = _SLASHES.sub("/", key).strip("/")
    if not cleaned:
        raise ValueError(f"Datastore key cannot be empty: {key!r}")
    return f"/{cleaned}"


class Datastore(BaseStore):
    """Key/value store for arbitrary path-like keys."""

    def __init__(
        self,
        object_store: ObjectStore,
        *,
        path: str | None = None,
        create_if_missing: bool = False,
        decode_errors: str = "strict",
    ):
        """Initialize datastore.

        Args:
            object_store: Backend container; owned by the caller
            path: Optional namespace prefixed to every blob name
            create_if_missing: Create the container in open() if absent
            decode_errors: "strict" or "skip" handling of unexpected blob names
        """
        super().__init__(
            object_store,
            create_if_missing=create_if_missing,
            decode_errors=decode_errors,
        )
        self.path = _SLASHES.sub("/", path or "").strip("/")

    def _full_name(self, relative: str) -> str:
        return f"{self.path}/{relative}" if self.path else relative

    def _encode_key(self, key: str) -> str:
        return self._full_name(normalize_key(key).lstrip("/"))

    def _decode_name(self, name: str) -> str:
        prefix = self._list_prefix()
        relative = name
        if prefix:
            if not name.startswith(prefix):
                raise DecodeError(f"Blob {name!r} is outside namespace {self.path!r}", key=name)
            relative = name[len(prefix):]
        try:
            key = normalize_key(relative)
        except ValueError as e:
            raise DecodeError(f"Blob name {name!r} is not a valid key", key=name, cause=e) from e
        if self._encode_key(key) != name:
            raise DecodeError(f"Blob name {name!r} is not the canonical name for key {key!r}", key=name)
        return key

    def _list_prefix(self) -> str | None:
        return f"{self.path}/" if self.path else None

    def _query_prefix(self, prefix: str | None) -> str | None:
        if not prefix:
            return self._list_prefix()
        relative = _SLASHES.sub("/", prefix).lstrip("/")
        return self._full_name(relative)

    def query_keys(self, prefix: str | None = None, *, abort: AbortSignal | None = None) -> Iterator[str]:
        """Lazily yield keys, optionally only those starting with ``prefix``.

        Prefixes match on raw key text, so "/pin" matches "/pins/abc".
        """
        self._prepare_listing("query_keys", abort)
        return self._iter_keys(self._query_prefix(prefix), "query_keys", abort)

    def query(self, prefix: str | None = None, *, abort: AbortSignal | None = None) -> Iterator[tuple[str, bytes]]:
        """Lazily yield (key, value) pairs, optionally filtered by key prefix."""
        self._prepare_listing("query", abort)
        return self._iter_pairs(self._query_prefix(prefix), "query", abort)


class AzureDatastore(Datastore):
    """Datastore on an Azure container, built from an account-level client."""

    def __init__(self, client: BlobServiceClient, container: str, **init):
        if client is None:
            raise ConfigurationError("An Azure blob client must be supplied.")
        super().__init__(AzureObjectStore.from_service_client(client, container), **init)
