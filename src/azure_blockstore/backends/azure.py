"""Azure Blob Storage implementation of ObjectStore.

Wraps a ``ContainerClient`` supplied by the caller. The client (and the
``BlobServiceClient`` it came from) is owned by the caller and is never
closed here.

The synchronous SDK has no abort parameter, so abort signals are checked at
call boundaries and between download chunks only.
"""

import logging
from collections.abc import Iterator

from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from azure.storage.blob import BlobServiceClient, ContainerClient

from ..errors import ConfigurationError
from .base import AbortSignal, DownloadResult, is_aborted

logger = logging.getLogger(__name__)


class AzureAbortedError(Exception):
    """The abort signal fired before a request was sent."""
    pass


class AzureObjectStore:
    """Blob container backed by Azure Blob Storage.

    Example:
        >>> client = BlobServiceClient.from_connection_string(conn_str)
        >>> store = AzureObjectStore.from_service_client(client, "blocks")
        >>> store.upload("AB/BAFK...AB.data", b"data")
    """

    def __init__(self, container_client: ContainerClient):
        """Initialize from an existing container client.

        Args:
            container_client: Client for the target container

        Raises:
            ConfigurationError: If no client is supplied
        """
        if container_client is None:
            raise ConfigurationError(
                "An Azure container client must be supplied. "
                "Use AzureObjectStore.from_service_client(client, container)."
            )
        self.container_client = container_client
        self.container = container_client.container_name

    @classmethod
    def from_service_client(cls, client: BlobServiceClient, container: str | None) -> "AzureObjectStore":
        """Build a store for ``container`` from an account-level client.

        Raises:
            ConfigurationError: If the client or container name is missing
        """
        if client is None:
            raise ConfigurationError("An Azure blob service client must be supplied.")
        if not container:
            raise ConfigurationError("A container name must be supplied.")
        return cls(client.get_container_client(container))

    def _check_abort(self, abort: AbortSignal | None) -> None:
        if is_aborted(abort):
            raise AzureAbortedError("Operation aborted before request was sent")

    def upload(self, name: str, data: bytes, *, abort: AbortSignal | None = None) -> None:
        """Upload with overwrite, replacing any existing blob."""
        self._check_abort(abort)
        blob_client = self.container_client.get_blob_client(name)
        blob_client.upload_blob(data, overwrite=True)
        logger.debug(f"Saved {len(data)} bytes to {name}")

    def download(self, name: str, *, abort: AbortSignal | None = None) -> DownloadResult:
        """Start a download and expose the body as chunks."""
        self._check_abort(abort)
        blob_client = self.container_client.get_blob_client(name)
        downloader = blob_client.download_blob()
        if downloader is None:
            return DownloadResult(stream=None)
        return DownloadResult(stream=downloader.chunks(), size=downloader.size)

    def exists(self, name: str, *, abort: AbortSignal | None = None) -> bool:
        self._check_abort(abort)
        blob_client = self.container_client.get_blob_client(name)
        return blob_client.exists()

    def delete_if_exists(self, name: str, *, abort: AbortSignal | None = None) -> bool:
        """Delete a blob and its snapshots; a missing blob is not an error."""
        self._check_abort(abort)
        blob_client = self.container_client.get_blob_client(name)
        try:
            blob_client.delete_blob(delete_snapshots="include")
        except ResourceNotFoundError:
            logger.debug(f"Key {name} not found for deletion")
            return False
        logger.debug(f"Deleted key: {name}")
        return True

    def list_names(self, prefix: str | None = None, *, abort: AbortSignal | None = None) -> Iterator[str]:
        """Lazily page through blob names."""
        self._check_abort(abort)
        if prefix:
            blobs = self.container_client.list_blobs(name_starts_with=prefix)
        else:
            blobs = self.container_client.list_blobs()
        for blob in blobs:
            yield blob.name

    def get_container_properties(self, *, abort: AbortSignal | None = None) -> dict:
        self._check_abort(abort)
        props = self.container_client.get_container_properties()
        return {"name": props.name, "last_modified": props.last_modified, "etag": props.etag}

    def create_container(self, *, abort: AbortSignal | None = None) -> None:
        self._check_abort(abort)
        self.container_client.create_container()
        logger.info(f"Created container: {self.container}")

    def is_not_found(self, error: BaseException) -> bool:
        if isinstance(error, ResourceNotFoundError):
            return True
        return isinstance(error, HttpResponseError) and error.status_code == 404

    def is_forbidden(self, error: BaseException) -> bool:
        return isinstance(error, HttpResponseError) and error.status_code == 403

    def is_already_exists(self, error: BaseException) -> bool:
        if isinstance(error, ResourceExistsError):
            return True
        return isinstance(error, HttpResponseError) and error.status_code == 409
