"""CID-keyed block store backed by a blob container."""

from azure.storage.blob import BlobServiceClient
from multiformats import CID

from ..backends.azure import AzureObjectStore
from ..backends.base import ObjectStore
from ..errors import ConfigurationError
from ..sharding import NextToLast, ShardingStrategy
from .base import BaseStore


class Blockstore(BaseStore):
    """Store blocks under blob names derived from their CIDs.

    Example:
        >>> store = Blockstore(InMemoryObjectStore(), create_if_missing=True)
        >>> store.open()
        >>> cid = store.put(cid_for(b"hello"), b"hello")
        >>> store.get(cid)
        b'hello'
    """

    def __init__(
        self,
        object_store: ObjectStore,
        *,
        create_if_missing: bool = False,
        sharding_strategy: ShardingStrategy | None = None,
        decode_errors: str = "strict",
    ):
        """Initialize block store.

        Args:
            object_store: Backend container; owned by the caller
            create_if_missing: Create the container in open() if absent
            sharding_strategy: CID <-> blob name mapping (default: NextToLast())
            decode_errors: "strict" or "skip" handling of foreign blobs in get_all()
        """
        super().__init__(
            object_store,
            create_if_missing=create_if_missing,
            decode_errors=decode_errors,
        )
        self.sharding_strategy = sharding_strategy or NextToLast()

    def _encode_key(self, key: CID) -> str:
        if not isinstance(key, CID):
            raise TypeError(f"Blockstore keys must be CIDs, got {type(key).__name__}")
        return self.sharding_strategy.encode(key)

    def _decode_name(self, name: str) -> CID:
        return self.sharding_strategy.decode(name)


class AzureBlockstore(Blockstore):
    """Blockstore on an Azure container, built from an account-level client.

    Example:
        >>> client = BlobServiceClient.from_connection_string(conn_str)
        >>> with AzureBlockstore(client, "blocks", create_if_missing=True) as store:
        ...     store.put(cid, data)
    """

    def __init__(self, client: BlobServiceClient, container: str, **init):
        if client is None:
            raise ConfigurationError(
                "An Azure blob client must be supplied. "
                "Use BlobServiceClient.from_connection_string() or azure_blockstore.config.build_service_client()."
            )
        super().__init__(AzureObjectStore.from_service_client(client, container), **init)
