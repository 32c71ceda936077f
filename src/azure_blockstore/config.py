"""Store configuration and factories.

Configuration is usually kept in a YAML file:

    container: blocks
    create_if_missing: true
    sharding:
      strategy: next-to-last

and turned into a ready-to-open store with ``build_store(StoreConfig.from_yaml(path))``.
"""

import logging
import os
from typing import Literal

from azure.storage.blob import BlobServiceClient
from pydantic import BaseModel, Field, field_validator

from .backends.azure import AzureObjectStore
from .backends.base import ObjectStore
from .config_base import ConfigModel
from .errors import ConfigurationError
from .sharding import ShardingStrategy, get_sharding_strategy
from .stores import Blockstore, Datastore

logger = logging.getLogger(__name__)

CONNECTION_STRING_ENV = "AZURE_STORAGE_CONNECTION_STRING"


class ShardingConfig(BaseModel):
    """Sharding strategy selection for block stores."""

    strategy: Literal["next-to-last", "flat"] = "next-to-last"
    prefix_length: int = Field(2, ge=1, le=16)
    extension: str = ".data"

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v):
        if "/" in v:
            raise ValueError(f"Extension cannot contain '/': {v}")
        return v

    def build(self) -> ShardingStrategy:
        if self.strategy == "flat":
            return get_sharding_strategy("flat")
        return get_sharding_strategy(
            self.strategy, prefix_length=self.prefix_length, extension=self.extension
        )


class StoreConfig(ConfigModel):
    """
    Store configuration with validation.

    Selects the container, store kind and key mapping. Credentials come
    from connection_string, then account_name (DefaultAzureCredential),
    then the AZURE_STORAGE_CONNECTION_STRING environment variable.
    """

    container: str = Field(..., pattern="^[a-z0-9-]+$", min_length=3, max_length=63)
    kind: Literal["blockstore", "datastore"] = "blockstore"
    create_if_missing: bool = False
    path: str | None = None  # Datastore namespace only
    sharding: ShardingConfig = Field(default_factory=ShardingConfig)
    decode_errors: Literal["strict", "skip"] = "strict"

    connection_string: str | None = None
    account_name: str | None = None

    @field_validator("container")
    @classmethod
    def validate_container_name(cls, v):
        """Ensure container name meets Azure requirements."""
        if "--" in v or v.startswith("-") or v.endswith("-"):
            raise ValueError(f"Invalid container name format: {v}")
        return v

    @field_validator("path")
    @classmethod
    def validate_path(cls, v):
        if v is not None and not v.strip("/"):
            return None
        return v


def build_service_client(config: StoreConfig) -> BlobServiceClient:
    """Create an account-level blob client from configuration.

    Raises:
        ConfigurationError: If no credentials are available
    """
    if config.connection_string:
        return BlobServiceClient.from_connection_string(config.connection_string)

    if config.account_name:
        # Use default credential (managed identity, env vars, az login)
        from azure.identity import DefaultAzureCredential

        account_url = f"https://{config.account_name}.blob.core.windows.net"
        logger.debug(f"Using DefaultAzureCredential for {account_url}")
        return BlobServiceClient(account_url=account_url, credential=DefaultAzureCredential())

    conn_str = os.environ.get(CONNECTION_STRING_ENV)
    if conn_str:
        return BlobServiceClient.from_connection_string(conn_str)

    raise ConfigurationError(
        "Azure storage connection not found. Either:\n"
        "1. Set connection_string in the configuration\n"
        "2. Set account_name to authenticate with DefaultAzureCredential\n"
        f"3. Set {CONNECTION_STRING_ENV} environment variable"
    )


def build_object_store(config: StoreConfig, service_client: BlobServiceClient | None = None) -> ObjectStore:
    """Create the Azure container wrapper described by ``config``."""
    client = service_client or build_service_client(config)
    return AzureObjectStore.from_service_client(client, config.container)


def build_store(config: StoreConfig, object_store: ObjectStore | None = None) -> Blockstore | Datastore:
    """Create the (unopened) store described by ``config``.

    Args:
        config: Store configuration
        object_store: Backend to use instead of building an Azure client

    Returns:
        Blockstore or Datastore depending on ``config.kind``
    """
    if object_store is None:
        object_store = build_object_store(config)

    if config.kind == "datastore":
        return Datastore(
            object_store,
            path=config.path,
            create_if_missing=config.create_if_missing,
            decode_errors=config.decode_errors,
        )
    return Blockstore(
        object_store,
        create_if_missing=config.create_if_missing,
        sharding_strategy=config.sharding.build(),
        decode_errors=config.decode_errors,
    )
