#!/usr/bin/env python
"""Store and read back blocks in an Azure container.

Requires AZURE_STORAGE_CONNECTION_STRING. Without it, falls back to an
in-memory container so the flow can be tried locally.

Usage:
    python examples/store_blocks.py [container]
"""

import logging
import os
import sys

from azure.storage.blob import BlobServiceClient

from azure_blockstore import AzureBlockstore, Blockstore, InMemoryObjectStore, cid_for

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("store_blocks")


def make_store(container: str) -> Blockstore:
    conn_str = os.environ.get("AZURE_STORAGE_CONNECTION_STRING")
    if conn_str:
        client = BlobServiceClient.from_connection_string(conn_str)
        return AzureBlockstore(client, container, create_if_missing=True)
    logger.info("AZURE_STORAGE_CONNECTION_STRING not set, using in-memory container")
    return Blockstore(InMemoryObjectStore(container), create_if_missing=True)


def main():
    container = sys.argv[1] if len(sys.argv) > 1 else "blocks"

    with make_store(container) as store:
        blocks = [bytes([0, 1, 2, 3]), b"hello world", os.urandom(1024 * 1024)]
        for data in blocks:
            cid = store.put(cid_for(data), data)
            print(f"Added block: {cid} ({len(data)} bytes)")

        for cid, data in store.get_all():
            print(f"Fetched {cid} containing {len(data)} bytes")


if __name__ == "__main__":
    main()
