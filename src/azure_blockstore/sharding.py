"""Sharding strategies mapping CIDs to blob names.

A strategy turns a CID into a blob name and back. Blob storage throttles per
partition and partitions by name prefix, so the default strategy spreads
blocks over many short "directories":

    NextToLast().encode(cid) -> "2Q/BAFKREI...G2QA.data"

Every strategy embeds the complete CID in the name, so decoding never needs
any state beyond the strategy's own options.
"""

from typing import Protocol, runtime_checkable

from multiformats import CID, multibase

from .errors import ConfigurationError, DecodeError


@runtime_checkable
class ShardingStrategy(Protocol):
    """Protocol for CID <-> blob name mappings."""

    def encode(self, cid: CID) -> str:
        """Return the blob name for ``cid``."""
        ...

    def decode(self, path: str) -> CID:
        """Return the CID stored under ``path``.

        Raises:
            DecodeError: If ``path`` was not produced by this strategy
        """
        ...


class NextToLast:
    """Shard by the characters just before the last one of the encoded CID.

    The CID's binary form is encoded with a self-describing multibase
    (``base32upper`` by default, so names start with ``B``). The final
    character carries only a few bits of the digest, so the directory is
    taken from the ``prefix_length`` characters before it.

    Examples:
        prefix_length=2, "BAFKREIABC...XYZ" -> "XY/BAFKREIABC...XYZ.data"
    """

    def __init__(self, prefix_length: int = 2, extension: str = ".data", base: str = "base32upper"):
        if prefix_length < 1:
            raise ConfigurationError(f"prefix_length must be positive, got {prefix_length}")
        if "/" in extension:
            raise ConfigurationError(f"extension must not contain '/': {extension!r}")
        self.prefix_length = prefix_length
        self.extension = extension
        self.base = base

    def _shard(self, encoded: str) -> str:
        return encoded[-self.prefix_length - 1:-1]

    def encode(self, cid: CID) -> str:
        encoded = multibase.encode(bytes(cid), self.base)
        return f"{self._shard(encoded)}/{encoded}{self.extension}"

    def decode(self, path: str) -> CID:
        parts = path.split("/")
        if len(parts) != 2:
            raise DecodeError(f"Expected '<shard>/<cid>{self.extension}', got {path!r}", key=path)

        shard, filename = parts
        if self.extension:
            if not filename.endswith(self.extension):
                raise DecodeError(f"Missing {self.extension!r} extension: {path!r}", key=path)
            filename = filename[: -len(self.extension)]

        if len(filename) <= self.prefix_length or self._shard(filename) != shard:
            raise DecodeError(f"Shard directory does not match CID: {path!r}", key=path)

        try:
            cid = CID.decode(multibase.decode(filename))
        except Exception as e:
            raise DecodeError(f"Invalid CID in blob name {path!r}: {e}", key=path, cause=e) from e
        if self.encode(cid) != path:
            raise DecodeError(f"Blob name {path!r} is not the canonical name for {cid}", key=path)
        return cid

    def __repr__(self) -> str:
        return f"NextToLast(prefix_length={self.prefix_length}, extension={self.extension!r})"


class Flat:
    """Identity mapping: the blob name is the CID's canonical string."""

    def encode(self, cid: CID) -> str:
        # Default base for the CID version, not the base it was parsed from
        return str(CID.decode(bytes(cid)))

    def decode(self, path: str) -> CID:
        if not path or "/" in path:
            raise DecodeError(f"Flat blob names cannot be empty or nested: {path!r}", key=path)
        try:
            cid = CID.decode(path)
        except Exception as e:
            raise DecodeError(f"Invalid CID in blob name {path!r}: {e}", key=path, cause=e) from e
        if self.encode(cid) != path:
            raise DecodeError(f"Blob name {path!r} is not the canonical name for {cid}", key=path)
        return cid

    def __repr__(self) -> str:
        return "Flat()"


STRATEGIES = {
    "next-to-last": NextToLast,
    "flat": Flat,
}


def get_sharding_strategy(name: str = "next-to-last", **options) -> ShardingStrategy:
    """Resolve a strategy by its configuration name.

    Args:
        name: "next-to-last" or "flat"
        **options: Constructor options for the strategy

    Returns:
        Strategy instance

    Raises:
        ConfigurationError: If the name is unknown or options are invalid
    """
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown sharding strategy {name!r}. Choose from: {', '.join(STRATEGIES)}"
        )
    try:
        return strategy_cls(**options)
    except TypeError as e:
        raise ConfigurationError(f"Invalid options for {name!r} sharding: {e}") from e


__all__ = ["ShardingStrategy", "NextToLast", "Flat", "get_sharding_strategy"]
