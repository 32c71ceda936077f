"""Helpers for building and parsing CIDs."""

from multiformats import CID, multihash

from .errors import DecodeError


def cid_for(data: bytes, codec: str = "raw", hash_fn: str = "sha2-256") -> CID:
    """Compute the CIDv1 addressing ``data``.

    Args:
        data: Block content
        codec: Multicodec name for the content (default: "raw")
        hash_fn: Multihash function name (default: "sha2-256")

    Returns:
        CIDv1 in base32
    """
    digest = multihash.digest(data, hash_fn)
    return CID("base32", 1, codec, digest)


def parse_cid(text: str) -> CID:
    """Parse a CID string, raising DecodeError for malformed input."""
    try:
        return CID.decode(text.strip())
    except Exception as e:
        raise DecodeError(f"Invalid CID {text!r}: {e}", key=text, cause=e) from e
