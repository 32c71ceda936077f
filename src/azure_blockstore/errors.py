"""Error types for azure-blockstore.

Every failure surfaced by a store adapter is one of the classes below. Backend
specific exceptions never escape directly; they travel as the ``cause`` of an
operation-level error (and as ``__cause__`` via ``raise ... from``).
"""

from typing import Any


class BlockstoreError(Exception):
    """Base exception for azure-blockstore errors."""

    def __init__(
        self,
        message: str = "",
        *,
        operation: str | None = None,
        key: Any = None,
        cause: BaseException | None = None,
    ):
        self.operation = operation
        self.key = key
        self.cause = cause
        if not message:
            message = self._default_message()
        super().__init__(message)

    def _default_message(self) -> str:
        parts = [type(self).__name__]
        if self.operation:
            parts.append(f"during {self.operation}")
        if self.key is not None:
            parts.append(f"of {self.key}")
        if self.cause is not None:
            parts.append(f": {self.cause}")
        return " ".join(parts)


class ConfigurationError(BlockstoreError):
    """Invalid construction arguments or configuration file."""
    pass


class NotOpenedError(BlockstoreError):
    """Data operation attempted on a store that is not open."""
    pass


class NotFoundError(BlockstoreError, KeyError):
    """No object is stored under the requested key."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return Exception.__str__(self)


class WriteFailedError(BlockstoreError):
    """The backend rejected an upload."""
    pass


class DeleteFailedError(BlockstoreError):
    """The backend rejected a delete."""
    pass


class OpenFailedError(BlockstoreError):
    """The container is missing or could not be inspected or created."""
    pass


class BackendError(BlockstoreError):
    """Uncategorised backend failure."""
    pass


class BackendInvariantError(BlockstoreError):
    """The backend reported success but returned no readable body."""
    pass


class DecodeError(BlockstoreError, ValueError):
    """A blob name could not be mapped back to a key."""
    pass


class CancelledError(BlockstoreError):
    """The operation was aborted through its abort signal."""
    pass


__all__ = [
    "BlockstoreError",
    "ConfigurationError",
    "NotOpenedError",
    "NotFoundError",
    "WriteFailedError",
    "DeleteFailedError",
    "OpenFailedError",
    "BackendError",
    "BackendInvariantError",
    "DecodeError",
    "CancelledError",
]
