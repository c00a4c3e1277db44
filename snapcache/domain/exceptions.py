"""Error taxonomy for cache operations.

Opening and saving propagate these to the caller. `FileCache.load()` collapses
every one of them into "no data"; `FileCache.load_strict()` lets them through
for callers that need to tell the cases apart.
"""

from pathlib import Path
from typing import Optional, Union


class CacheError(Exception):
    """Base exception for all cache failures."""
    def __init__(
        self,
        message: str,
        identifier: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        self.message = message
        self.identifier = identifier
        self.path = Path(path) if path is not None else None
        super().__init__(message)

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} (path={self.path})"
        return self.message


class StorageUnavailableError(CacheError):
    """The backing file could not be opened, created, read, written or replaced."""


class CorruptMetadataError(CacheError):
    """The length-prefixed metadata block could not be read or decoded."""


class EncodeFailureError(CacheError):
    """Metadata or payload could not be serialized during a save."""


# --- Raised only by FileCache.load_strict() ---

class CacheMissError(CacheError):
    """No payload has been saved yet (missing file or empty file)."""


class CacheExpiredError(CacheError):
    """The cache expired; its backing file has been deleted."""


class CorruptPayloadError(CacheError):
    """The payload following the metadata block could not be decoded."""
