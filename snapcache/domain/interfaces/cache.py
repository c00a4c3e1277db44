"""Interface for snapshot caches.

Defines the contract for persisting and retrieving a full, ordered snapshot
of items under one identifier, with optional expiry.
"""

import abc
from typing import Generic, Iterable, List, Optional, TypeVar

from snapcache.domain.models.metadata import CacheMetadata

T = TypeVar("T")


class CacheStore(abc.ABC, Generic[T]):
    """Abstract Base Class for a single-identifier snapshot cache."""

    @property
    @abc.abstractmethod
    def metadata(self) -> CacheMetadata:
        """The identity and expiry configuration currently held by the store."""
        pass

    @abc.abstractmethod
    def save(self, items: Iterable[T]) -> None:
        """Replaces the stored snapshot with `items`.

        Args:
            items: The full replacement payload. Prior contents are never merged.

        Raises:
            StorageUnavailableError: If the backing storage cannot be written.
            EncodeFailureError: If the metadata or items cannot be serialized.
        """
        pass

    @abc.abstractmethod
    def load(self) -> Optional[List[T]]:
        """Retrieves the most recently saved snapshot.

        Returns:
            The saved items, or None if the cache is expired, empty, missing
            or unreadable. Never raises for those cases.
        """
        pass

    @abc.abstractmethod
    def delete(self) -> bool:
        """Removes the stored snapshot.

        Returns:
            True if something was removed, False if nothing was stored.
        """
        pass
