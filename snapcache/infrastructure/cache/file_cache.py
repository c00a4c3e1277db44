"""Single-file snapshot cache.

Each FileCache owns one backing file holding a length-prefixed metadata block
followed by the payload (see `file_format`). Every save rewrites the whole
file; every load reads the whole payload and deletes the file once the cache
has expired.

A handle serializes its own calls with a private lock. Two handles on the
same file, or two processes, are not coordinated: keep one handle per
identifier.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Callable, Iterable, List, Optional, Union

from snapcache.domain.exceptions import (
    CacheError,
    CacheExpiredError,
    CacheMissError,
    CorruptMetadataError,
    CorruptPayloadError,
    EncodeFailureError,
    StorageUnavailableError,
)
from snapcache.domain.interfaces.cache import CacheStore, T
from snapcache.domain.interfaces.codec import PayloadCodec
from snapcache.domain.models.metadata import CacheMetadata, ExpirySpec, utc_now
from snapcache.infrastructure.cache import file_format
from snapcache.infrastructure.cache.codecs import PickleCodec

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".snapcache-tmp"

Clock = Callable[[], datetime]


class FileCache(CacheStore[T]):
    """Disk-persisted cache for an ordered list of items under one identifier."""

    def __init__(
        self,
        path: Union[str, Path],
        metadata: CacheMetadata,
        codec: Optional[PayloadCodec] = None,
        clock: Clock = utc_now,
    ):
        """Wraps already-resolved metadata. Use `FileCache.open` or `CacheFactory.open`."""
        self._path = Path(path)
        self._metadata = metadata
        self._codec = codec or PickleCodec()
        self._clock = clock
        self._lock = Lock()

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        identifier: str,
        expiry: ExpirySpec = 0,
        codec: Optional[PayloadCodec] = None,
        clock: Clock = utc_now,
    ) -> "FileCache":
        """Opens the cache stored at `path`, creating an empty file if absent.

        Metadata saved in an existing file always wins over the defaults built
        from `identifier` and `expiry`, so the expiry configured when the
        cache was first saved survives restarts.

        Args:
            path: Backing file.
            identifier: Name of the cache.
            expiry: Seconds or timedelta until expiry for a new cache; 0 or None never expires.
            codec: Payload codec (pickle if omitted).
            clock: Source of the current time.

        Raises:
            StorageUnavailableError: If the file cannot be created or read.
            CorruptMetadataError: If the file has a header but its metadata block is unreadable.
        """
        path = Path(path)
        metadata = CacheMetadata.fresh(identifier, expiry, clock())
        try:
            with open(path, "a+b") as f:
                stored = file_format.read_metadata(f, path=path)
        except CorruptMetadataError as e:
            logger.error(f"Corrupt metadata in cache file {path}: {e.message}")
            raise CorruptMetadataError(e.message, identifier=identifier, path=path) from e
        except OSError as e:
            logger.error(f"Failed to open cache file {path}: {e}")
            raise StorageUnavailableError(f"Cannot open cache file: {e}", identifier=identifier, path=path) from e

        if stored is None:
            logger.debug(f"Opened new cache '{identifier}' at {path} (expire={metadata.expire_enabled})")
            return cls(path, metadata, codec=codec, clock=clock)

        if stored.identifier != identifier:
            logger.warning(
                f"Cache file {path} was saved as '{stored.identifier}', opened as '{identifier}'. "
                f"Keeping the stored identifier."
            )
        logger.debug(
            f"Loaded cache metadata for '{stored.identifier}' from {path} "
            f"(expire={stored.expire_enabled}, expiry={stored.expiry_time.isoformat()})"
        )
        return cls(path, stored, codec=codec, clock=clock)

    # --- Accessors ---

    @property
    def metadata(self) -> CacheMetadata:
        return self._metadata

    @property
    def identifier(self) -> str:
        return self._metadata.identifier

    @property
    def path(self) -> Path:
        return self._path

    @property
    def codec(self) -> PayloadCodec:
        return self._codec

    def is_expired(self) -> bool:
        """True once the configured expiry time has passed."""
        return self._metadata.is_expired(self._clock())

    # --- CacheStore Interface Implementation ---

    def save(self, items: Iterable[T]) -> None:
        """Replaces the file contents with the current metadata and `items`.

        The record is written to a temporary sibling and moved over the backing
        file, so a failed save leaves the previous contents in place.
        """
        with self._lock:
            metadata_block = file_format.encode_metadata(self._metadata)
            header = file_format.encode_header(len(metadata_block))
            try:
                items = list(items)
                payload = self._codec.encode(items)
            except Exception as e:
                logger.error(f"Failed to encode items for cache '{self.identifier}': {e}")
                raise EncodeFailureError(
                    f"Cannot encode payload with {self._codec.name} codec: {e}",
                    identifier=self.identifier,
                    path=self._path,
                ) from e

            temp_path = self._path.with_name(f"{self._path.name}{TEMP_SUFFIX}")
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_path, "wb") as f:
                    f.write(header)
                    f.write(metadata_block)
                    f.write(payload)
                os.replace(temp_path, self._path)
            except OSError as e:
                logger.error(f"Failed to write cache file {self._path}: {e}")
                self._discard(temp_path)
                raise StorageUnavailableError(
                    f"Cannot write cache file: {e}", identifier=self.identifier, path=self._path
                ) from e
            logger.debug(
                f"Saved {len(items)} items to cache '{self.identifier}' "
                f"(metadata={len(metadata_block)}B, payload={len(payload)}B)"
            )

    def load(self) -> Optional[List[T]]:
        """Returns the last saved items, or None when there is nothing usable.

        Expired, missing, empty and corrupt caches all yield None. Use
        `load_strict` to tell them apart.
        """
        try:
            return self.load_strict()
        except (CacheMissError, CacheExpiredError) as e:
            logger.debug(f"Cache '{self.identifier}' has no data: {e}")
        except CacheError as e:
            logger.warning(f"Cache '{self.identifier}' unreadable, treating as empty: {e}")
        return None

    def load_strict(self) -> List[T]:
        """Like `load`, but raises the reason no items could be returned.

        Expiry is still destructive: the backing file is deleted before
        CacheExpiredError is raised.

        Raises:
            CacheExpiredError: The cache expired and its file was removed.
            CacheMissError: Nothing has been saved yet.
            CorruptPayloadError: The payload could not be decoded.
            StorageUnavailableError: The file could not be read.
        """
        with self._lock:
            if self._metadata.is_expired(self._clock()):
                try:
                    removed = self._remove_file()
                except StorageUnavailableError as e:
                    logger.warning(f"Could not delete expired cache file {self._path}: {e}")
                else:
                    logger.info(f"Cache '{self.identifier}' expired; deleted={removed}")
                raise CacheExpiredError(
                    f"Cache expired at {self._metadata.expiry_time.isoformat()}",
                    identifier=self.identifier,
                    path=self._path,
                )

            try:
                with open(self._path, "rb") as f:
                    if not file_format.seek_payload(f):
                        raise CacheMissError("Cache is empty", identifier=self.identifier, path=self._path)
                    data = f.read()
            except FileNotFoundError as e:
                raise CacheMissError("Cache file does not exist", identifier=self.identifier, path=self._path) from e
            except OSError as e:
                raise StorageUnavailableError(
                    f"Cannot read cache file: {e}", identifier=self.identifier, path=self._path
                ) from e

            try:
                items = self._codec.decode(data)
            except Exception as e:
                raise CorruptPayloadError(
                    f"Cannot decode payload with {self._codec.name} codec: {e}",
                    identifier=self.identifier,
                    path=self._path,
                ) from e
            logger.debug(f"Loaded {len(items)} items from cache '{self.identifier}'")
            return items

    def delete(self) -> bool:
        """Removes the backing file. Returns False if it did not exist."""
        with self._lock:
            return self._remove_file()

    # --- Helpers ---

    def _remove_file(self) -> bool:
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot delete cache file: {e}", identifier=self.identifier, path=self._path
            ) from e
        logger.debug(f"Deleted cache file {self._path}")
        return True

    def _discard(self, temp_path: Path) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove temporary cache file {temp_path}: {e}")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(identifier={self.identifier!r}, path={str(self._path)!r}, "
            f"codec={self._codec.name!r}, expire={self._metadata.expire_enabled})"
        )
