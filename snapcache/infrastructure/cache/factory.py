"""Factory for FileCache handles.

A CacheFactory owns one storage directory and resolves identifiers to files
inside it. The directory is passed in explicitly, so several factories with
different locations can coexist in one process.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from snapcache.domain.exceptions import CacheError, CacheMissError, StorageUnavailableError
from snapcache.domain.interfaces.codec import PayloadCodec
from snapcache.domain.models.metadata import ExpirySpec, utc_now
from snapcache.infrastructure.cache.codecs import DEFAULT_CODEC, get_codec
from snapcache.infrastructure.cache.file_cache import TEMP_SUFFIX, Clock, FileCache
from snapcache.infrastructure.cache.file_format import CacheFileInfo, read_file_info
from snapcache.infrastructure.config import settings

logger = logging.getLogger(__name__)

CodecSpec = Union[str, PayloadCodec]


def _resolve_codec(codec: CodecSpec) -> PayloadCodec:
    return codec if isinstance(codec, PayloadCodec) else get_codec(codec)


class CacheFactory:
    """Produces FileCache handles for identifiers under one base directory."""

    def __init__(
        self,
        base_dir: Union[str, Path],
        codec: CodecSpec = DEFAULT_CODEC,
        clock: Clock = utc_now,
    ):
        """Initializes the factory and creates the storage directory.

        Args:
            base_dir: Directory holding one file per identifier.
            codec: Default payload codec, by name or instance.
            clock: Source of the current time, shared by every handle.

        Raises:
            StorageUnavailableError: If the directory cannot be created.
            ValueError: If the codec name is unknown.
        """
        self.base_dir = Path(base_dir).expanduser()
        self.codec = _resolve_codec(codec)
        self.clock = clock
        self._setup_base_dir()
        logger.info(f"CacheFactory initialized. dir={self.base_dir}, codec={self.codec.name}")

    def _setup_base_dir(self) -> None:
        """Creates the storage directory if it doesn't exist."""
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create cache directory {self.base_dir}: {e}")
            raise StorageUnavailableError(f"Cannot create cache directory: {e}", path=self.base_dir) from e

    def path_for(self, identifier: str) -> Path:
        """Resolves an identifier to its backing file.

        Identifiers are relative paths; subdirectories are allowed but the
        result must stay inside the storage directory.

        Raises:
            ValueError: If the identifier is empty, absolute, or escapes the directory.
        """
        if not identifier or not identifier.strip():
            raise ValueError("Cache identifier must be a non-empty string")
        candidate = Path(identifier)
        if candidate.is_absolute():
            raise ValueError(f"Cache identifier must be relative: '{identifier}'")
        if identifier.endswith(TEMP_SUFFIX):
            raise ValueError(f"Cache identifier may not end with '{TEMP_SUFFIX}'")

        base = self.base_dir.resolve()
        path = (base / candidate).resolve()
        if path == base or base not in path.parents:
            raise ValueError(f"Cache identifier escapes the cache directory: '{identifier}'")
        return path

    def open(self, identifier: str, expiry: ExpirySpec = 0, codec: Optional[CodecSpec] = None) -> FileCache:
        """Opens (or creates) the cache for `identifier`.

        See `FileCache.open` for the metadata precedence rules and errors.
        """
        path = self.path_for(identifier)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot create cache subdirectory: {e}", identifier=identifier, path=path
            ) from e
        payload_codec = _resolve_codec(codec) if codec is not None else self.codec
        return FileCache.open(path, identifier, expiry, codec=payload_codec, clock=self.clock)

    def identifiers(self) -> List[str]:
        """Identifiers of all cache files currently in the directory."""
        base = self.base_dir.resolve()
        found = [
            p.relative_to(base).as_posix()
            for p in base.rglob("*")
            if p.is_file() and not p.name.endswith(TEMP_SUFFIX)
        ]
        return sorted(found)

    def inspect(self, identifier: str) -> CacheFileInfo:
        """Reads the layout and metadata of a cache file without loading or expiring it.

        Raises:
            CacheMissError: If no file exists for the identifier.
            CorruptMetadataError: If the metadata block is unreadable.
            StorageUnavailableError: If the file cannot be read.
        """
        path = self.path_for(identifier)
        if not path.is_file():
            raise CacheMissError("No cache file for identifier", identifier=identifier, path=path)
        return read_file_info(path)

    def is_expired(self, info: CacheFileInfo) -> bool:
        return info.metadata is not None and info.metadata.is_expired(self.clock())

    def remove(self, identifier: str) -> bool:
        """Deletes the cache file for `identifier`. Returns False if there was none."""
        path = self.path_for(identifier)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageUnavailableError(f"Cannot delete cache file: {e}", identifier=identifier, path=path) from e
        logger.info(f"Removed cache '{identifier}' ({path})")
        return True

    def purge_expired(self) -> List[str]:
        """Deletes every cache file whose stored metadata has expired.

        Unreadable files are skipped with a warning.

        Returns:
            The identifiers that were removed.
        """
        removed = []
        for identifier in self.identifiers():
            try:
                info = self.inspect(identifier)
                if self.is_expired(info) and self.remove(identifier):
                    removed.append(identifier)
            except CacheError as e:
                logger.warning(f"Skipping cache '{identifier}' during purge: {e}")
        logger.info(f"Purged {len(removed)} expired cache(s) from {self.base_dir}")
        return removed


def open_cache(
    identifier: str,
    expiry: Optional[ExpirySpec] = None,
    base_dir: Optional[Union[str, Path]] = None,
    codec: Optional[CodecSpec] = None,
) -> FileCache:
    """Opens a cache using the configured storage directory and defaults.

    Args:
        identifier: Name of the cache.
        expiry: Expiry for a new cache. None uses `cache.expiry_seconds`
            from configuration (0, never expires, unless configured).
        base_dir: Overrides the configured `cache.dir`.
        codec: Overrides the configured `cache.codec`.
    """
    settings.load_configuration()
    factory = CacheFactory(
        base_dir if base_dir is not None else settings.get_cache_dir(),
        codec=codec if codec is not None else settings.get_default_codec(),
    )
    if expiry is None:
        expiry = settings.get_default_expiry()
    return factory.open(identifier, expiry)
