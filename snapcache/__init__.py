"""snapcache: single-file, disk-persisted snapshot caches with optional expiry.

    factory = CacheFactory("/var/cache/myapp")
    cache = factory.open("feeds", expiry=3600)
    cache.save(items)
    items = cache.load()  # None when expired, empty or unreadable
"""

from snapcache.domain.exceptions import (
    CacheError,
    CacheExpiredError,
    CacheMissError,
    CorruptMetadataError,
    CorruptPayloadError,
    EncodeFailureError,
    StorageUnavailableError,
)
from snapcache.domain.models.metadata import CacheMetadata
from snapcache.infrastructure.cache.codecs import JsonCodec, PickleCodec, get_codec
from snapcache.infrastructure.cache.factory import CacheFactory, open_cache
from snapcache.infrastructure.cache.file_cache import FileCache

__version__ = "0.1.0"

__all__ = [
    "CacheError",
    "CacheExpiredError",
    "CacheFactory",
    "CacheMetadata",
    "CacheMissError",
    "CorruptMetadataError",
    "CorruptPayloadError",
    "EncodeFailureError",
    "FileCache",
    "JsonCodec",
    "PickleCodec",
    "StorageUnavailableError",
    "get_codec",
    "open_cache",
]
