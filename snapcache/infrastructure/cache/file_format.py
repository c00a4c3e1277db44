"""Binary layout of a cache file.

    offset 0     4 bytes    unsigned little-endian length L of the metadata block
    offset 4     L bytes    metadata block (UTF-8 JSON object)
    offset 4+L   rest       payload, as produced by the cache's PayloadCodec

The header always equals the exact length of the metadata block and the
payload starts right after it. Readers locate the payload from the header
alone, so a wrong header corrupts every subsequent read.
"""

import json
import logging
import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Optional

from snapcache.domain.exceptions import CorruptMetadataError, EncodeFailureError, StorageUnavailableError
from snapcache.domain.models.metadata import CacheIdentifier, CacheMetadata

logger = logging.getLogger(__name__)

HEADER = struct.Struct("<I")
HEADER_SIZE = HEADER.size
MAX_METADATA_LENGTH = 0xFFFFFFFF

# --- Header ---

def encode_header(length: int) -> bytes:
    """Packs the metadata length into the 4-byte header."""
    if not 0 <= length <= MAX_METADATA_LENGTH:
        raise EncodeFailureError(f"Metadata block of {length} bytes does not fit the 4-byte header")
    return HEADER.pack(length)


def decode_header(data: bytes) -> int:
    """Unpacks the 4-byte header. Raises ValueError on a short buffer."""
    if len(data) != HEADER_SIZE:
        raise ValueError(f"Header must be {HEADER_SIZE} bytes, got {len(data)}")
    return HEADER.unpack(data)[0]


def read_header(stream: BinaryIO) -> Optional[int]:
    """Reads the header at the current position; None if fewer than 4 bytes remain."""
    data = stream.read(HEADER_SIZE)
    if len(data) < HEADER_SIZE:
        return None
    return decode_header(data)

# --- Metadata block ---

def encode_metadata(metadata: CacheMetadata) -> bytes:
    """Serializes metadata into the block stored after the header."""
    try:
        record = {
            "identifier": metadata.identifier,
            "expire": metadata.expire_enabled,
            "expiry": metadata.expiry_time.isoformat(),
        }
        return json.dumps(record, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError, AttributeError) as e:
        raise EncodeFailureError(
            f"Failed to encode metadata: {e}", identifier=getattr(metadata, "identifier", None)
        ) from e


def decode_metadata(data: bytes) -> CacheMetadata:
    """Parses a metadata block. Raises ValueError if it is malformed."""
    try:
        record = json.loads(data.decode("utf-8"))
        identifier = record["identifier"]
        expire = record["expire"]
        expiry = datetime.fromisoformat(record["expiry"])
    except (ValueError, KeyError, TypeError, RecursionError) as e:
        raise ValueError(f"Malformed metadata block: {e}") from e

    if not isinstance(identifier, str) or not isinstance(expire, bool):
        raise ValueError("Malformed metadata block: wrong field types")
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return CacheMetadata(identifier=CacheIdentifier(identifier), expire_enabled=expire, expiry_time=expiry)


def read_metadata(stream: BinaryIO, path: Optional[Path] = None) -> Optional[CacheMetadata]:
    """Reads header and metadata block from the start of `stream`.

    Returns:
        The stored metadata, or None when the stream is too short to hold a
        header (an empty, freshly created cache).

    Raises:
        CorruptMetadataError: If the block is shorter than the header claims
            or cannot be decoded.
    """
    size = stream.seek(0, 2)
    stream.seek(0)
    length = read_header(stream)
    if length is None:
        return None
    # Never read past the end of the file
    available = size - HEADER_SIZE
    if length > available:
        raise CorruptMetadataError(
            f"Metadata block truncated: header claims {length} bytes, found {available}", path=path
        )
    block = stream.read(length)
    try:
        return decode_metadata(block)
    except ValueError as e:
        raise CorruptMetadataError(str(e), path=path) from e


def seek_payload(stream: BinaryIO) -> bool:
    """Positions `stream` at the first payload byte.

    Returns:
        False if the stream holds no complete header.
    """
    stream.seek(0)
    length = read_header(stream)
    if length is None:
        return False
    stream.seek(length, 1)  # relative to just after the header
    return True

# --- Inspection ---

@dataclass
class CacheFileInfo:
    """Layout summary of a cache file, read without touching its payload."""
    path: Path
    file_size: int
    metadata_length: Optional[int]
    metadata: Optional[CacheMetadata]

    @property
    def payload_size(self) -> int:
        if self.metadata_length is None:
            return 0
        return max(0, self.file_size - HEADER_SIZE - self.metadata_length)

    @property
    def is_empty(self) -> bool:
        return self.metadata is None


def read_file_info(path: Path) -> CacheFileInfo:
    """Describes the cache file at `path` without modifying it.

    Raises:
        StorageUnavailableError: If the file cannot be opened or read.
        CorruptMetadataError: If the metadata block is unreadable.
    """
    metadata_length = None
    try:
        with open(path, "rb") as f:
            metadata = read_metadata(f, path=path)
            if metadata is not None:
                f.seek(0)
                metadata_length = read_header(f)
            f.seek(0, 2)
            file_size = f.tell()
    except OSError as e:
        raise StorageUnavailableError(f"Cannot read cache file: {e}", path=path) from e

    logger.debug(f"Inspected {path}: size={file_size}, metadata_length={metadata_length}")
    return CacheFileInfo(path=path, file_size=file_size, metadata_length=metadata_length, metadata=metadata)
