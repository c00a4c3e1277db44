import io
from datetime import datetime, timezone

import pytest

from snapcache.domain.exceptions import CorruptMetadataError, EncodeFailureError
from snapcache.domain.models.metadata import CacheMetadata
from snapcache.infrastructure.cache import file_format


@pytest.fixture
def metadata():
    return CacheMetadata(
        identifier="quotes",
        expire_enabled=True,
        expiry_time=datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc),
    )


def _record(metadata: CacheMetadata, payload: bytes = b"") -> bytes:
    block = file_format.encode_metadata(metadata)
    return file_format.encode_header(len(block)) + block + payload


def test_header_is_four_bytes_little_endian():
    assert file_format.encode_header(1) == b"\x01\x00\x00\x00"
    assert file_format.encode_header(0x01020304) == b"\x04\x03\x02\x01"
    assert file_format.decode_header(b"\x04\x03\x02\x01") == 0x01020304


def test_header_rejects_lengths_outside_uint32():
    with pytest.raises(EncodeFailureError):
        file_format.encode_header(0x100000000)
    with pytest.raises(EncodeFailureError):
        file_format.encode_header(-1)


def test_decode_header_requires_exactly_four_bytes():
    with pytest.raises(ValueError):
        file_format.decode_header(b"\x01\x00")


def test_metadata_block_round_trips(metadata):
    decoded = file_format.decode_metadata(file_format.encode_metadata(metadata))
    assert decoded == metadata


def test_naive_expiry_is_read_as_utc():
    block = b'{"identifier":"x","expire":false,"expiry":"2024-01-01T00:00:00"}'
    decoded = file_format.decode_metadata(block)
    assert decoded.expiry_time.tzinfo == timezone.utc


@pytest.mark.parametrize("block", [
    b"\xff\xfe",
    b"[]",
    b'{"identifier":"x","expire":true}',
    b'{"identifier":"x","expire":"yes","expiry":"2024-01-01T00:00:00+00:00"}',
    b'{"identifier":1,"expire":true,"expiry":"2024-01-01T00:00:00+00:00"}',
    b'{"identifier":"x","expire":true,"expiry":"tomorrow"}',
])
def test_malformed_metadata_blocks_raise_value_error(block):
    with pytest.raises(ValueError):
        file_format.decode_metadata(block)


def test_read_metadata_returns_none_for_short_stream():
    assert file_format.read_metadata(io.BytesIO(b"")) is None
    assert file_format.read_metadata(io.BytesIO(b"\x05\x00")) is None


def test_read_metadata_reads_exactly_the_header_length(metadata):
    stream = io.BytesIO(_record(metadata, payload=b"PAYLOAD"))
    assert file_format.read_metadata(stream) == metadata
    assert stream.read() == b"PAYLOAD"


def test_read_metadata_rejects_header_longer_than_file():
    stream = io.BytesIO(b"\xff\xff\xff\xff" + b"abc")
    with pytest.raises(CorruptMetadataError):
        file_format.read_metadata(stream)


def test_seek_payload_skips_header_and_metadata(metadata):
    stream = io.BytesIO(_record(metadata, payload=b"PAYLOAD"))
    stream.read(3)
    assert file_format.seek_payload(stream) is True
    assert stream.read() == b"PAYLOAD"


def test_seek_payload_without_header():
    assert file_format.seek_payload(io.BytesIO(b"\x00")) is False


def test_read_file_info_describes_layout(tmp_path, metadata):
    path = tmp_path / "quotes"
    block = file_format.encode_metadata(metadata)
    path.write_bytes(_record(metadata, payload=b"0123456789"))

    info = file_format.read_file_info(path)
    assert info.metadata == metadata
    assert info.metadata_length == len(block)
    assert info.payload_size == 10
    assert info.file_size == 4 + len(block) + 10
    assert info.is_empty is False


def test_read_file_info_on_empty_file(tmp_path):
    path = tmp_path / "empty"
    path.touch()
    info = file_format.read_file_info(path)
    assert info.is_empty is True
    assert info.payload_size == 0
