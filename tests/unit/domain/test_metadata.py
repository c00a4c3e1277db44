import pytest
from datetime import datetime, timedelta, timezone

from snapcache.domain.exceptions import CacheError, CorruptMetadataError
from snapcache.domain.models.metadata import CacheMetadata, to_timedelta

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("expiry, expected", [
    (None, timedelta(0)),
    (0, timedelta(0)),
    (90, timedelta(seconds=90)),
    (0.5, timedelta(milliseconds=500)),
    (timedelta(hours=1), timedelta(hours=1)),
])
def test_to_timedelta(expiry, expected):
    assert to_timedelta(expiry) == expected


@pytest.mark.parametrize("expiry", ["10", True, [1]])
def test_to_timedelta_rejects_other_types(expiry):
    with pytest.raises(TypeError):
        to_timedelta(expiry)


def test_fresh_without_expiry():
    metadata = CacheMetadata.fresh("feeds", 0, NOW)
    assert metadata.identifier == "feeds"
    assert metadata.expire_enabled is False
    assert metadata.expiry_time == NOW
    assert metadata.is_expired(NOW + timedelta(days=365)) is False


def test_fresh_with_expiry():
    metadata = CacheMetadata.fresh("feeds", 30, NOW)
    assert metadata.expire_enabled is True
    assert metadata.expiry_time == NOW + timedelta(seconds=30)


def test_expiry_is_strictly_after_expiry_time():
    metadata = CacheMetadata.fresh("feeds", 30, NOW)
    assert metadata.is_expired(NOW + timedelta(seconds=30)) is False
    assert metadata.is_expired(NOW + timedelta(seconds=31)) is True


def test_cache_error_carries_context():
    error = CorruptMetadataError("bad block", identifier="feeds", path="/tmp/feeds")
    assert isinstance(error, CacheError)
    assert error.identifier == "feeds"
    assert str(error) == "bad block (path=/tmp/feeds)"
    assert str(CacheError("plain")) == "plain"


def test_fresh_clamps_expiry_past_the_calendar():
    metadata = CacheMetadata.fresh("huge", 10**12, NOW)
    assert metadata.expire_enabled is True
    assert metadata.expiry_time == datetime.max.replace(tzinfo=timezone.utc)
    assert metadata.is_expired(NOW) is False


def test_fresh_clamps_expiry_before_the_calendar():
    metadata = CacheMetadata.fresh("ancient", -10**12, NOW)
    assert metadata.expiry_time == datetime.min.replace(tzinfo=timezone.utc)
    assert metadata.is_expired(NOW) is True


def test_to_timedelta_clamps_out_of_range_seconds():
    assert to_timedelta(10**20) == timedelta.max
    assert to_timedelta(-10**20) == timedelta.min
