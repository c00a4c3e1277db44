"""Value objects describing a cache instance.

A cache is named by an identifier and carries its own expiry configuration,
which is persisted alongside the payload so that it survives restarts.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import NewType, Optional, Union

# === Caching Context ===
CacheIdentifier = NewType("CacheIdentifier", str)  # Relative file name under the storage dir

# Seconds (int/float) or a timedelta. None and 0 both mean "never expires".
ExpirySpec = Optional[Union[int, float, timedelta]]


def utc_now() -> datetime:
    """Default clock: current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_timedelta(expiry: ExpirySpec) -> timedelta:
    """Normalizes an expiry given in seconds or as a timedelta."""
    if expiry is None:
        return timedelta(0)
    if isinstance(expiry, timedelta):
        return expiry
    if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
        raise TypeError(f"expiry must be seconds or a timedelta, got {type(expiry).__name__}")
    try:
        return timedelta(seconds=expiry)
    except OverflowError:
        return timedelta.max if expiry > 0 else timedelta.min


@dataclass
class CacheMetadata:
    """Identity and expiry configuration of one cache file."""
    identifier: CacheIdentifier
    expire_enabled: bool
    expiry_time: datetime  # Absolute, timezone-aware

    @classmethod
    def fresh(cls, identifier: str, expiry: ExpirySpec, now: datetime) -> "CacheMetadata":
        """Builds the defaults used to seed a brand-new cache.

        Args:
            identifier: Name of the cache.
            expiry: Time-to-live; zero or None disables expiry.
            now: Reference time the expiry is measured from.

        Returns:
            Metadata with `expire_enabled` set whenever the expiry is non-zero.
        """
        delta = to_timedelta(expiry)
        try:
            expiry_time = now + delta
        except OverflowError:
            # Clamp to the representable range
            expiry_time = (datetime.max if delta > timedelta(0) else datetime.min).replace(tzinfo=timezone.utc)
        return cls(
            identifier=CacheIdentifier(identifier),
            expire_enabled=delta != timedelta(0),
            expiry_time=expiry_time,
        )

    def is_expired(self, now: datetime) -> bool:
        """True when expiry is enabled and the expiry time lies strictly before `now`."""
        return self.expire_enabled and self.expiry_time < now
