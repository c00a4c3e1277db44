"""Interface for payload serializers.

A codec turns the ordered item sequence into the bytes that follow the
metadata block of a cache file, and back.
"""

import abc
from typing import Any, List


class PayloadCodec(abc.ABC):
    """Abstract Base Class for payload codecs."""

    name: str = ""

    @abc.abstractmethod
    def encode(self, items: List[Any]) -> bytes:
        """Serializes the items.

        Raises:
            Any exception from the underlying serializer; callers wrap it.
        """
        pass

    @abc.abstractmethod
    def decode(self, data: bytes) -> List[Any]:
        """Deserializes bytes produced by `encode` back into a list."""
        pass
