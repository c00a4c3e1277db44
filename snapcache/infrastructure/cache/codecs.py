"""Payload codecs for cache files.

The payload is everything after the metadata block. Pickle is the default
and handles arbitrary Python objects; JSON is available for caches whose
items must stay readable by other tools.
"""

import json
import logging
import pickle
from typing import Any, Dict, List, Type

from snapcache.domain.interfaces.codec import PayloadCodec

logger = logging.getLogger(__name__)

DEFAULT_CODEC = "pickle"


class PickleCodec(PayloadCodec):
    """Pickles the item list using the highest available protocol."""

    name = "pickle"

    def encode(self, items: List[Any]) -> bytes:
        return pickle.dumps(items, protocol=pickle.HIGHEST_PROTOCOL)

    def decode(self, data: bytes) -> List[Any]:
        items = pickle.loads(data)
        if not isinstance(items, list):
            raise ValueError(f"Pickled payload is a {type(items).__name__}, expected a list")
        return items


class JsonCodec(PayloadCodec):
    """Stores the items as a UTF-8 JSON array.

    Only JSON-native items round-trip unchanged: tuples come back as lists,
    and non-string dict keys come back as strings.
    """

    name = "json"

    def encode(self, items: List[Any]) -> bytes:
        return json.dumps(items, ensure_ascii=False).encode("utf-8")

    def decode(self, data: bytes) -> List[Any]:
        items = json.loads(data.decode("utf-8"))
        if not isinstance(items, list):
            raise ValueError(f"JSON payload is a {type(items).__name__}, expected an array")
        return items


_CODECS: Dict[str, Type[PayloadCodec]] = {
    PickleCodec.name: PickleCodec,
    JsonCodec.name: JsonCodec,
}


def available_codecs() -> List[str]:
    """Names accepted by `get_codec`."""
    return sorted(_CODECS)


def get_codec(name: str) -> PayloadCodec:
    """Returns a codec instance by name.

    Raises:
        ValueError: If no codec is registered under `name`.
    """
    try:
        codec_cls = _CODECS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown payload codec '{name}'. Available: {', '.join(available_codecs())}") from None
    logger.debug(f"Using payload codec: {codec_cls.name}")
    return codec_cls()
