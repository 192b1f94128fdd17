"""
Cache key derivation
"""
import hashlib
import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel

# Bundle entries set by the coordinator
CONTENT_KEY = "content"
POST_ID_KEY = "__post_id"
POST_LAST_CHANGED_KEY = "__post_last_changed"
USER_ID_KEY = "__user_id"

# 128-bit digest, hex encoded
KEY_HASH_LENGTH = 32


# Marks a non-JSON value in the canonical form
TYPE_TAG = "__t"


def _tagged(type_name: str, value: Any) -> dict:
    return {TYPE_TAG: type_name, "v": value}


def _sort_key(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonicalize(value: Any) -> Any:
    """
    Reduce a bundle value to plain JSON types with a stable shape

    Values JSON cannot tell apart (tuples from lists, datetimes from ISO
    strings, int keys from str keys, ...) are wrapped in a type tag so they
    stay distinct.

    Raises:
        TypeError: for values with no stable representation
    """
    if isinstance(value, Enum):
        return _tagged("enum", [type(value).__qualname__, canonicalize(value.value)])
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, BaseModel):
        return _tagged("model", [type(value).__qualname__, canonicalize(value.model_dump())])
    if isinstance(value, Mapping):
        if all(isinstance(k, str) for k in value) and TYPE_TAG not in value:
            return {k: canonicalize(v) for k, v in value.items()}
        items = [[_canonicalize_key(k), canonicalize(v)] for k, v in value.items()]
        return _tagged("map", sorted(items, key=_sort_key))
    if isinstance(value, list):
        return [canonicalize(v) for v in value]
    if isinstance(value, tuple):
        return _tagged("tuple", [canonicalize(v) for v in value])
    if isinstance(value, (set, frozenset)):
        return _tagged("set", sorted((canonicalize(v) for v in value), key=_sort_key))
    if isinstance(value, datetime):
        return _tagged("datetime", value.isoformat())
    if isinstance(value, date):
        return _tagged("date", value.isoformat())
    if isinstance(value, (bytes, bytearray)):
        return _tagged("bytes", bytes(value).hex())
    raise TypeError(f"Cannot derive a cache key from {type(value).__name__} value")


def _canonicalize_key(key: Any) -> list:
    """Mapping key as ``[type, value]``"""
    return [type(key).__name__, canonicalize(key)]


def serialize_bundle(bundle: Mapping[str, Any]) -> bytes:
    """Deterministic byte form of a bundle, independent of insertion order"""
    return json.dumps(
        canonicalize(bundle),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    ).encode('utf-8')


def hash_bundle(bundle: Mapping[str, Any]) -> str:
    return hashlib.sha256(serialize_bundle(bundle)).hexdigest()[:KEY_HASH_LENGTH]


def derive_key(name: str, bundle: Mapping[str, Any]) -> str:
    """Cache key ``<name>:<hash>`` for a shortcode and its bundle"""
    return f"{name}:{hash_bundle(bundle)}"
