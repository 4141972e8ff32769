"""Cheap content hash used to pre-filter definition equality scans."""
import json
from typing import Any

_SEED = 5381
_MASK = 0xFFFFFFFF


def serialize(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def string_hash(text: str) -> int:
    """djb2 variant (xor form) over ``text`` read back to front, as an unsigned 32-bit int."""
    h = _SEED
    for ch in reversed(text):
        h = ((h * 33) ^ ord(ch)) & _MASK
    return h


def content_hash(value: Any) -> int:
    """Hash of the canonical JSON form of ``value``. Not collision resistant."""
    return string_hash(serialize(value))


def same_content(a: Any, b: Any) -> bool:
    """Type-strict deep equality: ``True``, ``1`` and ``1.0`` are different values here."""
    return content_hash(a) == content_hash(b) and serialize(a) == serialize(b)
