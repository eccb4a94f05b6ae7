"""Deterministic structural hashing of Python objects.

Objects are rendered into a stable, fully expanded text form (sorted mapping
keys, dataclass fields by name) and digested with 32-bit FNV-1a.  The digest
can be turned into a short string that avoids vowels and look-alike digits.
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
import enum
from collections.abc import Mapping, Set

__all__ = [
    "fnv32a",
    "safe_encode_string",
    "deep_format",
    "deep_hash_object",
    "fnv_hash_string_objects",
]

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF

# No vowels and no 0, 1 or 3, so encoded strings never spell words.
_ALPHANUMS = "bcdfghjklmnpqrstvwxz2456789"


def fnv32a(data: bytes) -> int:
    """Return the 32-bit FNV-1a digest of ``data``."""
    digest = _FNV32_OFFSET_BASIS
    for byte in data:
        digest ^= byte
        digest = (digest * _FNV32_PRIME) & _MASK32
    return digest


def safe_encode_string(text: str) -> str:
    """Map every character of ``text`` onto a vowel-free alphabet."""
    return "".join(_ALPHANUMS[ord(ch) % len(_ALPHANUMS)] for ch in text)


def _type_name(obj: object) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def _format(obj: object, active: set[int]) -> str:
    if obj is None:
        return "nil"
    if isinstance(obj, bool):
        return f"(bool){'true' if obj else 'false'}"
    if isinstance(obj, enum.Enum):
        return f"({_type_name(obj)}){_format(obj.value, active)}"
    if isinstance(obj, int):
        return f"(int){obj}"
    if isinstance(obj, float):
        return f"(float){obj!r}"
    if isinstance(obj, str):
        return f"(string){obj!r}"
    if isinstance(obj, (bytes, bytearray)):
        return f"(bytes){bytes(obj)!r}"
    if isinstance(obj, (_dt.datetime, _dt.date, _dt.time)):
        return f"({_type_name(obj)}){obj.isoformat()}"
    if isinstance(obj, _dt.timedelta):
        return f"(timedelta){obj.total_seconds()!r}"

    key = id(obj)
    if key in active:
        return f"({_type_name(obj)})<circular>"
    active.add(key)
    try:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            fields = ", ".join(
                f"{field.name}:{_format(getattr(obj, field.name), active)}"
                for field in dataclasses.fields(obj)
            )
            return f"({_type_name(obj)}){{{fields}}}"
        if isinstance(obj, Mapping):
            items = sorted(
                (_format(k, active), _format(v, active)) for k, v in obj.items()
            )
            body = " ".join(f"{k}:{v}" for k, v in items)
            return f"({_type_name(obj)})map[{body}]"
        if isinstance(obj, (list, tuple)):
            body = ", ".join(_format(item, active) for item in obj)
            return f"({_type_name(obj)})[{body}]"
        if isinstance(obj, Set):
            body = ", ".join(sorted(_format(item, active) for item in obj))
            return f"({_type_name(obj)}){{{body}}}"
        if hasattr(obj, "__dict__"):
            fields = ", ".join(
                f"{name}:{_format(value, active)}" for name, value in vars(obj).items()
            )
            return f"({_type_name(obj)}){{{fields}}}"
        return f"({_type_name(obj)}){obj!r}"
    finally:
        active.discard(key)


def deep_format(obj: object) -> str:
    """Render ``obj`` and everything it refers to as a stable string."""
    return _format(obj, set())


def deep_hash_object(obj: object) -> int:
    """Return the FNV-1a digest of the deep rendering of ``obj``."""
    return fnv32a(deep_format(obj).encode("utf-8"))


def fnv_hash_string_objects(*objs: object) -> str:
    """Hash objects into a safe string.

    Each object restarts the digest, so the result depends on the last object
    only; with no objects it encodes the digest of empty input.
    """
    digest = fnv32a(b"")
    for obj in objs:
        digest = deep_hash_object(obj)
    return safe_encode_string(str(digest))