"""Deterministic hashing helpers for event ids and plan fingerprints."""

from typing import Any, Optional, Union
import json
import math

FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193


def fnv1a32(text: str) -> int:
    """
    32-bit FNV-1a hash of the UTF-8 encoding of ``text``.

    Example:
        >>> hex(fnv1a32(""))
        '0x811c9dc5'
    """
    h = FNV32_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * FNV32_PRIME) & 0xFFFFFFFF
    return h


def hex32(value: int) -> str:
    return f"{value:08x}"


def normalize_number(value: Optional[float]) -> Union[int, float, None]:
    """
    Stable JSON form of a number.

    Integral floats become ints (``330.0`` -> ``330``) and other values are
    rounded to 6 decimals, so equal quantities always serialize identically.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if not math.isfinite(value):
        return None
    rounded = round(float(value), 6)
    if rounded.is_integer():
        return int(rounded)
    return rounded


def canonical_json(payload: Any) -> str:
    """Compact JSON with sorted keys."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def stable_id(prefix: str, parts: Any) -> str:
    """
    Content-derived identifier.

    Args:
        prefix: Id prefix (the event type)
        parts: JSON-serializable content

    Returns:
        ``"{prefix}_{8 hex digits}"``
    """
    return f"{prefix}_{hex32(fnv1a32(canonical_json(parts)))}"
