"""
Global total order and deterministic hashing.

Provides:
- hash64: SHA-256 canonical hash truncated to 64-bit int
- lex_min: Returns lex-min item by global order

All functions are deterministic and stable across runs.
No use of Python's built-in hash() (salted per process for str).
"""

import hashlib
import json
from typing import Any, Callable, Iterable, TypeVar

from .types import Hash64

T = TypeVar("T")


def _fallback(obj: Any) -> str:
    """Encode values JSON cannot represent (enums, dataclasses, ...)."""
    return repr(obj)


def hash64(obj: Any) -> Hash64:
    """
    Deterministic 64-bit hash using SHA-256 on canonical JSON.

    - Uses canonical JSON serialization (sorted keys, no whitespace)
    - Values JSON cannot encode fall back to their repr()
    - Truncates to 64-bit integer (first 8 bytes)

    Args:
        obj: Any Python object built from JSON types, tuples and
             values with a stable repr()

    Returns:
        64-bit integer hash (0 to 2^64-1)

    Acceptance:
        - Stable across runs (same input → same hash)
        - Independent of dict key order
        - Tuples and lists hash identically (both become JSON arrays)

    Examples:
        >>> hash64([1, 2, 3]) == hash64((1, 2, 3))
        True
        >>> hash64({"a": 1, "b": 2}) == hash64({"b": 2, "a": 1})
        True
    """
    # Serialize to canonical JSON (sorted keys, compact)
    canonical_json = json.dumps(obj, sort_keys=True, separators=(",", ":"), default=_fallback)

    sha = hashlib.sha256(canonical_json.encode("utf-8"))

    # Take first 8 bytes (64 bits) as integer
    hash_bytes = sha.digest()[:8]
    hash_int = int.from_bytes(hash_bytes, byteorder="big", signed=False)

    return Hash64(hash_int)


def lex_min(items: Iterable[T], key: Callable[[T], Any] = lambda x: x) -> T:
    """
    Returns the lexicographically minimal item by global order.

    Ties keep the first item in iteration order (min() returns the first
    minimal item). Parallel search relies on this to pick the winning
    branch in branch order.

    Args:
        items: Iterable of items to compare
        key: Function extracting comparison value (default: identity)

    Returns:
        The lex-min item

    Raises:
        ValueError: If items is empty

    Examples:
        >>> lex_min([(1, 2), (0, 5), (1, 0)])
        (0, 5)
        >>> lex_min(["b", "a", "a"], key=lambda s: s)
        'a'
    """
    items_list = list(items)
    if not items_list:
        raise ValueError("lex_min requires non-empty iterable")

    return min(items_list, key=key)
