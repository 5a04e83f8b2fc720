"""
Fingerprints and the normalization cache.

Modules:
- fingerprint.py: Cheap isomorphism invariant used as cache key
- cache.py: NormalizationCache (fingerprint → bucket of entries)
- normalize.py: normalize / is_isomorphic with optional caching
"""

from .cache import CacheEntry, NormalizationCache
from .fingerprint import fingerprint
from .normalize import is_isomorphic, labeled_signature, normalize

__all__ = [
    "CacheEntry",
    "NormalizationCache",
    "fingerprint",
    "is_isomorphic",
    "labeled_signature",
    "normalize",
]
