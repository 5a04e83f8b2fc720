"""
Normalization cache: fingerprint → bucket of (signature, canonical form).

A fingerprint is only a necessary condition for isomorphism, so each
fingerprint owns a small bucket of entries. An entry is returned for a
structure only when its signature (the structure's own labeled
certificate) matches, so colliding non-isomorphic structures never share
a result.

The cache is the only shared mutable state of the engine. It is created
explicitly by callers and passed to the calls that want it; there is no
default instance. Every access holds a reentrant lock, and entries are
immutable, so a reader sees either no entry or a complete one.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from canon_core.types import Fingerprint
from canon_search.certificate import Certificate
from canon_search.explorer import CanonicalForm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """
    One cached result.

    Attributes:
        signature: Labeled certificate of the structure that produced the
            form
        form: Canonical form of that structure
    """

    signature: Certificate
    form: CanonicalForm


class NormalizationCache:
    """Thread-safe, never-expiring cache of canonical forms."""

    def __init__(self):
        self._buckets: Dict[Fingerprint, List[CacheEntry]] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def lookup(self, fingerprint: Fingerprint, signature: Certificate) -> Optional[CanonicalForm]:
        """
        Find a cached canonical form.

        Args:
            fingerprint: Fingerprint of the structure
            signature: Labeled certificate of the structure; only an entry
                with the same signature matches

        Returns:
            The cached CanonicalForm, or None
        """
        with self._lock:
            bucket = self._buckets.get(fingerprint, [])
            for entry in bucket:
                if entry.signature == signature:
                    self.hits += 1
                    logger.debug(f"Cache hit for fingerprint {fingerprint:016x}")
                    return entry.form
            self.misses += 1
            return None

    def store(self, fingerprint: Fingerprint, form: CanonicalForm, signature: Certificate) -> CacheEntry:
        """
        Store a canonical form under fingerprint.

        An existing entry with the same signature is replaced, so storing
        the same structure twice keeps one entry.

        Returns:
            The stored entry
        """
        entry = CacheEntry(signature=signature, form=form)
        with self._lock:
            bucket = self._buckets.setdefault(fingerprint, [])
            for i, existing in enumerate(bucket):
                if existing.signature == signature:
                    bucket[i] = entry
                    return entry
            bucket.append(entry)
            if len(bucket) > 1:
                logger.debug(f"Fingerprint {fingerprint:016x} now holds {len(bucket)} entries")
        return entry

    def bucket(self, fingerprint: Fingerprint) -> Tuple[CacheEntry, ...]:
        """All entries stored under fingerprint."""
        with self._lock:
            return tuple(self._buckets.get(fingerprint, ()))

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        """Number of entries (not fingerprints)."""
        with self._lock:
            return sum(len(bucket) for bucket in self._buckets.values())

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._buckets
