"""
Cached normalization entry points.

Provides:
- labeled_signature: certificate of a structure under its own labeling
- normalize: canonical form, served from a cache when possible
- is_isomorphic: isomorphism test by certificate comparison

Flow of normalize(structure, cache):
    fingerprint → bucket → signature match? → cached form
                                   ↓ no
                   canonicalize → store(fingerprint, form, signature)

The signature is the labeled structure itself, so a relabeled isomorphic
copy misses, runs a full search and gets its own entry. Only repeated
inputs with the same labeling hit.
"""

import logging
from typing import Optional

from canon_core.contract import Canonizable, identity_order
from canon_core.types import Fingerprint
from canon_search.certificate import Certificate, build_certificate
from canon_search.explorer import CanonicalForm, SearchConfig, canonicalize

from .cache import NormalizationCache
from .fingerprint import fingerprint as compute_fingerprint

logger = logging.getLogger(__name__)


def labeled_signature(structure: Canonizable) -> Certificate:
    """
    Exact signature: the certificate of structure under the identity order.

    Two structures share a signature iff they are equal as labeled
    structures, so a signature match proves the cached labeling applies.
    """
    return build_certificate(structure, identity_order(structure.element_count()))


def normalize(
    structure: Canonizable,
    cache: Optional[NormalizationCache] = None,
    config: Optional[SearchConfig] = None,
    fingerprint: Optional[Fingerprint] = None,
) -> CanonicalForm:
    """
    Canonical form of structure, reusing cached results when possible.

    Args:
        structure: Any Canonizable
        cache: Cache to consult and fill (None = plain canonicalize)
        config: Search configuration for cache misses
        fingerprint: Precomputed fingerprint of structure

    Returns:
        CanonicalForm (certificate equal to canonicalize(structure))
    """
    if cache is None:
        return canonicalize(structure, config)

    if fingerprint is None:
        fingerprint = compute_fingerprint(structure)
    signature = labeled_signature(structure)

    cached = cache.lookup(fingerprint, signature)
    if cached is not None:
        return cached

    form = canonicalize(structure, config)
    cache.store(fingerprint, form, signature)
    logger.debug(
        f"Stored canonical form for fingerprint {fingerprint:016x} "
        f"({len(cache.bucket(fingerprint))} in bucket)"
    )
    return form


def is_isomorphic(
    a: Canonizable,
    b: Canonizable,
    cache: Optional[NormalizationCache] = None,
    config: Optional[SearchConfig] = None,
) -> bool:
    """
    Decide whether a and b are isomorphic.

    Distinct fingerprints reject immediately; otherwise the canonical
    certificates are compared.
    """
    if a.element_count() != b.element_count():
        return False

    fp_a = compute_fingerprint(a)
    fp_b = compute_fingerprint(b)
    if fp_a != fp_b:
        return False

    form_a = normalize(a, cache, config, fp_a)
    form_b = normalize(b, cache, config, fp_b)
    return form_a.certificate == form_b.certificate
