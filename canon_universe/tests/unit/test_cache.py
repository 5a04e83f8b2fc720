"""
Unit tests for canon_cache (NormalizationCache, normalize, is_isomorphic).

Acceptance criteria:
- A cached result equals what canonicalize would return
- Colliding fingerprints never share a result
- Lookups need the labeled signature, not just the fingerprint
- Storing the same structure twice keeps one entry
- Concurrent normalizations agree with sequential ones
"""

from concurrent.futures import ThreadPoolExecutor

from canon_cache.cache import NormalizationCache
from canon_cache.fingerprint import fingerprint
from canon_cache.normalize import is_isomorphic, labeled_signature, normalize
from canon_search.explorer import canonicalize
from canon_structures.graph import Graph


# =============================================================================
# Test Helpers
# =============================================================================


def two_triangles():
    return Graph.from_edges(6, [(0, 1), (1, 2), (2, 0), (3, 4), (4, 5), (5, 3)])


# =============================================================================
# Cache
# =============================================================================


class TestNormalizationCache:
    """Test the raw cache API."""

    def test_lookup_missing(self):
        cache = NormalizationCache()
        assert cache.lookup(123, labeled_signature(Graph.path(3))) is None
        assert cache.misses == 1

    def test_store_and_lookup(self):
        cache = NormalizationCache()
        graph = Graph.cycle(4)
        form = canonicalize(graph)
        fp = fingerprint(graph)

        cache.store(fp, form, labeled_signature(graph))

        assert fp in cache
        assert cache.lookup(fp, labeled_signature(graph)) is form
        assert cache.hits == 1

    def test_colliding_structure_gets_its_own_form(self):
        """A fingerprint shared with C6 never serves C6's form to two triangles."""
        cache = NormalizationCache()
        cycle, triangles = Graph.cycle(6), two_triangles()
        fp = fingerprint(triangles)
        assert fp == fingerprint(cycle)
        normalize(cycle, cache)

        cache.store(fp, canonicalize(triangles), labeled_signature(triangles))

        found = cache.lookup(fp, labeled_signature(triangles))
        assert found.certificate == canonicalize(triangles).certificate
        assert found.certificate != canonicalize(cycle).certificate
        assert cache.lookup(fp, labeled_signature(Graph.path(6))) is None

    def test_signature_mismatch(self):
        cache = NormalizationCache()
        graph = Graph.cycle(4)
        fp = fingerprint(graph)
        cache.store(fp, canonicalize(graph), labeled_signature(graph))

        rotated = graph.relabel((0, 2, 1, 3))
        assert cache.lookup(fp, labeled_signature(rotated)) is None

    def test_store_replaces_same_signature(self):
        cache = NormalizationCache()
        graph = Graph.path(3)
        fp = fingerprint(graph)
        signature = labeled_signature(graph)

        cache.store(fp, canonicalize(graph), signature)
        cache.store(fp, canonicalize(graph), signature)
        assert len(cache) == 1

    def test_clear(self):
        cache = NormalizationCache()
        graph = Graph.path(3)
        normalize(graph, cache)
        fp = fingerprint(graph)

        cache.clear()
        assert len(cache) == 0
        assert fp not in cache
        assert cache.hits == cache.misses == 0


# =============================================================================
# Normalize
# =============================================================================


class TestNormalize:
    """Test cached normalization."""

    def test_without_cache(self):
        graph = Graph.cycle(5)
        assert normalize(graph) == canonicalize(graph)

    def test_second_call_hits(self):
        cache = NormalizationCache()
        graph = Graph.cycle(5)

        first = normalize(graph, cache)
        second = normalize(graph, cache)

        assert second is first
        assert cache.hits == 1
        assert cache.misses == 1

    def test_cached_equals_fresh(self):
        cache = NormalizationCache()
        graph = Graph.from_edges(5, [(0, 1), (1, 2), (2, 3), (1, 4)])
        normalize(graph, cache)

        cached = normalize(graph, cache)
        fresh = canonicalize(graph)
        assert cached.certificate == fresh.certificate
        assert cached.permutation == fresh.permutation

    def test_collision_keeps_results_apart(self):
        """C6 and two triangles share a fingerprint but not a certificate."""
        cache = NormalizationCache()
        cycle, triangles = Graph.cycle(6), two_triangles()
        fp = fingerprint(cycle)
        assert fp == fingerprint(triangles)

        cycle_form = normalize(cycle, cache)
        triangles_form = normalize(triangles, cache)

        assert cycle_form.certificate != triangles_form.certificate
        assert len(cache.bucket(fp)) == 2
        assert normalize(cycle, cache).certificate == canonicalize(cycle).certificate
        assert normalize(triangles, cache).certificate == canonicalize(triangles).certificate

    def test_isomorphic_copy_gets_own_entry(self):
        """A relabeled copy needs its own labeling, but shares the certificate."""
        cache = NormalizationCache()
        graph = Graph.cycle(6)
        copy = graph.relabel((1, 0, 2, 3, 4, 5))

        a = normalize(graph, cache)
        b = normalize(copy, cache)

        assert a.certificate == b.certificate
        assert len(cache) == 2
        assert cache.misses == 2
        assert cache.hits == 0
        assert canonicalize(copy).permutation == b.permutation

    def test_concurrent_normalize(self):
        cache = NormalizationCache()
        graphs = [Graph.cycle(6), two_triangles(), Graph.path(6), Graph.complete(6)] * 5

        with ThreadPoolExecutor(max_workers=4) as pool:
            forms = list(pool.map(lambda g: normalize(g, cache), graphs))

        for graph, form in zip(graphs, forms):
            assert form.certificate == canonicalize(graph).certificate
        assert len(cache) == 4


class TestIsIsomorphic:
    """Test the isomorphism decision."""

    def test_isomorphic(self):
        graph = Graph.cycle(4)
        assert is_isomorphic(graph, graph.relabel((1, 2, 3, 0)))

    def test_collision_not_isomorphic(self):
        assert not is_isomorphic(Graph.cycle(6), two_triangles())

    def test_different_sizes(self):
        assert not is_isomorphic(Graph.path(3), Graph.path(4))

    def test_different_fingerprints(self):
        cache = NormalizationCache()
        assert not is_isomorphic(Graph.empty(3), Graph.path(3), cache)
        assert len(cache) == 0

    def test_with_cache(self):
        cache = NormalizationCache()
        a = Graph.path(4)
        b = a.relabel((3, 1, 0, 2))
        assert is_isomorphic(a, b, cache)
        assert len(cache) == 2
