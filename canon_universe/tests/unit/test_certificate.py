"""
Unit tests for canon_search/certificate.py.

Acceptance criteria:
- Undirected certificates list pairs i <= j, directed ones every pair
- Certificates compare lexicographically
- certificate_of(labeling) agrees with build_certificate(order)
- Permutation helpers agree with each other
"""

from canon_search.certificate import (
    Certificate,
    build_certificate,
    certificate_of,
    compare_certificates,
    empty_certificate,
    is_permutation,
    labeling_from_order,
    leaf_automorphism,
    order_from_labeling,
)
from canon_structures.graph import Graph


class TestBuildCertificate:
    """Test certificate layout."""

    def test_undirected_upper_triangle(self):
        graph = Graph.path(3)
        cert = build_certificate(graph, (0, 1, 2))

        assert cert.size == 3
        assert not cert.directed
        assert cert.colors == (0, 0, 0)
        # (0,0) (0,1) (0,2) (1,1) (1,2) (2,2)
        assert cert.edges == (0, 1, 0, 0, 1, 0)

    def test_directed_all_pairs(self):
        arc = Graph.from_edges(2, [(0, 1)], directed=True)
        forward = build_certificate(arc, (0, 1))
        backward = build_certificate(arc, (1, 0))

        assert forward.edges == (0, 1, 0, 0)
        assert backward.edges == (0, 0, 1, 0)
        assert backward < forward

    def test_colors_follow_order(self):
        graph = Graph.from_edges(3, [], colors=["c", "a", "b"])
        assert build_certificate(graph, (1, 2, 0)).colors == ("a", "b", "c")

    def test_empty(self):
        cert = empty_certificate()
        assert cert == Certificate(size=0, directed=False, colors=(), edges=())
        assert len(cert) == 0
        assert build_certificate(Graph.empty(0), ()) == cert

    def test_certificate_of_matches_order(self):
        graph = Graph.from_edges(4, [(0, 1), (1, 2), (2, 3), (3, 1)])
        labeling = (2, 0, 3, 1)
        assert certificate_of(graph, labeling) == build_certificate(graph, order_from_labeling(labeling))


class TestCompare:
    """Test three-way comparison."""

    def test_compare(self):
        graph = Graph.path(3)
        low = build_certificate(graph, (0, 2, 1))
        high = build_certificate(graph, (0, 1, 2))

        assert low < high
        assert compare_certificates(low, high) == -1
        assert compare_certificates(high, low) == 1
        assert compare_certificates(low, build_certificate(graph, (2, 0, 1))) == 0

    def test_size_compared_first(self):
        small = build_certificate(Graph.complete(2), (0, 1))
        large = build_certificate(Graph.empty(3), (0, 1, 2))
        assert small < large


class TestPermutations:
    """Test permutation helpers."""

    def test_order_and_labeling_are_inverse(self):
        order = (2, 0, 1)
        labeling = labeling_from_order(order)
        assert labeling == (1, 2, 0)
        assert order_from_labeling(labeling) == order

    def test_is_permutation(self):
        assert is_permutation((2, 0, 1))
        assert is_permutation(())
        assert not is_permutation((0, 0, 1))
        assert not is_permutation((1, 2))

    def test_leaf_automorphism(self):
        """Maps the element at each position of one order to the other's."""
        assert leaf_automorphism((0, 1, 2), (1, 2, 0)) == (1, 2, 0)
        assert leaf_automorphism((2, 0, 1), (2, 0, 1)) == (0, 1, 2)

    def test_leaf_automorphism_of_equal_certificates(self):
        """C4 leaves with equal certificates are related by a symmetry."""
        graph = Graph.cycle(4)
        a, b = (0, 2, 1, 3), (1, 3, 0, 2)
        assert build_certificate(graph, a) == build_certificate(graph, b)

        g = leaf_automorphism(a, b)
        for u in range(4):
            for v in range(4):
                assert graph.edge(u, v) == graph.edge(g[u], g[v])
