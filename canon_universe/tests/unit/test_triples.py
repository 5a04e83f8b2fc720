"""
Unit tests for canon_structures/triples.py (triple graphs with variables).

Acceptance criteria:
- Renaming variables never changes the canonized graph
- Two random triple graphs usually canonize differently
- canonize() is idempotent
"""

import numpy as np
import pytest

from canon_cache.normalize import is_isomorphic
from canon_structures.generators import random_morphism, random_triple_graph
from canon_structures.triples import TripleGraph, Var


# =============================================================================
# Test Helpers
# =============================================================================


def check_random_morphisms(variable_count, max_len, seed, graphs=10, morphisms=4):
    rng = np.random.default_rng(seed)
    for _ in range(graphs):
        graph = random_triple_graph(variable_count, max_len, rng)
        canonized = graph.canonize()
        for _ in range(morphisms):
            other = random_morphism(graph, rng)
            assert other.canonize() == canonized, f"Renaming changed the canonical form of {graph}"


def check_random_negative(variable_count, max_len, seed, attempts=20):
    rng = np.random.default_rng(seed)
    for _ in range(attempts):
        a = random_triple_graph(variable_count, max_len, rng)
        b = random_triple_graph(variable_count, max_len, rng)
        if a.canonize() != b.canonize():
            return
    pytest.fail("Every pair of random triple graphs canonized identically")


# =============================================================================
# Encoding
# =============================================================================


class TestTripleGraph:
    """Test construction and the incidence encoding."""

    def test_duplicates_merged(self):
        graph = TripleGraph([(Var(0), "p", Var(1)), (Var(0), "p", Var(1))])
        assert len(graph.triples) == 1
        assert graph.variable_count == 2
        assert graph.element_count() == 3

    def test_variables_color_before_triples(self):
        graph = TripleGraph([(Var(0), "p", "o")])
        colors = graph.initial_colors()
        assert colors[0] < colors[1]

    def test_repeated_variable_pattern(self):
        """(x p x) and (x p y) are told apart by the triple colors."""
        same = TripleGraph([(Var(0), "p", Var(0))], variable_count=2)
        different = TripleGraph([(Var(0), "p", Var(1))], variable_count=2)
        assert same.initial_colors()[2] != different.initial_colors()[2]

    def test_edge_positions(self):
        graph = TripleGraph([(Var(1), "p", Var(1)), (Var(0), Var(1), "o")])
        # Triples sort with variables first: (?0 ?1 o) before (?1 p ?1)
        assert graph.edge(0, 2) == (0,)
        assert graph.edge(1, 2) == (1,)
        assert graph.edge(3, 1) == (0, 2)
        assert graph.edge(0, 3) == ()
        assert graph.edge(0, 1) == ()

    def test_unused_variables(self):
        graph = TripleGraph([(Var(0), "p", "o")], variable_count=3)
        assert graph.element_count() == 4

    def test_rejects_short_triple(self):
        with pytest.raises(ValueError, match="3 terms"):
            TripleGraph([(Var(0), "p")])

    def test_rejects_variable_out_of_range(self):
        with pytest.raises(ValueError, match="out of range"):
            TripleGraph([(Var(3), "p", "o")], variable_count=2)

    def test_relabel(self):
        graph = TripleGraph([(Var(0), "p", Var(1))])
        assert graph.relabel((1, 0)).as_set() == {(Var(1), "p", Var(0))}

    def test_relabel_rejects_non_permutation(self):
        with pytest.raises(ValueError):
            TripleGraph([(Var(0), "p", Var(1))]).relabel((0, 0))


# =============================================================================
# Canonization
# =============================================================================


class TestCanonize:
    """Test canonical renaming of variables."""

    def test_simple_no_automorphism(self):
        a = TripleGraph([(Var(0), Var(1), Var(2))], variable_count=3)
        b = TripleGraph([(Var(2), Var(1), Var(0))], variable_count=3)
        assert a.canonize() == b.canonize()

    def test_simple_automorphism(self):
        a = TripleGraph(
            [(Var(0), Var(1), Var(2)), (Var(1), Var(0), Var(2))],
            variable_count=3,
        )
        b = TripleGraph(
            [(Var(2), Var(1), Var(0)), (Var(1), Var(2), Var(0))],
            variable_count=3,
        )
        assert a.canonize() == b.canonize()

    def test_position_matters(self):
        a = TripleGraph([(Var(0), "p", Var(1)), (Var(1), "q", "o")])
        b = TripleGraph([(Var(0), "p", Var(1)), (Var(0), "q", "o")])
        assert a.canonize() != b.canonize()
        assert not is_isomorphic(a, b)

    def test_idempotent(self):
        rng = np.random.default_rng(1)
        for _ in range(10):
            canonized = random_triple_graph(4, 8, rng).canonize()
            assert canonized.canonize() == canonized

    def test_ground_graph(self):
        graph = TripleGraph([(True, False, True), (False, False, False)])
        assert graph.variable_count == 0
        assert graph.canonize() == graph

    def test_random_3_10(self):
        check_random_morphisms(3, 10, seed=310)

    def test_random_5_10(self):
        check_random_morphisms(5, 10, seed=510)

    def test_random_5_30(self):
        check_random_morphisms(5, 30, seed=530, graphs=5, morphisms=3)

    def test_random_10_30(self):
        check_random_morphisms(10, 30, seed=1030, graphs=5, morphisms=3)

    def test_random_3_10_negative(self):
        check_random_negative(3, 10, seed=3100)

    def test_random_5_30_negative(self):
        check_random_negative(5, 30, seed=5300)
