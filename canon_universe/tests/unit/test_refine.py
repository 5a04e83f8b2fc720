"""
Unit tests for canon_core/refine.py (equitable refinement).

Acceptance criteria:
- Result is equitable
- Monotone: result is finer than or equal to the input, never coarser
- Discrete partitions are fixed points
- Fragments ordered by neighbor count ascending
- Unorderable neighbor counts raise ContractViolation
"""

import numpy as np
import pytest

from canon_core.errors import ContractViolation
from canon_core.partition import Partition
from canon_core.refine import (
    individualize,
    is_equitable,
    refine,
    refine_with_receipt,
    root_partition,
)
from canon_structures.generators import random_graph
from canon_structures.graph import Graph


# =============================================================================
# Test Helpers
# =============================================================================


class MixedCounts:
    """Structure whose neighbor counts mix ints and strings."""

    directed = False

    def element_count(self):
        return 3

    def initial_colors(self):
        return [0, 0, 0]

    def neighbor_count(self, element, cell):
        return 1 if element == 0 else "many"

    def edge(self, u, v):
        return 0


# =============================================================================
# Refinement
# =============================================================================


class TestRefine:
    """Test refine on small graphs with known results."""

    def test_path_splits_by_degree(self):
        """P3: endpoints (degree 1) before the middle vertex (degree 2)."""
        graph = Graph.path(3)
        refined = refine(graph, Partition.unit(3))
        assert refined.cells() == [(0, 2), (1,)]

    def test_regular_graph_stays_unit(self):
        """Every vertex of C6 has two neighbors: nothing to split."""
        graph = Graph.cycle(6)
        refined = refine(graph, Partition.unit(6))
        assert refined.is_unit()

    def test_input_not_modified(self):
        graph = Graph.path(3)
        partition = Partition.unit(3)
        refine(graph, partition)
        assert partition.is_unit()

    def test_discrete_is_fixed_point(self):
        graph = Graph.path(3)
        discrete = Partition([2, 0, 1], [1, 1, 1])
        refined = refine(graph, discrete)
        assert refined.order() == (2, 0, 1)

    def test_monotone(self):
        """Refinement only splits cells."""
        rng = np.random.default_rng(7)
        for _ in range(10):
            graph = random_graph(8, 0.35, rng, colors=2)
            start = Partition.from_colors(graph.initial_colors())
            refined = refine(graph, start)
            assert refined.is_finer_or_equal_to(start), "Refinement must be monotone"
            assert len(refined) >= len(start)

    def test_result_is_equitable(self):
        rng = np.random.default_rng(11)
        for _ in range(10):
            graph = random_graph(9, 0.4, rng)
            refined = refine(graph, Partition.unit(9))
            assert is_equitable(graph, refined)

    def test_directed_graph_result_is_equitable(self):
        rng = np.random.default_rng(13)
        for _ in range(5):
            graph = random_graph(7, 0.3, rng, directed=True)
            refined = refine(graph, Partition.unit(7))
            assert is_equitable(graph, refined)

    def test_receipt_counts(self):
        graph = Graph.path(3)
        refined, receipt = refine_with_receipt(graph, Partition.unit(3))
        assert receipt.splits == 1
        assert receipt.cells_before == 1
        assert receipt.cells_after == 2
        assert receipt.splitters >= 1

    def test_unorderable_counts_raise(self):
        with pytest.raises(ContractViolation, match="cannot be ordered"):
            refine(MixedCounts(), Partition.unit(3))


class TestIndividualize:
    """Test individualize + refine."""

    def test_cycle_after_individualizing_vertex(self):
        """C4: individualizing 0 separates the opposite vertex from the neighbors."""
        graph = Graph.cycle(4)
        child = individualize(graph, Partition.unit(4), 0)
        assert child.cells() == [(0,), (2,), (1, 3)]

    def test_child_is_finer_than_parent(self):
        graph = Graph.cycle(5)
        parent = root_partition(graph)
        child = individualize(graph, parent, 3)
        assert child.is_finer_or_equal_to(parent)
        assert child.cell_at(child.cell_of(3)) == (3,)
        assert is_equitable(graph, child)


class TestRootPartition:
    """Test equitable refinement of the initial coloring."""

    def test_colors_respected(self):
        graph = Graph.from_edges(3, [], colors=["x", "y", "x"])
        assert root_partition(graph).cells() == [(0, 2), (1,)]

    def test_label_independent(self):
        """Isomorphic graphs get cells of the same sizes in the same positions."""
        graph = Graph.from_edges(5, [(0, 1), (1, 2), (2, 3), (1, 4)])
        other = graph.relabel((4, 2, 0, 1, 3))

        sizes = [len(c) for c in root_partition(graph).cells()]
        other_sizes = [len(c) for c in root_partition(other).cells()]
        assert sizes == other_sizes
