"""
Random structures for tests and the integration harness.

All generators take a numpy Generator so runs are reproducible from a
seed (np.random.default_rng(seed)).
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .graph import Graph
from .triples import TripleGraph, Var


def random_permutation(n: int, rng: np.random.Generator) -> Tuple[int, ...]:
    """Uniformly random permutation of range(n)."""
    return tuple(int(x) for x in rng.permutation(n))


def random_graph(
    n: int,
    density: float,
    rng: np.random.Generator,
    colors: int = 1,
    directed: bool = False,
    max_weight: int = 1,
) -> Graph:
    """
    Erdős–Rényi style random graph.

    Args:
        n: Number of vertices
        density: Probability of each edge
        rng: numpy random Generator
        colors: Number of distinct vertex colors drawn uniformly
        directed: Draw each ordered pair independently
        max_weight: Edge weights drawn uniformly from 1..max_weight
    """
    present = rng.random((n, n)) < density
    weights = rng.integers(1, max_weight + 1, size=(n, n))
    matrix = np.where(present, weights, 0)
    np.fill_diagonal(matrix, 0)
    if not directed:
        upper = np.triu(matrix, k=1)
        matrix = upper + upper.T

    vertex_colors = [int(c) for c in rng.integers(0, colors, size=n)]
    return Graph(matrix, colors=vertex_colors, directed=directed)


def random_regular_like(n: int, degree: int, rng: np.random.Generator) -> Graph:
    """
    Circulant graph on n vertices with `degree` random offsets (regular),
    relabeled randomly.

    Regular graphs of equal order and degree share their fingerprint, which
    makes them useful to exercise fingerprint collisions.
    """
    offsets = sorted(set(int(d) for d in rng.choice(np.arange(1, n // 2 + 1), size=degree, replace=False)))
    edges = [(i, (i + d) % n) for i in range(n) for d in offsets]
    graph = Graph.from_edges(n, set(tuple(sorted(e)) for e in edges))
    return graph.relabel(random_permutation(n, rng))


def random_triple_graph(
    variable_count: int,
    max_len: int,
    rng: np.random.Generator,
    values: Optional[Sequence] = None,
) -> TripleGraph:
    """
    Random triple graph: each term is a random variable or a random value
    with equal probability.

    Args:
        variable_count: Number of variables
        max_len: Number of triples drawn (duplicates collapse)
        rng: numpy random Generator
        values: Value pool (default: False, True)
    """
    if values is None:
        values = [False, True]

    def random_term():
        if rng.random() < 0.5:
            return Var(int(rng.integers(0, variable_count)))
        return values[int(rng.integers(0, len(values)))]

    triples: List[Tuple] = [
        (random_term(), random_term(), random_term()) for _ in range(max_len)
    ]
    return TripleGraph(triples, variable_count=variable_count)


def random_morphism(graph: TripleGraph, rng: np.random.Generator) -> TripleGraph:
    """Triple graph with its variables renamed by a random permutation."""
    return graph.relabel(random_permutation(graph.variable_count, rng))
