"""
Graphs over a numpy adjacency matrix.

Supports:
- undirected and directed graphs
- plain (0/1) and weighted adjacency (any non-negative integer weights,
  multi-edges as weights)
- vertex colors (any mutually ordered values)
- self loops (diagonal entries)

Implements the Canonizable contract:
- neighbor_count: number of neighbors in a cell for plain graphs, sorted
  multiset of weights for weighted ones; (out, in) pairs when directed
- edge: adjacency entry as a Python int
"""

from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from canon_core.types import Color, Element
from canon_search.certificate import is_permutation


class Graph:
    """Vertex-colored, optionally directed, optionally weighted graph."""

    def __init__(
        self,
        adjacency: Any,
        colors: Optional[Sequence[Color]] = None,
        directed: bool = False,
    ):
        """
        Args:
            adjacency: n×n array-like of non-negative integers
            colors: One color per vertex (default: all 0)
            directed: If False, adjacency must be symmetric

        Raises:
            ValueError: If adjacency is not square, has negative entries,
                is asymmetric for an undirected graph, or colors has the
                wrong length
        """
        matrix = np.array(adjacency, dtype=np.int64)
        if matrix.size == 0:
            matrix = matrix.reshape(0, 0)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"Adjacency must be square, got shape {matrix.shape}")
        if (matrix < 0).any():
            raise ValueError("Adjacency entries must be non-negative")
        if not directed and not np.array_equal(matrix, matrix.T):
            raise ValueError("Undirected graph requires a symmetric adjacency matrix")

        n = matrix.shape[0]
        if colors is None:
            colors = [0] * n
        if len(colors) != n:
            raise ValueError(f"Expected {n} colors, got {len(colors)}")

        matrix.setflags(write=False)
        self._adjacency = matrix
        self._colors: Tuple[Color, ...] = tuple(colors)
        self.directed = bool(directed)
        self._weighted = bool((matrix > 1).any())

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_edges(
        cls,
        n: int,
        edges: Iterable[Sequence[int]],
        colors: Optional[Sequence[Color]] = None,
        directed: bool = False,
    ) -> "Graph":
        """
        Build a graph from (u, v) or (u, v, weight) tuples.

        Repeated edges accumulate their weights (multi-edges).

        Examples:
            >>> Graph.from_edges(3, [(0, 1), (1, 2)]).edges()
            [(0, 1, 1), (1, 2, 1)]
        """
        matrix = np.zeros((n, n), dtype=np.int64)
        for edge in edges:
            u, v = int(edge[0]), int(edge[1])
            weight = int(edge[2]) if len(edge) > 2 else 1
            if not (0 <= u < n and 0 <= v < n):
                raise ValueError(f"Edge ({u}, {v}) out of range for {n} vertices")
            matrix[u, v] += weight
            if not directed and u != v:
                matrix[v, u] += weight
        return cls(matrix, colors=colors, directed=directed)

    @classmethod
    def complete(cls, n: int) -> "Graph":
        """Complete graph K_n."""
        return cls(np.ones((n, n), dtype=np.int64) - np.eye(n, dtype=np.int64))

    @classmethod
    def cycle(cls, n: int) -> "Graph":
        """Cycle C_n (n >= 3)."""
        return cls.from_edges(n, [(i, (i + 1) % n) for i in range(n)])

    @classmethod
    def path(cls, n: int) -> "Graph":
        """Path P_n on n vertices."""
        return cls.from_edges(n, [(i, i + 1) for i in range(n - 1)])

    @classmethod
    def empty(cls, n: int) -> "Graph":
        """Graph with n vertices and no edges."""
        return cls(np.zeros((n, n), dtype=np.int64))

    # -------------------------------------------------------------------------
    # Canonizable contract
    # -------------------------------------------------------------------------

    def element_count(self) -> int:
        return self._adjacency.shape[0]

    def initial_colors(self) -> Tuple[Color, ...]:
        return self._colors

    def neighbor_count(self, element: Element, cell: Sequence[Element]) -> Any:
        index = list(cell)
        out_row = self._adjacency[element, index]
        if self._weighted:
            outgoing = tuple(sorted(int(w) for w in out_row if w))
        else:
            outgoing = int(out_row.sum())
        if not self.directed:
            return outgoing

        in_col = self._adjacency[index, element]
        if self._weighted:
            incoming = tuple(sorted(int(w) for w in in_col if w))
        else:
            incoming = int(in_col.sum())
        return (outgoing, incoming)

    def edge(self, u: Element, v: Element) -> int:
        return int(self._adjacency[u, v])

    # -------------------------------------------------------------------------
    # Graph operations
    # -------------------------------------------------------------------------

    @property
    def adjacency(self) -> np.ndarray:
        """Read-only adjacency matrix."""
        return self._adjacency

    @property
    def colors(self) -> Tuple[Color, ...]:
        return self._colors

    def edges(self) -> List[Tuple[int, int, int]]:
        """(u, v, weight) for every edge; u <= v when undirected."""
        result = []
        n = self.element_count()
        for u in range(n):
            for v in range(0 if self.directed else u, n):
                weight = int(self._adjacency[u, v])
                if weight:
                    result.append((u, v, weight))
        return result

    def relabel(self, permutation: Sequence[int]) -> "Graph":
        """
        Graph in which vertex v is renamed permutation[v].

        Args:
            permutation: permutation[v] = new index of v

        Raises:
            ValueError: If permutation is not a permutation of range(n)
        """
        n = self.element_count()
        if len(permutation) != n or not is_permutation(permutation):
            raise ValueError(f"Not a permutation of range({n}): {list(permutation)}")

        inverse = np.argsort(np.asarray(permutation, dtype=np.int64))
        matrix = self._adjacency[np.ix_(inverse, inverse)]
        colors = [self._colors[v] for v in inverse]
        return Graph(matrix, colors=colors, directed=self.directed)

    def canonical_form(self, config=None):
        """CanonicalForm of this graph (see canon_search.canonicalize)."""
        from canon_search.explorer import canonicalize

        return canonicalize(self, config)

    def canonical_graph(self, config=None) -> "Graph":
        """This graph relabeled by its canonical labeling."""
        return self.relabel(self.canonical_form(config).permutation)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return (
            self.directed == other.directed
            and self._colors == other._colors
            and np.array_equal(self._adjacency, other._adjacency)
        )

    def __repr__(self) -> str:
        kind = "directed" if self.directed else "undirected"
        return f"Graph(n={self.element_count()}, {kind}, edges={self.edges()})"
