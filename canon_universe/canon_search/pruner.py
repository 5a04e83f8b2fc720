"""
Automorphism pruning for the search tree.

Two leaves with equal certificates differ by an automorphism. Discovered
automorphisms are kept as generators; before exploring a child w of a node
with path p, the explorer skips w when w shares an orbit with an already
explored sibling under the generators that fix p pointwise. The subtree
of w is then the image of an explored subtree and holds no better leaf.

Provides:
- AutomorphismStore: lock-protected, append-only generator set
- is_automorphism: direct check of a permutation against the structure
- symmetric_cell: cheap detection of a cell whose permutations are all
  automorphisms (only its first child needs exploring)

Acceptance:
    - Sound: pruning never removes the first minimal leaf of the unpruned
      depth-first order
    - With no generators, the search is exhaustive
"""

import threading
from typing import List, Optional, Sequence, Tuple

from canon_core.contract import Canonizable
from canon_core.partition import Partition
from canon_core.types import Automorphism, Element

from .certificate import is_permutation, leaf_automorphism


class AutomorphismStore:
    """Append-only set of automorphism generators, safe across threads."""

    def __init__(self, n: int):
        self._n = n
        self._generators: List[Automorphism] = []
        self._seen = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._generators)

    def generators(self) -> Tuple[Automorphism, ...]:
        with self._lock:
            return tuple(self._generators)

    def add(self, automorphism: Sequence[int]) -> bool:
        """
        Record a generator.

        Returns:
            True if it was new (identity and duplicates are ignored)
        """
        g = tuple(automorphism)
        assert len(g) == self._n, f"Automorphism of size {len(g)} for {self._n} elements"
        if all(g[x] == x for x in range(self._n)):
            return False

        with self._lock:
            if g in self._seen:
                return False
            self._seen.add(g)
            self._generators.append(g)
            return True

    def add_from_leaves(self, order_a: Sequence[int], order_b: Sequence[int]) -> bool:
        """Record the automorphism relating two leaves with equal certificates."""
        return self.add(leaf_automorphism(order_a, order_b))

    def orbits(self, fixing: Sequence[Element] = ()) -> List[int]:
        """
        Orbit representatives under the generators fixing `fixing` pointwise.

        Args:
            fixing: Elements every used generator must map to themselves

        Returns:
            List r with r[x] = smallest element of the orbit of x
        """
        parent = list(range(self._n))

        def find(x: int) -> int:
            while parent[x] != x:
                parent[x] = parent[parent[x]]
                x = parent[x]
            return x

        for g in self.generators():
            if any(g[x] != x for x in fixing):
                continue
            for x in range(self._n):
                rx, ry = find(x), find(g[x])
                if rx != ry:
                    # Smallest element becomes the root
                    if rx < ry:
                        parent[ry] = rx
                    else:
                        parent[rx] = ry

        return [find(x) for x in range(self._n)]


class OrbitTracker:
    """
    Per-node view of orbit pruning.

    Caches the orbit representatives for the node's path and recomputes
    them only when new generators have been recorded.
    """

    def __init__(self, store: AutomorphismStore, path: Sequence[Element]):
        self._store = store
        self._path = tuple(path)
        self._known = -1
        self._representatives: Optional[List[int]] = None
        self._explored: List[Element] = []

    def mark_explored(self, element: Element) -> None:
        self._explored.append(element)

    def is_redundant(self, element: Element) -> bool:
        """True when element shares an orbit with an explored sibling."""
        if not self._explored:
            return False

        count = len(self._store)
        if count == 0:
            return False
        if count != self._known:
            self._representatives = self._store.orbits(self._path)
            self._known = count

        reps = self._representatives
        return any(reps[element] == reps[e] for e in self._explored)


def is_automorphism(structure: Canonizable, permutation: Sequence[int]) -> bool:
    """
    Check that permutation preserves colors and every edge description.

    O(n^2) edge queries; used for verification, not inside the search.
    """
    n = structure.element_count()
    if len(permutation) != n or not is_permutation(permutation):
        return False

    colors = structure.initial_colors()
    if any(colors[x] != colors[permutation[x]] for x in range(n)):
        return False

    for u in range(n):
        for v in range(n):
            if structure.edge(u, v) != structure.edge(permutation[u], permutation[v]):
                return False
    return True


def symmetric_cell(structure: Canonizable, partition: Partition, cell: Sequence[Element]) -> bool:
    """
    Detect a cell all of whose permutations are automorphisms.

    Holds when the elements of the cell (which already share a color):
    - have the same self description edge(x, x)
    - have the same description between any two distinct members, in
      both directions
    - for every element z outside the cell, have the same description to z
      and from z

    Any permutation of such a cell fixing all other elements preserves the
    certificate, so all children of a node targeting it are equivalent.

    Args:
        structure: Canonizable structure
        partition: Node partition (cell must be one of its cells)
        cell: Target cell

    Returns:
        True if the cell is fully symmetric
    """
    if len(cell) < 2:
        return True

    first = cell[0]
    self_desc = structure.edge(first, first)
    if any(structure.edge(x, x) != self_desc for x in cell[1:]):
        return False

    mutual = structure.edge(cell[0], cell[1])
    for x in cell:
        for y in cell:
            if x != y and structure.edge(x, y) != mutual:
                return False

    members = set(cell)
    for z in partition.order():
        if z in members:
            continue
        to_z = structure.edge(first, z)
        from_z = structure.edge(z, first)
        for x in cell[1:]:
            if structure.edge(x, z) != to_z or structure.edge(z, x) != from_z:
                return False

    return True
