"""
Certificates: canonical encodings of a structure under one labeling.

A certificate lists, in canonical order, the color of every element and
the local edge description of every pair of positions:
- directed structures: all ordered pairs (i, j), row-major
- undirected structures: pairs i <= j, row-major

Certificates are compared lexicographically (size first, then colors, then
edges). The canonical certificate is the smallest one among the leaves of
the search tree in explorer.py; that is not always the smallest over every
permutation of the elements.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from canon_core.contract import Canonizable
from canon_core.types import Automorphism, Color, EdgeDescription, Labeling, Order


@dataclass(frozen=True, order=True)
class Certificate:
    """
    Canonical encoding of a structure under one discrete labeling.

    Opaque to callers beyond equality, ordering and hashing.
    """

    size: int
    directed: bool
    colors: Tuple[Color, ...]
    edges: Tuple[EdgeDescription, ...]

    def __len__(self) -> int:
        return self.size


def empty_certificate(directed: bool = False) -> Certificate:
    """Certificate of a structure with zero elements."""
    return Certificate(size=0, directed=directed, colors=(), edges=())


# =============================================================================
# Builders
# =============================================================================


def build_certificate(structure: Canonizable, order: Sequence[int]) -> Certificate:
    """
    Encode structure under the total order `order`.

    Args:
        structure: Canonizable structure
        order: order[i] = element placed at canonical position i

    Returns:
        Certificate of the relabeled structure
    """
    n = len(order)
    directed = bool(structure.directed)
    if n == 0:
        return empty_certificate(directed)

    colors = structure.initial_colors()
    canonical_colors = tuple(colors[e] for e in order)

    if directed:
        edges = tuple(structure.edge(u, v) for u in order for v in order)
    else:
        edges = tuple(
            structure.edge(order[i], order[j])
            for i in range(n)
            for j in range(i, n)
        )

    return Certificate(size=n, directed=directed, colors=canonical_colors, edges=edges)


def certificate_of(structure: Canonizable, labeling: Sequence[int]) -> Certificate:
    """
    Re-derive a certificate from a labeling, without any search.

    Args:
        labeling: labeling[e] = canonical position of element e
    """
    return build_certificate(structure, order_from_labeling(labeling))


def compare_certificates(a: Certificate, b: Certificate) -> int:
    """
    Three-way lexicographic comparison.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    if a == b:
        return 0
    return -1 if a < b else 1


# =============================================================================
# Permutation helpers
# =============================================================================


def order_from_labeling(labeling: Sequence[int]) -> Order:
    """Invert element → position into position → element."""
    order = [0] * len(labeling)
    for element, position in enumerate(labeling):
        order[position] = element
    return tuple(order)


def labeling_from_order(order: Sequence[int]) -> Labeling:
    """Invert position → element into element → position."""
    return order_from_labeling(order)


def is_permutation(values: Sequence[int]) -> bool:
    """True when values is a permutation of range(len(values))."""
    return sorted(values) == list(range(len(values)))


def leaf_automorphism(order_a: Sequence[int], order_b: Sequence[int]) -> Automorphism:
    """
    Permutation mapping the element at each position of order_a to the
    element at the same position of order_b.

    When both orders give equal certificates, this is an automorphism.
    """
    image = [0] * len(order_a)
    for a, b in zip(order_a, order_b):
        image[a] = b
    return tuple(image)
