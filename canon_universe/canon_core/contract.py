"""
Capability contract between caller structures and the engine.

A structure never subclasses engine types; it only has to expose the
methods of Canonizable. The engine treats the structure as read-only and
static for the duration of one canonicalization.

Provides:
- Canonizable: runtime-checkable Protocol
- edge_multiset: generic neighbor_count built from edge()
- check_contract: shape validation (raises ContractViolation)
- identity_order: the order (0, 1, ..., n-1)
"""

from typing import Protocol, Sequence, Tuple, runtime_checkable

from .errors import ContractViolation
from .types import Color, EdgeDescription, Element, Order


@runtime_checkable
class Canonizable(Protocol):
    """
    Structure exposing elements, neighbor counts, initial colors and edges.

    Requirements:
        element_count(): number n of elements, indexed 0..n-1
        initial_colors(): one color per element, invariant under
            isomorphism (colors of one structure must be mutually ordered)
        neighbor_count(element, cell): count (or multiset, for weighted or
            typed edges) of neighbors of element inside cell; must be
            hashable and ordered against other counts of the structure
        edge(u, v): local edge description of the ordered pair (u, v);
            descriptions are compared with Python ordering
        directed: False when edge(u, v) == edge(v, u) for all pairs
    """

    directed: bool

    def element_count(self) -> int:
        ...

    def initial_colors(self) -> Sequence[Color]:
        ...

    def neighbor_count(self, element: Element, cell: Sequence[Element]) -> EdgeDescription:
        ...

    def edge(self, u: Element, v: Element) -> EdgeDescription:
        ...


def edge_multiset(structure: Canonizable, element: Element, cell: Sequence[Element]) -> Tuple:
    """
    Multiset of edge descriptions from element into cell.

    Structures whose edge() returns a falsy value for "no edge" can use this
    as their neighbor_count. Directed structures get (outgoing, incoming)
    multisets so both directions refine.

    Returns:
        Sorted tuple of non-empty descriptions (or a pair of such tuples
        when the structure is directed)
    """
    outgoing = sorted(d for d in (structure.edge(element, other) for other in cell) if d)
    if not structure.directed:
        return tuple(outgoing)

    incoming = sorted(d for d in (structure.edge(other, element) for other in cell) if d)
    return (tuple(outgoing), tuple(incoming))


def check_contract(structure: Canonizable) -> Sequence[Color]:
    """
    Validate the shape of a structure before searching it.

    Args:
        structure: Candidate Canonizable

    Returns:
        The initial colors (so callers do not ask twice)

    Raises:
        ContractViolation: If a method is missing, the element count is
            negative, or the color sequence has the wrong length or
            cannot be ordered
    """
    if not isinstance(structure, Canonizable):
        raise ContractViolation(f"{type(structure).__name__} does not implement Canonizable")

    n = structure.element_count()
    if n < 0:
        raise ContractViolation(f"element_count() returned {n}")

    colors = list(structure.initial_colors())
    if len(colors) != n:
        raise ContractViolation(
            f"initial_colors() returned {len(colors)} colors for {n} elements"
        )

    try:
        sorted(colors)
    except TypeError as e:
        raise ContractViolation(f"initial colors are not mutually ordered: {e}") from e

    return colors


def identity_order(n: int) -> Order:
    """Order in which position i holds element i."""
    return tuple(range(n))
