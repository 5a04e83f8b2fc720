"""
Triple graphs with variables (RDF graphs with blank nodes).

A triple graph is a set of (subject, predicate, object) triples whose
terms are either values or variables Var(i). Two triple graphs are
isomorphic when a renaming of variables maps one triple set onto the
other; canonize() returns the canonically renamed graph.

Encoding as a Canonizable (incidence structure):
- elements 0..v-1 are the variables, elements v.. are the triples
- variable color (0, ()), triple color (1, pattern) where pattern keeps
  the values and, for variable positions, the first position at which
  that variable occurs in the triple (so (x, p, x) and (x, p, y) differ)
- edge(variable, triple) = positions of the variable in the triple,
  () for every other pair

Variables sort before triples, so in every canonical order the variables
occupy positions 0..v-1 and their positions are their canonical names.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from canon_core.contract import edge_multiset
from canon_core.types import Element
from canon_search.certificate import is_permutation


@dataclass(frozen=True, order=True)
class Var:
    """Variable (blank node) term."""

    index: int

    def __repr__(self) -> str:
        return f"?{self.index}"


Term = Any
Triple = Tuple[Term, Term, Term]


def term_key(term: Term) -> Tuple:
    """Total order on terms: variables first (by index), then values."""
    if isinstance(term, Var):
        return (0, term.index)
    return (1, term)


def triple_key(triple: Triple) -> Tuple:
    return tuple(term_key(t) for t in triple)


class TripleGraph:
    """Set of triples over values and variables Var(0..v-1)."""

    directed = False

    def __init__(self, triples: Iterable[Sequence[Term]], variable_count: Optional[int] = None):
        """
        Args:
            triples: (subject, predicate, object) sequences; duplicates
                are merged
            variable_count: Number of variables (default: highest index
                used + 1); unused variables are isolated elements

        Raises:
            ValueError: If a triple does not have three terms or uses a
                variable index outside range(variable_count)
        """
        unique = set()
        highest = -1
        for triple in triples:
            triple = tuple(triple)
            if len(triple) != 3:
                raise ValueError(f"Triple must have 3 terms, got {triple}")
            for term in triple:
                if isinstance(term, Var):
                    highest = max(highest, term.index)
            unique.add(triple)

        if variable_count is None:
            variable_count = highest + 1
        if highest >= variable_count:
            raise ValueError(f"Variable ?{highest} out of range for {variable_count} variables")

        self.variable_count = variable_count
        self._triples: Tuple[Triple, ...] = tuple(sorted(unique, key=triple_key))

        # positions[(variable, triple element)] = positions of the variable
        self._positions: Dict[Tuple[int, int], Tuple[int, ...]] = {}
        for k, triple in enumerate(self._triples):
            element = variable_count + k
            for pos, term in enumerate(triple):
                if isinstance(term, Var):
                    key = (term.index, element)
                    self._positions[key] = self._positions.get(key, ()) + (pos,)

        self._colors = [(0, ())] * variable_count + [
            (1, self._pattern(triple)) for triple in self._triples
        ]

    @staticmethod
    def _pattern(triple: Triple) -> Tuple:
        first_seen: Dict[int, int] = {}
        pattern = []
        for pos, term in enumerate(triple):
            if isinstance(term, Var):
                pattern.append((0, first_seen.setdefault(term.index, pos)))
            else:
                pattern.append((1, term))
        return tuple(pattern)

    # -------------------------------------------------------------------------
    # Canonizable contract
    # -------------------------------------------------------------------------

    def element_count(self) -> int:
        return self.variable_count + len(self._triples)

    def initial_colors(self) -> List[Tuple]:
        return self._colors

    def neighbor_count(self, element: Element, cell: Sequence[Element]) -> Tuple:
        return edge_multiset(self, element, cell)

    def edge(self, u: Element, v: Element) -> Tuple[int, ...]:
        if u < self.variable_count <= v:
            return self._positions.get((u, v), ())
        if v < self.variable_count <= u:
            return self._positions.get((v, u), ())
        return ()

    # -------------------------------------------------------------------------
    # Triple graph operations
    # -------------------------------------------------------------------------

    @property
    def triples(self) -> Tuple[Triple, ...]:
        return self._triples

    def relabel(self, mapping: Sequence[int]) -> "TripleGraph":
        """
        Rename variable Var(i) into Var(mapping[i]).

        Raises:
            ValueError: If mapping is not a permutation of the variables
        """
        if len(mapping) != self.variable_count or not is_permutation(mapping):
            raise ValueError(f"Not a permutation of {self.variable_count} variables: {list(mapping)}")

        def rename(term: Term) -> Term:
            return Var(mapping[term.index]) if isinstance(term, Var) else term

        return TripleGraph(
            (tuple(rename(t) for t in triple) for triple in self._triples),
            variable_count=self.variable_count,
        )

    def canonical_form(self, config=None):
        """CanonicalForm of the incidence encoding."""
        from canon_search.explorer import canonicalize

        return canonicalize(self, config)

    def canonize(self, config=None) -> "TripleGraph":
        """Triple graph with variables renamed canonically."""
        permutation = self.canonical_form(config).permutation
        mapping = permutation[:self.variable_count]
        assert all(p < self.variable_count for p in mapping), \
            "Variables must occupy the first canonical positions"
        return self.relabel(mapping)

    def as_set(self) -> FrozenSet[Triple]:
        return frozenset(self._triples)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TripleGraph):
            return NotImplemented
        return self.variable_count == other.variable_count and self._triples == other._triples

    def __hash__(self) -> int:
        return hash((self.variable_count, self._triples))

    def __repr__(self) -> str:
        body = ", ".join(f"({s!r} {p!r} {o!r})" for s, p, o in self._triples)
        return f"TripleGraph(vars={self.variable_count}, [{body}])"
