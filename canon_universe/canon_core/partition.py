"""
Ordered partition of the element set (coloring).

A partition is a list of cells (W_1, ..., W_m): disjoint, non-empty and
covering range(n). Cell order is significant and is preserved by every
mutation.

Representation:
- elements: all elements, ordered by cell first, insertion order second
- cell_len[start]: length of the cell starting at position `start`
  (0 for positions that are not a cell start)
- cell_of[e]: start position of the cell holding element e
- position[e]: index of e in `elements`

A cell is addressed by its start position. Splitting a cell keeps the
first fragment at the same start, so the addresses of all other cells
stay valid.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

from .types import Color, Element, Labeling, Order


class Partition:
    """Ordered partition with O(1) element → cell lookup."""

    __slots__ = ("_elements", "_position", "_cell_of", "_cell_len", "_count")

    def __init__(self, elements: Sequence[Element], cell_lengths: Sequence[int]):
        """
        Args:
            elements: Permutation of range(n) listing cells back to back
            cell_lengths: Length of each cell, in cell order

        Raises:
            ValueError: If elements is not a permutation of range(n) or
                the lengths do not add up to n
        """
        n = len(elements)
        if sorted(elements) != list(range(n)):
            raise ValueError("Partition elements must be a permutation of range(n)")
        if sum(cell_lengths) != n or any(length <= 0 for length in cell_lengths):
            raise ValueError(f"Cell lengths {list(cell_lengths)} do not cover {n} elements")

        self._elements: List[Element] = list(elements)
        self._position: List[int] = [0] * n
        self._cell_of: List[int] = [0] * n
        self._cell_len: List[int] = [0] * n
        self._count = len(cell_lengths)

        start = 0
        for length in cell_lengths:
            self._cell_len[start] = length
            for pos in range(start, start + length):
                e = self._elements[pos]
                self._position[e] = pos
                self._cell_of[e] = start
            start += length

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def unit(cls, n: int) -> "Partition":
        """Partition with a single cell holding every element."""
        return cls(range(n), [n] if n else [])

    @classmethod
    def from_colors(cls, colors: Sequence[Color]) -> "Partition":
        """
        Partition whose cells are the color classes, ordered by color.

        Elements inside a cell are in index order. Colors only need to be
        mutually ordered and comparable for equality.

        Examples:
            >>> Partition.from_colors(["b", "a", "b"]).cells()
            [(1,), (0, 2)]
        """
        elements = sorted(range(len(colors)), key=lambda e: (colors[e], e))

        lengths: List[int] = []
        for i, e in enumerate(elements):
            if i > 0 and colors[elements[i - 1]] == colors[e]:
                lengths[-1] += 1
            else:
                lengths.append(1)

        return cls(elements, lengths)

    def copy(self) -> "Partition":
        clone = Partition.__new__(Partition)
        clone._elements = list(self._elements)
        clone._position = list(self._position)
        clone._cell_of = list(self._cell_of)
        clone._cell_len = list(self._cell_len)
        clone._count = self._count
        return clone

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of elements."""
        return len(self._elements)

    def __len__(self) -> int:
        """Number of cells."""
        return self._count

    def cell_starts(self) -> List[int]:
        starts = []
        start = 0
        while start < len(self._elements):
            starts.append(start)
            start += self._cell_len[start]
        return starts

    def cell_at(self, start: int) -> Tuple[Element, ...]:
        length = self._cell_len[start]
        if length == 0:
            raise KeyError(f"No cell starts at position {start}")
        return tuple(self._elements[start:start + length])

    def iter_cells(self) -> Iterator[Tuple[Element, ...]]:
        for start in self.cell_starts():
            yield self.cell_at(start)

    def cells(self) -> List[Tuple[Element, ...]]:
        return list(self.iter_cells())

    def cell_of(self, element: Element) -> int:
        """Start position of the cell holding element."""
        return self._cell_of[element]

    def cell_length(self, start: int) -> int:
        return self._cell_len[start]

    def position(self, element: Element) -> int:
        return self._position[element]

    def is_discrete(self) -> bool:
        return self._count == len(self._elements)

    def is_unit(self) -> bool:
        return self._count <= 1

    def order(self) -> Order:
        """Elements in partition order (a total order when discrete)."""
        return tuple(self._elements)

    def labeling(self) -> Optional[Labeling]:
        """
        Permutation element → position defined by a discrete partition.

        Returns:
            Tuple p with p[e] = position of e, or None when the partition
            is not discrete
        """
        if not self.is_discrete():
            return None
        return tuple(self._position)

    def first_non_singleton(self) -> Optional[int]:
        """Start of the first cell with more than one element, if any."""
        for start in self.cell_starts():
            if self._cell_len[start] > 1:
                return start
        return None

    def is_finer_or_equal_to(self, other: "Partition") -> bool:
        """
        Check that self refines other without reordering its cells.

        Every cell of self must lie inside one cell of other, and the
        cells of other they fall into must appear in non-decreasing order.
        Both partitions must cover the same element set.
        """
        last_start = 0
        for cell in self.iter_cells():
            start = other.cell_of(cell[0])
            if start < last_start:
                return False
            if any(other.cell_of(e) != start for e in cell[1:]):
                return False
            last_start = start
        return True

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def split(self, start: int, groups: Sequence[Sequence[Element]]) -> List[int]:
        """
        Replace the cell at start by the given ordered groups.

        Args:
            start: Start position of the cell to split
            groups: Non-empty groups whose union is exactly that cell

        Returns:
            Start positions of the new cells, in order (the first one is
            `start` itself)
        """
        length = self._cell_len[start]
        flat = [e for group in groups for e in group]
        assert sorted(flat) == sorted(self._elements[start:start + length]), \
            f"Split groups do not match the cell at {start}"
        assert all(groups), "Split produced an empty cell"

        starts = []
        pos = start
        for group in groups:
            self._cell_len[pos] = len(group)
            starts.append(pos)
            for e in group:
                self._elements[pos] = e
                self._position[e] = pos
                self._cell_of[e] = starts[-1]
                pos += 1
        # Interior positions of a fragment are not starts
        for s, group in zip(starts, groups):
            for p in range(s + 1, s + len(group)):
                self._cell_len[p] = 0

        self._count += len(groups) - 1
        return starts

    def individualize(self, element: Element) -> int:
        """
        Move element into a singleton cell placed right before the rest
        of its former cell.

        Returns:
            Start position of the new singleton cell
        """
        start = self._cell_of[element]
        if self._cell_len[start] == 1:
            return start

        rest = [e for e in self.cell_at(start) if e != element]
        self.split(start, [[element], rest])
        return start

    # -------------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------------

    def check(self) -> None:
        """
        Verify that every element belongs to exactly one cell.

        Raises:
            AssertionError: On any inconsistency between the internal
                arrays (a fatal defect, never a recoverable condition)
        """
        n = len(self._elements)
        assert sorted(self._elements) == list(range(n)), \
            "Partition lost or duplicated an element"

        count = 0
        start = 0
        while start < n:
            length = self._cell_len[start]
            assert length > 0, f"Position {start} is inside no cell"
            for pos in range(start, start + length):
                e = self._elements[pos]
                assert self._position[e] == pos, f"Element {e} has stale position"
                assert self._cell_of[e] == start, f"Element {e} has stale cell"
            start += length
            count += 1

        assert start == n, "Cells overrun the element array"
        assert count == self._count, f"Cell count {self._count} != {count}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Partition):
            return NotImplemented
        return [frozenset(c) for c in self.iter_cells()] == [frozenset(c) for c in other.iter_cells()]

    def __repr__(self) -> str:
        body = " | ".join(" ".join(str(e) for e in cell) for cell in self.iter_cells())
        return f"Partition([{body}])"
