"""
Equitable partition refinement (1-dimensional Weisfeiler-Leman on cells).

Provides:
- refine: split cells until the partition is equitable
- refine_with_receipt: same, plus split/splitter counts
- individualize: individualize one element and refine
- root_partition: equitable refinement of the initial coloring
- is_equitable: direct equitability check

Algorithm (worklist partition refinement):
    Keep a FIFO queue of splitter cells. Pop a splitter C; for every
    non-singleton cell D compute neighbor_count(x, C) for x in D. When the
    counts differ, split D into fragments ordered by count ascending
    (stable inside each fragment). If D was still queued, queue every new
    fragment; otherwise queue all fragments but the first largest one.

Acceptance:
    - Result is equitable
    - Monotone: cells only split, never merge or reorder
    - Discrete partitions are fixed points
    - Label independent: isomorphic inputs give corresponding cells in the
      same positions
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Sequence, Set, Tuple

from .contract import Canonizable, check_contract
from .errors import ContractViolation
from .partition import Partition
from .types import Element


@dataclass
class RefinementReceipt:
    """Counters describing one refinement run."""

    splitters: int     # Cells popped from the work queue
    splits: int        # Cells that were split
    cells_before: int  # Cell count of the input partition
    cells_after: int   # Cell count of the equitable result


# =============================================================================
# Main Entry Points
# =============================================================================


def refine(
    structure: Canonizable,
    partition: Partition,
    active: Optional[Iterable[int]] = None,
) -> Partition:
    """
    Refine partition until it is equitable.

    Args:
        structure: Structure answering neighbor_count queries
        partition: Input partition (not modified)
        active: Start positions of the cells to use as initial splitters.
            Defaults to every cell; passing fewer is only valid when the
            input was equitable before its last split.

    Returns:
        New equitable partition, finer than or equal to the input
    """
    refined, _ = refine_with_receipt(structure, partition, active)
    return refined


def refine_with_receipt(
    structure: Canonizable,
    partition: Partition,
    active: Optional[Iterable[int]] = None,
) -> Tuple[Partition, RefinementReceipt]:
    """Refine a copy of partition and report what happened."""
    result = partition.copy()
    receipt = refine_in_place(structure, result, active)
    return result, receipt


def individualize(structure: Canonizable, partition: Partition, element: Element) -> Partition:
    """
    Individualize element and refine the result.

    The element is moved into a singleton cell immediately before the rest
    of its cell; the singleton is the only initial splitter.

    Args:
        structure: Structure answering neighbor_count queries
        partition: Equitable partition (not modified)
        element: Element of a non-singleton cell

    Returns:
        New equitable partition in which element is a singleton
    """
    child = partition.copy()
    singleton = child.individualize(element)
    refine_in_place(structure, child, [singleton])
    return child


def root_partition(structure: Canonizable) -> Partition:
    """
    Equitable refinement of the structure's initial coloring.

    Raises:
        ContractViolation: If the initial colors are malformed
    """
    colors = check_contract(structure)
    partition = Partition.from_colors(colors)
    refine_in_place(structure, partition)
    return partition


def is_equitable(structure: Canonizable, partition: Partition) -> bool:
    """
    Check equitability directly: every pair of elements sharing a cell has
    the same neighbor count into every cell.
    """
    cells = partition.cells()
    for splitter in cells:
        for cell in cells:
            if len(cell) == 1:
                continue
            first = structure.neighbor_count(cell[0], splitter)
            if any(structure.neighbor_count(e, splitter) != first for e in cell[1:]):
                return False
    return True


# =============================================================================
# Worklist
# =============================================================================


def refine_in_place(
    structure: Canonizable,
    partition: Partition,
    active: Optional[Iterable[int]] = None,
) -> RefinementReceipt:
    """
    Worklist refinement mutating partition.

    Returns:
        RefinementReceipt for the run
    """
    cells_before = len(partition)
    if active is None:
        active = partition.cell_starts()

    queue: Deque[int] = deque()
    queued: Set[int] = set()
    for start in active:
        if start not in queued:
            queue.append(start)
            queued.add(start)

    splitters = 0
    splits = 0

    while queue and not partition.is_discrete():
        splitter_start = queue.popleft()
        queued.discard(splitter_start)
        splitter = partition.cell_at(splitter_start)
        splitters += 1

        for start in partition.cell_starts():
            if partition.cell_length(start) == 1:
                continue

            groups = _split_by_count(structure, partition.cell_at(start), splitter)
            if len(groups) == 1:
                continue

            fragments = partition.split(start, groups)
            splits += 1

            if start in queued:
                # The whole cell was pending: every fragment stays pending
                new_starts = fragments[1:]
            else:
                # Hopcroft: skip the first largest fragment
                largest = max(range(len(groups)), key=lambda i: len(groups[i]))
                new_starts = [f for i, f in enumerate(fragments) if i != largest]

            for f in new_starts:
                queue.append(f)
                queued.add(f)

    return RefinementReceipt(
        splitters=splitters,
        splits=splits,
        cells_before=cells_before,
        cells_after=len(partition),
    )


def _split_by_count(
    structure: Canonizable,
    cell: Sequence[Element],
    splitter: Sequence[Element],
) -> List[List[Element]]:
    """
    Group cell by neighbor count into splitter, groups ordered by count.

    Raises:
        ContractViolation: If counts are unhashable or cannot be ordered
    """
    counts = [structure.neighbor_count(e, splitter) for e in cell]
    try:
        keys = sorted(set(counts))
    except TypeError as e:
        raise ContractViolation(f"neighbor counts cannot be ordered: {e}") from e

    if len(keys) == 1:
        return [list(cell)]

    groups = {key: [] for key in keys}
    for e, count in zip(cell, counts):
        groups[count].append(e)

    return [groups[key] for key in keys]
