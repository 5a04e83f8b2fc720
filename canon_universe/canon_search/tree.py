"""
Search tree nodes for individualization-refinement.

A node is an equitable partition plus the path of individualized elements
that produced it from the root. A node is a leaf iff its partition is
discrete. Nodes own their partition snapshot; nothing is shared between
parent and child.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from canon_core.contract import Canonizable
from canon_core.partition import Partition
from canon_core.refine import individualize, root_partition
from canon_core.types import Element


@dataclass(frozen=True)
class SearchNode:
    path: Tuple[Element, ...]
    partition: Partition

    @classmethod
    def root(cls, structure: Canonizable) -> "SearchNode":
        """Root node: equitable refinement of the initial coloring."""
        return cls(path=(), partition=root_partition(structure))

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def is_leaf(self) -> bool:
        return self.partition.is_discrete()

    def target_cell(self) -> Optional[Tuple[Element, ...]]:
        """
        First non-singleton cell in partition order (None at a leaf).

        The choice depends only on cell positions, so corresponding nodes
        of isomorphic structures pick corresponding cells.
        """
        start = self.partition.first_non_singleton()
        if start is None:
            return None
        return self.partition.cell_at(start)

    def child(self, structure: Canonizable, element: Element) -> "SearchNode":
        """Node obtained by individualizing element and refining."""
        return SearchNode(
            path=self.path + (element,),
            partition=individualize(structure, self.partition, element),
        )
