"""
Structural fingerprints: cheap isomorphism invariants.

The fingerprint hashes the quotient of the equitable root partition:
element count, direction, and per cell its size, color, self edge
descriptions and neighbor counts into every cell. No search is run.

Acceptance:
    - Invariant: isomorphic structures → equal fingerprints
    - Not complete: non-isomorphic structures may collide (e.g. two
      regular graphs of equal degree and order); collisions are resolved
      by the cache through signatures and certificates, never by the
      fingerprint alone
"""

from typing import Optional

from canon_core.contract import Canonizable
from canon_core.order_hash import hash64
from canon_core.partition import Partition
from canon_core.refine import root_partition
from canon_core.types import Fingerprint


def fingerprint(structure: Canonizable, partition: Optional[Partition] = None) -> Fingerprint:
    """
    Compute the fingerprint of structure.

    Args:
        structure: Any Canonizable
        partition: Equitable root partition if the caller already has it
            (must come from root_partition on the same structure)

    Returns:
        64-bit fingerprint
    """
    if partition is None:
        partition = root_partition(structure)

    colors = structure.initial_colors()
    cells = partition.cells()

    profile = []
    for cell in cells:
        x = cell[0]
        # Equitable: every member of the cell has the same counts as x
        profile.append([
            len(cell),
            colors[x],
            sorted(structure.edge(y, y) for y in cell),
            [structure.neighbor_count(x, other) for other in cells],
        ])

    return Fingerprint(hash64([partition.size, bool(structure.directed), profile]))
