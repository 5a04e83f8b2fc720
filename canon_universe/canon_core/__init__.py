"""
canon_core: Core primitives of the canonicalization engine.

Provides:
- types: Element, Labeling, Order, Fingerprint and other fundamental types
- order_hash: Global total order and deterministic hashing (SHA-256)
- errors: CanonError, ContractViolation, SearchExhausted
- contract: Canonizable capability protocol and helpers
- partition: Ordered partition (coloring) of the element set
- refine: Equitable partition refinement and individualization
"""

from .contract import Canonizable, check_contract, edge_multiset, identity_order
from .errors import CanonError, ContractViolation, SearchExhausted
from .order_hash import hash64, lex_min
from .partition import Partition
from .refine import (
    RefinementReceipt,
    individualize,
    is_equitable,
    refine,
    refine_with_receipt,
    root_partition,
)

__all__ = [
    "Canonizable",
    "check_contract",
    "edge_multiset",
    "identity_order",
    "CanonError",
    "ContractViolation",
    "SearchExhausted",
    "hash64",
    "lex_min",
    "Partition",
    "RefinementReceipt",
    "individualize",
    "is_equitable",
    "refine",
    "refine_with_receipt",
    "root_partition",
]
