"""
Canonical labeling search.

Modules:
- certificate.py: Certificate encoding, comparison and permutation helpers
- tree.py: Search nodes (partition + individualization path)
- pruner.py: Automorphism store, orbit pruning, symmetric cells
- explorer.py: Depth-first individualization-refinement search
"""

from .certificate import (
    Certificate,
    build_certificate,
    certificate_of,
    compare_certificates,
    empty_certificate,
)
from .explorer import CanonicalForm, SearchConfig, SearchReceipt, canonicalize
from .pruner import AutomorphismStore, is_automorphism, symmetric_cell
from .tree import SearchNode

__all__ = [
    "Certificate",
    "build_certificate",
    "certificate_of",
    "compare_certificates",
    "empty_certificate",
    "CanonicalForm",
    "SearchConfig",
    "SearchReceipt",
    "canonicalize",
    "AutomorphismStore",
    "is_automorphism",
    "symmetric_cell",
    "SearchNode",
]
