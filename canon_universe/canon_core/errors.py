"""
Error taxonomy of the canonicalization engine.

- ContractViolation: the structure answered inconsistently or with values
  the engine cannot order (detection is best effort)
- SearchExhausted: a node, leaf or time budget ran out; no certificate is
  returned in that case

Internal invariant breaches (a partition losing an element, ...) are not
part of this taxonomy: they raise AssertionError and stop the computation.
"""

from typing import Any, Optional


class CanonError(Exception):
    """Base class for errors surfaced to callers of the engine."""


class ContractViolation(CanonError):
    """The structure broke the capability contract."""


class SearchExhausted(CanonError):
    """
    The search tree outgrew the configured budget.

    Attributes:
        reason: Which budget ran out ("max_nodes", "max_leaves", "time_limit")
        receipt: SearchReceipt snapshot at the moment of abort (may be None)
    """

    def __init__(self, reason: str, receipt: Optional[Any] = None):
        super().__init__(f"Search aborted: {reason} exceeded")
        self.reason = reason
        self.receipt = receipt
