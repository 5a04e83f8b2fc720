"""
Individualization-refinement search for canonical labelings.

Provides:
- canonicalize: canonical certificate + labeling of a Canonizable structure
- SearchConfig: budgets and switches for one search
- SearchReceipt: counters describing one search
- CanonicalForm: search result

Algorithm:
    1. Root = equitable refinement of the initial coloring
    2. Depth-first over an explicit stack of frames. At a non-leaf node the
       target cell is the first non-singleton cell; children individualize
       each of its elements in cell order and refine
    3. At a leaf, build the certificate; keep it only if strictly smaller
       than the best so far. Equal certificates against the first or the
       best leaf give automorphisms
    4. Before each child, skip it when a symmetric target cell or the
       orbits of the automorphisms fixing the node's path make it
       equivalent to an explored sibling

Minimality:
    The result is the smallest certificate among the leaves of this tree.
    Isomorphic structures have isomorphic trees, so it is invariant, but a
    permutation outside the tree can give a smaller certificate.

Tie-break:
    Among leaves with the minimal certificate, the first one of the
    unpruned depth-first order is canonical. Pruning only removes images of
    earlier subtrees, so it never removes that leaf, and parallel search
    reproduces it by combining branch winners in branch order.

Acceptance:
    - Deterministic: same structure → same certificate and labeling
    - Isomorphic structures → identical certificates
    - Budgets raise SearchExhausted, never a partial result
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from canon_core.contract import Canonizable, check_contract
from canon_core.errors import ContractViolation, SearchExhausted
from canon_core.order_hash import lex_min
from canon_core.types import Automorphism, Element, Labeling, Order

from .certificate import (
    Certificate,
    build_certificate,
    certificate_of,
    empty_certificate,
    labeling_from_order,
)
from .pruner import AutomorphismStore, OrbitTracker, symmetric_cell
from .tree import SearchNode

logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================


@dataclass(frozen=True)
class SearchConfig:
    """
    Budgets and switches for one search.

    Attributes:
        max_nodes: Abort after visiting this many nodes (None = unbounded)
        max_leaves: Abort after this many leaves (None = unbounded)
        time_limit: Abort after this many seconds (None = unbounded)
        prune_orbits: Skip children equivalent under discovered automorphisms
        symmetric_cells: Explore one child of fully symmetric target cells
        workers: >1 explores the root's children on a thread pool
        verify: Check leaf partitions and re-derive the final certificate
    """

    max_nodes: Optional[int] = None
    max_leaves: Optional[int] = None
    time_limit: Optional[float] = None
    prune_orbits: bool = True
    symmetric_cells: bool = True
    workers: int = 1
    verify: bool = True


@dataclass
class SearchReceipt:
    """Counters describing one search."""

    nodes: int = 0               # Nodes visited (root and leaves included)
    leaves: int = 0              # Discrete partitions reached
    certificates_built: int = 0  # Certificates built at leaves
    orbit_prunes: int = 0        # Children skipped by orbit pruning
    symmetric_prunes: int = 0    # Children skipped inside symmetric cells
    automorphisms: int = 0       # New automorphism generators recorded

    def merge(self, other: "SearchReceipt") -> None:
        self.nodes += other.nodes
        self.leaves += other.leaves
        self.certificates_built += other.certificates_built
        self.orbit_prunes += other.orbit_prunes
        self.symmetric_prunes += other.symmetric_prunes
        self.automorphisms += other.automorphisms


@dataclass(frozen=True)
class CanonicalForm:
    """
    Result of a canonicalization.

    Attributes:
        certificate: Canonical certificate (equal for isomorphic structures)
        permutation: permutation[e] = canonical position of element e
        order: order[i] = element at canonical position i
        automorphisms: Generators discovered during the search
        receipt: Search counters
    """

    certificate: Certificate
    permutation: Labeling
    order: Order
    automorphisms: Tuple[Automorphism, ...] = ()
    receipt: SearchReceipt = field(default_factory=SearchReceipt, compare=False)


# =============================================================================
# Main Entry Point
# =============================================================================


def canonicalize(structure: Canonizable, config: Optional[SearchConfig] = None) -> CanonicalForm:
    """
    Compute the canonical certificate and labeling of structure.

    Args:
        structure: Any Canonizable
        config: Search budgets and switches (default: unbounded, pruned,
            sequential, verified)

    Returns:
        CanonicalForm with the smallest leaf certificate and the labeling
        that produces it

    Raises:
        ContractViolation: If the structure breaks the contract in a way
            the engine detects
        SearchExhausted: If a budget is exceeded

    Example:
        >>> from canon_structures.graph import Graph
        >>> graph = Graph.from_edges(3, [(0, 1)])
        >>> form = canonicalize(graph)
        >>> certificate_of(graph, form.permutation) == form.certificate
        True
    """
    if config is None:
        config = SearchConfig()

    check_contract(structure)
    n = structure.element_count()
    if n == 0:
        return CanonicalForm(
            certificate=empty_certificate(bool(structure.directed)),
            permutation=(),
            order=(),
        )

    store = AutomorphismStore(n)
    budget = _Budget(config)
    root = SearchNode.root(structure)

    if config.workers > 1 and not root.is_leaf:
        state = _explore_parallel(structure, root, config, store, budget)
    else:
        state = _SearchState()
        _explore(structure, root, config, store, budget, state)

    assert state.best_cert is not None and state.best_order is not None, \
        "Search finished without reaching a leaf"

    permutation = labeling_from_order(state.best_order)
    if config.verify:
        _verify(structure, state.best_cert, permutation)

    receipt = state.receipt
    logger.debug(
        f"Canonicalized {n} elements: nodes={receipt.nodes} leaves={receipt.leaves} "
        f"automorphisms={receipt.automorphisms} orbit_prunes={receipt.orbit_prunes} "
        f"symmetric_prunes={receipt.symmetric_prunes}"
    )

    return CanonicalForm(
        certificate=state.best_cert,
        permutation=permutation,
        order=state.best_order,
        automorphisms=store.generators(),
        receipt=receipt,
    )


# =============================================================================
# Search State
# =============================================================================


class _Budget:
    """Node/leaf/time budget shared by every branch of one search."""

    def __init__(self, config: SearchConfig):
        self._config = config
        self._lock = threading.Lock()
        self._nodes = 0
        self._leaves = 0
        self._deadline = None
        if config.time_limit is not None:
            self._deadline = time.monotonic() + config.time_limit

    def charge_node(self, receipt: SearchReceipt) -> None:
        with self._lock:
            self._nodes += 1
            exceeded = self._config.max_nodes is not None and self._nodes > self._config.max_nodes
        if exceeded:
            raise SearchExhausted("max_nodes", receipt)
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise SearchExhausted("time_limit", receipt)

    def charge_leaf(self, receipt: SearchReceipt) -> None:
        with self._lock:
            self._leaves += 1
            exceeded = self._config.max_leaves is not None and self._leaves > self._config.max_leaves
        if exceeded:
            raise SearchExhausted("max_leaves", receipt)


class _SearchState:
    """Best and first leaf of one (sub)tree."""

    def __init__(self):
        self.first_cert: Optional[Certificate] = None
        self.first_order: Optional[Order] = None
        self.best_cert: Optional[Certificate] = None
        self.best_order: Optional[Order] = None
        self.receipt = SearchReceipt()


class _Frame:
    """Stack frame: a node, its candidate children and its orbit view."""

    __slots__ = ("node", "children", "index", "tracker")

    def __init__(self, node: SearchNode, children: Tuple[Element, ...], tracker: OrbitTracker):
        self.node = node
        self.children = children
        self.index = 0
        self.tracker = tracker

    def next_child(self, prune: bool, receipt: SearchReceipt) -> Optional[Element]:
        while self.index < len(self.children):
            element = self.children[self.index]
            self.index += 1
            if prune and self.tracker.is_redundant(element):
                receipt.orbit_prunes += 1
                continue
            return element
        return None


# =============================================================================
# Depth-first Exploration
# =============================================================================


def _children(
    structure: Canonizable,
    node: SearchNode,
    config: SearchConfig,
    receipt: SearchReceipt,
) -> Tuple[Element, ...]:
    """Candidate children of a non-leaf node, in cell order."""
    cell = node.target_cell()
    assert cell is not None, "Leaf nodes have no children"

    if config.symmetric_cells and symmetric_cell(structure, node.partition, cell):
        receipt.symmetric_prunes += len(cell) - 1
        return cell[:1]
    return cell


def _explore(
    structure: Canonizable,
    start: SearchNode,
    config: SearchConfig,
    store: AutomorphismStore,
    budget: _Budget,
    state: _SearchState,
) -> None:
    """Explore the subtree rooted at start, updating state in place."""

    def visit(node: SearchNode) -> Optional[_Frame]:
        budget.charge_node(state.receipt)
        state.receipt.nodes += 1
        if node.is_leaf:
            _process_leaf(structure, node, config, store, budget, state)
            return None
        children = _children(structure, node, config, state.receipt)
        return _Frame(node, children, OrbitTracker(store, node.path))

    frame = visit(start)
    if frame is None:
        return

    stack: List[_Frame] = [frame]
    while stack:
        frame = stack[-1]
        element = frame.next_child(config.prune_orbits, state.receipt)
        if element is None:
            stack.pop()
            continue

        frame.tracker.mark_explored(element)
        child_frame = visit(frame.node.child(structure, element))
        if child_frame is not None:
            stack.append(child_frame)


def _process_leaf(
    structure: Canonizable,
    node: SearchNode,
    config: SearchConfig,
    store: AutomorphismStore,
    budget: _Budget,
    state: _SearchState,
) -> None:
    """Build the leaf certificate, update best, record automorphisms."""
    receipt = state.receipt
    budget.charge_leaf(receipt)
    receipt.leaves += 1

    if config.verify:
        node.partition.check()

    order = node.partition.order()
    cert = build_certificate(structure, order)
    receipt.certificates_built += 1

    if state.first_cert is None:
        state.first_cert = state.best_cert = cert
        state.first_order = state.best_order = order
        return

    if cert == state.first_cert and store.add_from_leaves(state.first_order, order):
        receipt.automorphisms += 1

    if cert < state.best_cert:
        state.best_cert = cert
        state.best_order = order
    elif cert == state.best_cert and state.best_order != state.first_order:
        if store.add_from_leaves(state.best_order, order):
            receipt.automorphisms += 1


# =============================================================================
# Parallel Exploration
# =============================================================================


def _explore_parallel(
    structure: Canonizable,
    root: SearchNode,
    config: SearchConfig,
    store: AutomorphismStore,
    budget: _Budget,
) -> _SearchState:
    """
    Explore each child of the root on a thread pool.

    Branches share the automorphism store and the budget; each keeps its
    own best leaf. Winners are combined in branch order, so the result is
    the one the sequential search returns. On exhaustion the raised
    receipt covers every branch.
    """
    combined = _SearchState()
    budget.charge_node(combined.receipt)
    combined.receipt.nodes += 1

    children = _children(structure, root, config, combined.receipt)
    states = [_SearchState() for _ in children]

    def run(element: Element, state: _SearchState) -> None:
        _explore(structure, root.child(structure, element), config, store, budget, state)

    with ThreadPoolExecutor(max_workers=config.workers) as pool:
        futures = [pool.submit(run, e, s) for e, s in zip(children, states)]
        exhausted: Optional[SearchExhausted] = None
        for future in futures:
            try:
                future.result()
            except SearchExhausted as exc:
                exhausted = exc
                for pending in futures:
                    pending.cancel()
                break

    for state in states:
        combined.receipt.merge(state.receipt)
    if exhausted is not None:
        raise SearchExhausted(exhausted.reason, combined.receipt) from exhausted

    winner = lex_min(states, key=lambda state: state.best_cert)
    combined.first_cert, combined.first_order = states[0].best_cert, states[0].best_order
    combined.best_cert, combined.best_order = winner.best_cert, winner.best_order

    for state in states:
        if state is not winner and state.best_cert == winner.best_cert:
            if store.add_from_leaves(winner.best_order, state.best_order):
                combined.receipt.automorphisms += 1

    return combined


# =============================================================================
# Verification
# =============================================================================


def _verify(structure: Canonizable, certificate: Certificate, permutation: Labeling) -> None:
    """
    Re-derive the certificate from the returned labeling.

    Raises:
        ContractViolation: If the structure answered differently than
            during the search
    """
    rederived = certificate_of(structure, permutation)
    if rederived != certificate:
        raise ContractViolation(
            "Certificate re-derivation mismatch: the structure is not static "
            "or its answers are not deterministic"
        )
