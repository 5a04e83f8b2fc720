#!/usr/bin/env python3
"""
Gate ISO Integration Test: canonical forms under random relabeling.

For each random structure:
- canonicalize twice (determinism)
- canonicalize random relabelings (isomorphism soundness)
- re-derive the certificate from the returned labeling (permutation correctness)
- normalize through a shared cache and compare (cache consistency)

Critical Invariants:
- deterministic = True
- morphisms_equal = True for every relabeling
- rederived = True

Usage:
    python run_gate_iso.py --limit 50 --kind graph --size 8 --density 0.3
    python run_gate_iso.py --limit 50 --kind triples --size 5 --triples 10
"""

import argparse
import sys
from dataclasses import asdict
from pathlib import Path

import numpy as np

# Add parent directory to path to import canon_* packages
sys.path.insert(0, str(Path(__file__).parent.parent))

from canon_cache.cache import NormalizationCache
from canon_cache.normalize import normalize
from canon_core.errors import CanonError
from canon_search.certificate import certificate_of
from canon_search.explorer import SearchConfig, canonicalize
from canon_structures.generators import (
    random_graph,
    random_morphism,
    random_permutation,
    random_triple_graph,
)

from utils import build_receipt, compute_summary_stats, save_receipt, setup_logger


def make_structure(args, rng):
    """Draw one random structure of the requested kind."""
    if args.kind == "graph":
        return random_graph(args.size, args.density, rng, colors=args.colors, directed=args.directed)
    return random_triple_graph(args.size, args.triples, rng)


def relabel(structure, rng):
    """Random relabeling of a structure of either kind."""
    if hasattr(structure, "variable_count"):
        return random_morphism(structure, rng)
    return structure.relabel(random_permutation(structure.element_count(), rng))


def run_case(case_id, structure, args, rng, cache, logger):
    """
    Run every check on one structure.

    Returns:
        Receipt dictionary
    """
    config = SearchConfig(workers=args.workers, time_limit=args.time_limit)

    try:
        form = canonicalize(structure, config)
        again = canonicalize(structure, config)
        deterministic = form.certificate == again.certificate and form.permutation == again.permutation

        morphisms_equal = True
        for _ in range(args.morphisms):
            other = relabel(structure, rng)
            if canonicalize(other, config).certificate != form.certificate:
                morphisms_equal = False
                logger.error(f"Case {case_id}: relabeling changed the certificate")
                break

        rederived = certificate_of(structure, form.permutation) == form.certificate
        cached = normalize(structure, cache, config)
        cache_consistent = cached.certificate == form.certificate

    except CanonError as e:
        logger.error(f"Case {case_id}: {type(e).__name__}: {e}")
        return build_receipt(case_id, "ISO", status="FAIL", error=str(e))

    status = "PASS" if (deterministic and morphisms_equal and rederived and cache_consistent) else "FAIL"
    if not deterministic:
        logger.error(f"Case {case_id}: NOT DETERMINISTIC")
    if not rederived:
        logger.error(f"Case {case_id}: labeling does not reproduce the certificate")

    search_data = asdict(form.receipt)
    search_data.update({
        "elements": structure.element_count(),
        "deterministic": deterministic,
        "morphisms_equal": morphisms_equal,
        "rederived": rederived,
    })
    logger.info(
        f"Case {case_id}: {status} nodes={form.receipt.nodes} leaves={form.receipt.leaves} "
        f"automorphisms={len(form.automorphisms)}"
    )

    return build_receipt(
        case_id,
        "ISO",
        search_data=search_data,
        cache_data={"entries": len(cache), "hits": cache.hits, "misses": cache.misses,
                    "consistent": cache_consistent},
        status=status,
    )


def main():
    parser = argparse.ArgumentParser(description="Gate ISO Integration Test")
    parser.add_argument("--limit", type=int, default=50, help="Number of random structures")
    parser.add_argument("--kind", type=str, default="graph", choices=["graph", "triples"],
                        help="Structure kind")
    parser.add_argument("--size", type=int, default=8, help="Vertices (graph) or variables (triples)")
    parser.add_argument("--density", type=float, default=0.3, help="Edge probability (graph)")
    parser.add_argument("--colors", type=int, default=1, help="Vertex colors (graph)")
    parser.add_argument("--directed", action="store_true", help="Directed graphs")
    parser.add_argument("--triples", type=int, default=10, help="Triples drawn (triples)")
    parser.add_argument("--morphisms", type=int, default=5, help="Relabelings per structure")
    parser.add_argument("--workers", type=int, default=1, help="Threads for root branches")
    parser.add_argument("--time-limit", type=float, default=None, help="Seconds per search")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    log_dir = Path(__file__).parent / "logs"
    logger = setup_logger("gate_iso", log_dir / "gate_iso.log")

    receipts_dir = Path(__file__).parent / "receipts" / "gate_iso"
    receipts_dir.mkdir(parents=True, exist_ok=True)

    logger.info("=" * 80)
    logger.info("Gate ISO Integration Test")
    logger.info(f"Kind: {args.kind}, size: {args.size}, cases: {args.limit}")
    logger.info(f"Random seed: {args.seed}")
    logger.info("=" * 80)

    rng = np.random.default_rng(args.seed)
    cache = NormalizationCache()
    receipts = []

    for i in range(args.limit):
        case_id = f"{args.kind}_{args.size}_{i:04d}"
        structure = make_structure(args, rng)
        receipt = run_case(case_id, structure, args, rng, cache, logger)
        save_receipt(receipt, receipts_dir)
        receipts.append(receipt)

    stats = compute_summary_stats(receipts)

    logger.info("\n" + "=" * 80)
    logger.info("SUMMARY STATISTICS")
    logger.info("=" * 80)
    logger.info(f"Total cases: {stats['total_cases']}")
    logger.info(f"Passed: {stats['passed']}")
    logger.info(f"Failed: {stats['failed']}")
    logger.info(f"Pass rate: {stats['pass_rate'] * 100:.1f}%")
    if "search" in stats:
        logger.info(f"Average nodes: {stats['search']['avg_nodes']:.1f} (max {stats['search']['max_nodes']})")
        logger.info(f"Average leaves: {stats['search']['avg_leaves']:.1f} (max {stats['search']['max_leaves']})")

    return 0 if stats["failed"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
