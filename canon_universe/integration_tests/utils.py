"""
Utility functions for canonicalization integration runs.

Provides:
- Logging setup
- Receipt generation and persistence
- Summary statistics over receipts
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


def setup_logger(name: str, log_file: Path, level=logging.INFO) -> logging.Logger:
    """
    Setup logger for integration runs.

    Args:
        name: Logger name
        log_file: Path to log file
        level: Logging level

    Returns:
        Configured logger
    """
    # Create logs directory if it doesn't exist
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers = []

    file_handler = logging.FileHandler(log_file, mode="w")
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def build_receipt(
    case_id: str,
    gate: str,
    search_data: Optional[Dict[str, Any]] = None,
    cache_data: Optional[Dict[str, Any]] = None,
    status: str = "PASS",
    error: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a receipt dictionary for one case.

    Args:
        case_id: Case identifier
        gate: Gate name ("ISO", "NEG", ...)
        search_data: Search counters (from SearchReceipt)
        cache_data: Cache statistics
        status: "PASS" or "FAIL"
        error: Error message if status is FAIL

    Returns:
        Receipt dictionary
    """
    receipt = {
        "case_id": case_id,
        "gate": gate,
        "timestamp": datetime.now().isoformat(),
        "status": status,
    }

    if search_data is not None:
        receipt["search"] = search_data

    if cache_data is not None:
        receipt["cache"] = cache_data

    if error is not None:
        receipt["error"] = error

    return receipt


def save_receipt(receipt: Dict[str, Any], output_dir: Path) -> None:
    """
    Save receipt to JSON file.

    Args:
        receipt: Receipt dictionary
        output_dir: Directory to save receipt (e.g., receipts/gate_iso/)
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    receipt_file = output_dir / f"{receipt['case_id']}.json"

    with open(receipt_file, "w") as f:
        json.dump(receipt, f, indent=2)


def compute_summary_stats(receipts: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Compute summary statistics from a list of receipts.

    Args:
        receipts: List of receipt dictionaries

    Returns:
        Summary statistics dictionary
    """
    total = len(receipts)
    passed = sum(1 for r in receipts if r["status"] == "PASS")

    stats = {
        "total_cases": total,
        "passed": passed,
        "failed": total - passed,
        "pass_rate": passed / total if total > 0 else 0.0,
    }

    search_receipts = [r["search"] for r in receipts if "search" in r]
    if search_receipts:
        leaves = [s["leaves"] for s in search_receipts]
        nodes = [s["nodes"] for s in search_receipts]
        stats["search"] = {
            "avg_nodes": sum(nodes) / len(nodes),
            "max_nodes": max(nodes),
            "avg_leaves": sum(leaves) / len(leaves),
            "max_leaves": max(leaves),
            "total_automorphisms": sum(s["automorphisms"] for s in search_receipts),
        }

    return stats
