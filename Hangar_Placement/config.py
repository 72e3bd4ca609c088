#!/usr/bin/env python3
"""
Hangar Placement - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for hangar placement runs.
Single source of truth for solver mode, search budget, solver tuning and the
bundled sample problem.

Configuration Sections (ordered by importance for algorithm tuning):
1. optimization: Solver mode selection and geometric verification
2. search_budget: Node / wall-clock limits for the exact search
3. greedy_solver: Greedy heuristic parameters
4. branch_and_bound: Pruning switches and progress logging
5. ilp_crosscheck: Optional MIP cross-validation
6. parallel: Parallel subtree search settings
7. logging: Log file location (bottom - rarely changed)
8. sample_problem: Demo points and drone models (bottom)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
import sys
from pathlib import Path
from typing import Dict, Any, TypeVar, Callable, List, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "HANGAR_MAX_NODES")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("HANGAR_MAX_NODES", None, int)
        None  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# These settings can be overridden via environment variables for testing:
#
# HANGAR_SOLVER_MODE     - "exact" or "greedy" (default: "exact")
# HANGAR_MAX_NODES       - int, node budget for the exact search (default: unlimited)
# HANGAR_MAX_TIME_MS     - int, wall-clock budget in ms (default: unlimited)
# HANGAR_PARALLEL        - "true" or "false" (default: "false")
# HANGAR_MAX_WORKERS     - int, -1 = auto (default: -1)
# HANGAR_CROSS_VALIDATE  - "true" or "false", run the ILP cross-check (default: "false")
# HANGAR_ILP_TIME_LIMIT  - int seconds (default: 60)
# HANGAR_VERIFY_GEOMETRY - "true" or "false" (default: "true")
# HANGAR_LOG_DIR         - folder for a main.log file (default: console only)
#
# Example usage:
#   export HANGAR_MAX_TIME_MS=2000
#   export HANGAR_CROSS_VALIDATE=true
#   python -m Hangar_Placement.main
# ═══════════════════════════════════════════════════════════════════════════

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 🎯 OPTIMIZATION SETTINGS
    # ═══════════════════════════════════════════════════════════════════════
    "optimization": {
        # "exact": greedy seed + branch-and-bound (minimum hangar count)
        # "greedy": greedy only (fast, exact only when a lower bound proves it)
        "solver_mode": _env_or_default("HANGAR_SOLVER_MODE", "exact"),
        # Re-check final coverage with shapely disks
        "verify_geometry": _env_bool("HANGAR_VERIFY_GEOMETRY", True),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # ⏱️ SEARCH BUDGET
    # ═══════════════════════════════════════════════════════════════════════
    # None = unlimited. When exhausted, the best selection found so far is
    # returned with exact=False. max_nodes=0 skips the exact search.
    "search_budget": {
        "max_nodes": _env_or_default("HANGAR_MAX_NODES", None, int),
        "max_time_ms": _env_or_default("HANGAR_MAX_TIME_MS", None, int),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🔄 GREEDY SOLVER CONFIGURATION
    # ═══════════════════════════════════════════════════════════════════════
    "greedy_solver": {
        # Safety cap; greedy naturally stops after <= coverable-point rounds
        "max_iterations": 100000,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🌳 BRANCH-AND-BOUND CONFIGURATION
    # ═══════════════════════════════════════════════════════════════════════
    "branch_and_bound": {
        "use_memoization": True,
        "use_lower_bound": True,
        # Progress line every N nodes (0 = off)
        "progress_log_interval": 100000,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🧮 ILP CROSS-VALIDATION
    # ═══════════════════════════════════════════════════════════════════════
    # Solves the same set-cover model with HiGHS (highspy) or PuLP and compares
    # the hangar count. Never authoritative; failures are only logged.
    "ilp_crosscheck": {
        "enabled": _env_bool("HANGAR_CROSS_VALIDATE", False),
        "time_limit_s": _env_or_default("HANGAR_ILP_TIME_LIMIT", 60, int),
        "mip_gap": 0.0,
        # Keep at 1; parallelism lives at the subtree level
        "threads": 1,
        "verbose": 0,
        "mip_heuristic_effort": 0.05,
        # Weight 1 + range_km / 10 per hangar: favour short-range drones on ties
        "prefer_short_range": False,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # ⚡ PARALLEL SUBTREE SEARCH
    # ═══════════════════════════════════════════════════════════════════════
    "parallel": {
        "enabled": _env_bool("HANGAR_PARALLEL", False),
        "max_workers": _env_or_default("HANGAR_MAX_WORKERS", -1, int),
        "optimal_workers_default": 4,
        # Stay sequential when the root has fewer branches than this
        "min_branches_for_parallel": 4,
        "backend": "loky",
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📝 LOGGING
    # ═══════════════════════════════════════════════════════════════════════
    "logging": {
        # Folder for main.log; None = console only
        "log_dir": _env_or_default("HANGAR_LOG_DIR", None),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🗺️ SAMPLE PROBLEM (python -m Hangar_Placement.main)
    # ═══════════════════════════════════════════════════════════════════════
    # Seven inspection points on one east-west line (EPSG:3857 metres).
    # Only p1 and p2 may host a hangar. Ranges are in kilometres.
    "sample_problem": {
        "points": [
            {"id": "p1", "x": 13213977.0, "y": 3016150.0, "site_eligible": True},
            {"id": "p2", "x": 13218977.0, "y": 3016150.0, "site_eligible": True},
            {"id": "p3", "x": 13238977.0, "y": 3016150.0, "site_eligible": False},
            {"id": "p4", "x": 13240977.0, "y": 3016150.0, "site_eligible": False},
            {"id": "p5", "x": 13243977.0, "y": 3016150.0, "site_eligible": False},
            {"id": "p6", "x": 13244977.0, "y": 3016150.0, "site_eligible": False},
            {"id": "p7", "x": 13245977.0, "y": 3016150.0, "site_eligible": False},
        ],
        "drone_models_km": [
            {"name": "DJI-M300-8KM", "range_km": 8.0},
            {"name": "Autel-EVO2-10KM", "range_km": 10.0},
            {"name": "DJI-M30-5KM", "range_km": 5.0},
        ],
    },
}


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 MAIN ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def main_command() -> List[str]:
    """Command that runs the demo as a module from PROJECT_ROOT."""
    return [sys.executable, "-m", "Hangar_Placement.main"]


if __name__ == "__main__":
    # Running config.py directly launches main.py
    import subprocess

    sys.exit(subprocess.call(main_command(), cwd=str(PROJECT_ROOT)))
