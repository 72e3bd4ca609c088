#!/usr/bin/env python3
"""
Hangar Placement - Main Entry Point

Runs the bundled sample problem from CONFIG["sample_problem"] through the
solver and logs the selection and coverage summary. No file output besides
the optional log file.

Usage:
    python -m Hangar_Placement.main
"""

import sys
import logging
import time
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from Hangar_Placement.config import CONFIG
from Hangar_Placement.models.data_models import (
    DroneModel,
    SolveResult,
    points_from_dicts,
)
from Hangar_Placement.solvers.solver_config import config_from_project_config
from Hangar_Placement.solvers.solver_orchestration import optimize_hangars


# ═══════════════════════════════════════════════════════════════════════════
# 📝 LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def setup_logging(log_dir: Optional[str] = None) -> logging.Logger:
    """Configure logging with console and optional file handlers.

    Args:
        log_dir: Folder for a run log (``run_{MMDD}_{HHMM}/main.log``).
            None keeps logging on the console only.

    Returns:
        The "HangarPlacement" logger
    """
    logger = logging.getLogger("HangarPlacement")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()

    if log_dir is not None:
        # Compact timestamp: MMDD_HHMM
        timestamp = datetime.now().strftime("%m%d_%H%M")
        run_log_folder = Path(log_dir) / f"run_{timestamp}"
        run_log_folder.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(run_log_folder / "main.log", encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(fh)

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(ch)

    return logger


# ═══════════════════════════════════════════════════════════════════════════
# 📂 SAMPLE DATA
# ═══════════════════════════════════════════════════════════════════════════


def load_sample_problem(config: Dict[str, Any]):
    """Build points and drone models from the sample_problem CONFIG section."""
    sample = config["sample_problem"]
    points = points_from_dicts(sample["points"])
    models = [
        DroneModel.from_km(m["name"], m["range_km"]) for m in sample["drone_models_km"]
    ]
    return points, models


def log_result(result: SolveResult, logger: logging.Logger) -> None:
    """Log the selected hangars and the coverage partition."""
    logger.info("=" * 60)
    logger.info("📋 RESULT")
    logger.info("=" * 60)
    for hangar in result.selected:
        logger.info(
            f"   🛩️ {hangar.hangar_location_id}: {hangar.drone_model_name} "
            f"({hangar.range_m / 1000:.0f} km) at ({hangar.x:.0f}, {hangar.y:.0f})"
        )
    logger.info(f"   Covered:   {result.covered_ids}")
    logger.info(f"   Uncovered: {result.uncovered_ids}")
    logger.info(
        f"   Exact: {result.exact}, method: {result.method.value}, "
        f"nodes explored: {result.nodes_explored}, pruned: {result.nodes_pruned}"
    )
    logger.info(f"   Coverage: {result.coverage_rate * 100:.1f}%")


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 MAIN WORKFLOW
# ═══════════════════════════════════════════════════════════════════════════


def run_hangar_placement(config: Optional[Dict[str, Any]] = None) -> SolveResult:
    """Run the sample hangar placement workflow."""
    if config is None:
        config = CONFIG

    logger = setup_logging(config.get("logging", {}).get("log_dir"))
    logger.info("=" * 60)
    logger.info("🎯 Hangar Placement")
    logger.info("=" * 60)

    total_start = time.perf_counter()

    points, models = load_sample_problem(config)
    logger.info(f"📂 Sample problem: {len(points)} points, {len(models)} drone models")

    solver_config = config_from_project_config(config, logger=logger)
    result = optimize_hangars(points, models, solver_config)

    log_result(result, logger)
    logger.info(f"⏱️ Total time: {time.perf_counter() - total_start:.2f}s")
    return result


if __name__ == "__main__":
    run_hangar_placement()
