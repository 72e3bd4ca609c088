"""
═══════════════════════════════════════════════════════════════════════════════
📋 SOLVER CONFIGURATION MODULE
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Purpose: Centralized configuration dataclasses for the hangar placement solver.
         Groups solver knobs into structured, validated config objects.

Key Interactions:
- solver_orchestration.py: Uses SolverConfig for optimize_hangars / solve
- solver_algorithms.py: Uses GreedyConfig for solve_greedy
- branch_and_bound.py: Uses BranchBoundConfig for solve_branch_and_bound
- ilp_crosscheck.py: Uses ILPConfig for cross_validate_with_ilp
- parallel/subtree_orchestrator.py: Uses ParallelConfig

Design Philosophy:
- Immutable configs (frozen=True) prevent accidental modification
- Defaults give an exact, single-process solve with no budget
- Grouped by concern: Greedy, Branch-and-Bound, ILP, Parallel

NAVIGATION GUIDE
----------------
# ═════ 1. GREEDY SOLVER CONFIGURATION
# ═════ 2. BRANCH-AND-BOUND CONFIGURATION
# ═════ 3. ILP CROSS-VALIDATION CONFIGURATION
# ═════ 4. PARALLEL SUBTREE CONFIGURATION
# ═════ 5. MAIN SOLVER CONFIGURATION (FACADE)
# ═════ 6. FACTORY FUNCTIONS

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from typing import Optional, Any, Dict
import logging

from Hangar_Placement.models.data_models import SearchBudget


VALID_SOLVER_MODES = ("exact", "greedy")


# ═══════════════════════════════════════════════════════════════════════════════
# 🔄 1. GREEDY SOLVER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GreedyConfig:
    """
    Configuration for greedy cover heuristic.

    Greedy is fast but gives no optimality guarantee. Its result seeds the
    branch-and-bound upper bound and is the fallback when the exact search
    runs out of budget.

    Attributes:
        max_iterations: Safety cap on rounds. Each round places one hangar and
            covers at least one new point, so the natural bound is the number
            of coverable points. Default 100000.
    """

    max_iterations: int = 100000

    def __post_init__(self) -> None:
        """Validate greedy configuration."""
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")


# ═══════════════════════════════════════════════════════════════════════════════
# 🌳 2. BRANCH-AND-BOUND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BranchBoundConfig:
    """
    Configuration for the exact branch-and-bound search.

    Attributes:
        use_memoization: Skip states whose covered-bitset was already expanded
            with an equal or smaller hangar count. Default True.
        use_lower_bound: Apply the ceil(remaining / max marginal) optimistic
            bound. Default True.
        progress_log_interval: Log a progress line every N explored nodes
            (0 disables progress lines). Default 100000.
    """

    use_memoization: bool = True
    use_lower_bound: bool = True
    progress_log_interval: int = 100000

    def __post_init__(self) -> None:
        """Validate branch-and-bound configuration."""
        if self.progress_log_interval < 0:
            raise ValueError(
                f"progress_log_interval must be >= 0, got {self.progress_log_interval}"
            )


# ═══════════════════════════════════════════════════════════════════════════════
# 🧮 3. ILP CROSS-VALIDATION CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ILPConfig:
    """
    Configuration for the optional Integer Linear Programming cross-check.

    The ILP is never authoritative: it only confirms (or disputes) the
    branch-and-bound hangar count on instances where a MIP solver is
    installed. HiGHS (highspy) is preferred, PuLP is the fallback.

    Attributes:
        enabled: Run the cross-check after the exact search. Default False.
        time_limit: Maximum solve time in seconds. Default 60s.
        mip_gap: MIP gap tolerance. Default 0.0 (prove optimality).
        threads: Solver threads. Keep at 1; parallelize at higher level.
        verbose: Solver verbosity (0=silent, 1+=solver output).
        mip_heuristic_effort: Fraction of solve time for primal heuristics.
        prefer_short_range: Add a small per-model weight (1 + range_km / 10)
            so equal-count solutions favour shorter-range drones. Default False.
    """

    enabled: bool = False
    time_limit: int = 60
    mip_gap: float = 0.0
    threads: int = 1
    verbose: int = 0
    mip_heuristic_effort: float = 0.05
    prefer_short_range: bool = False

    def __post_init__(self) -> None:
        """Validate ILP configuration."""
        if self.time_limit <= 0:
            raise ValueError(f"time_limit must be > 0, got {self.time_limit}")
        if not 0 <= self.mip_gap <= 1:
            raise ValueError(f"mip_gap must be in [0, 1], got {self.mip_gap}")
        if self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")
        if not 0 <= self.mip_heuristic_effort <= 1:
            raise ValueError(
                f"mip_heuristic_effort must be in [0, 1], got {self.mip_heuristic_effort}"
            )


# ═══════════════════════════════════════════════════════════════════════════════
# ⚡ 4. PARALLEL SUBTREE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ParallelConfig:
    """
    Configuration for top-level subtree parallelism.

    Each first-level branch of the exact search is an independent subtree
    and can run in its own joblib worker.

    Attributes:
        enabled: Master toggle. Default False (single-process search).
        max_workers: Worker count, -1 = auto-detect from CPU. Default -1.
        optimal_workers_default: Cap used when auto-detecting. Default 4.
        min_branches_for_parallel: Root branching factor below which the
            search stays sequential. Default 4.
        backend: joblib backend. Default "loky".
    """

    enabled: bool = False
    max_workers: int = -1
    optimal_workers_default: int = 4
    min_branches_for_parallel: int = 4
    backend: str = "loky"

    def __post_init__(self) -> None:
        """Validate parallel configuration."""
        if self.max_workers == 0 or self.max_workers < -1:
            raise ValueError(
                f"max_workers must be -1 or >= 1, got {self.max_workers}"
            )
        if self.optimal_workers_default < 1:
            raise ValueError(
                f"optimal_workers_default must be >= 1, got {self.optimal_workers_default}"
            )
        if self.min_branches_for_parallel < 1:
            raise ValueError(
                f"min_branches_for_parallel must be >= 1, got {self.min_branches_for_parallel}"
            )
        if self.backend not in ("loky", "threading", "multiprocessing"):
            raise ValueError(
                f"backend must be 'loky', 'threading' or 'multiprocessing', got {self.backend}"
            )


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 5. MAIN SOLVER CONFIGURATION (FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SolverConfig:
    """
    Main configuration facade for optimize_hangars.

    Attributes:
        solver_mode: "exact" (greedy seed + branch-and-bound, default) or
            "greedy" (greedy only).
        budget: Search budget for the exact search.
        greedy: Greedy heuristic configuration.
        branch_bound: Branch-and-bound configuration.
        ilp: ILP cross-validation configuration.
        parallel: Top-level subtree parallelism configuration.
        verify_geometry: Re-check the final coverage with shapely disks and
            attach the verification stats to the result. Default False.
        logger: Optional logger instance.

    Example:
        >>> config = create_default_config()
        >>> result = optimize_hangars(points, models, config)

        >>> fast = create_fast_config()
        >>> result = optimize_hangars(points, models, fast)
    """

    solver_mode: str = "exact"
    budget: SearchBudget = field(default_factory=SearchBudget)
    greedy: GreedyConfig = field(default_factory=GreedyConfig)
    branch_bound: BranchBoundConfig = field(default_factory=BranchBoundConfig)
    ilp: ILPConfig = field(default_factory=ILPConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    verify_geometry: bool = False
    logger: Optional[logging.Logger] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate main configuration."""
        if self.solver_mode not in VALID_SOLVER_MODES:
            raise ValueError(
                f"solver_mode must be one of {VALID_SOLVER_MODES}, got {self.solver_mode}"
            )

    def with_modifications(
        self,
        budget: Optional[SearchBudget] = None,
        solver_mode: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "SolverConfig":
        """
        Create a modified copy of this config.

        Since SolverConfig is frozen (immutable), this method creates a new
        instance with the changes and keeps every other setting.

        Args:
            budget: Override budget if provided
            solver_mode: Override solver_mode if provided
            logger: Override logger if provided

        Returns:
            New SolverConfig with specified modifications
        """
        return SolverConfig(
            solver_mode=solver_mode if solver_mode is not None else self.solver_mode,
            budget=budget if budget is not None else self.budget,
            greedy=self.greedy,
            branch_bound=self.branch_bound,
            ilp=self.ilp,
            parallel=self.parallel,
            verify_geometry=self.verify_geometry,
            logger=logger if logger is not None else self.logger,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🏭 6. FACTORY FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════


def create_default_config(
    max_nodes: Optional[int] = None,
    max_time_ms: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> SolverConfig:
    """
    Create default solver configuration: greedy seed + exact search.

    Args:
        max_nodes: Optional node budget for the exact search.
        max_time_ms: Optional wall-clock budget in milliseconds.
        logger: Optional logger instance.

    Returns:
        SolverConfig with sensible defaults.
    """
    return SolverConfig(
        solver_mode="exact",
        budget=SearchBudget(max_nodes=max_nodes, max_time_ms=max_time_ms),
        logger=logger,
    )


def create_fast_config(
    logger: Optional[logging.Logger] = None,
) -> SolverConfig:
    """
    Create fast configuration: greedy heuristic only.

    Args:
        logger: Optional logger instance.

    Returns:
        SolverConfig optimized for speed.
    """
    return SolverConfig(
        solver_mode="greedy",
        logger=logger,
    )


def create_parallel_config(
    max_workers: int = -1,
    max_nodes: Optional[int] = None,
    max_time_ms: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> SolverConfig:
    """
    Create configuration that spreads top-level subtrees across workers.

    Args:
        max_workers: Worker count (-1 = auto-detect).
        max_nodes: Optional node budget (split across subtrees).
        max_time_ms: Optional wall-clock budget in milliseconds.
        logger: Optional logger instance.

    Returns:
        SolverConfig with parallel subtree search enabled.
    """
    return SolverConfig(
        solver_mode="exact",
        budget=SearchBudget(max_nodes=max_nodes, max_time_ms=max_time_ms),
        parallel=ParallelConfig(enabled=True, max_workers=max_workers),
        logger=logger,
    )


def create_validated_config(
    time_limit: int = 60,
    verbose: int = 0,
    logger: Optional[logging.Logger] = None,
) -> SolverConfig:
    """
    Create configuration that cross-checks the exact result with an ILP
    solver and verifies coverage geometrically.

    Args:
        time_limit: Maximum ILP solve time. Default 60s.
        verbose: ILP solver verbosity level. Default 0.
        logger: Optional logger instance.

    Returns:
        SolverConfig with ILP cross-validation and geometric verification.
    """
    return SolverConfig(
        solver_mode="exact",
        ilp=ILPConfig(enabled=True, time_limit=time_limit, verbose=verbose),
        verify_geometry=True,
        logger=logger,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# 🔄 PROJECT CONFIG CONVERSION
# ═══════════════════════════════════════════════════════════════════════════════


def config_from_project_config(
    config_dict: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
) -> SolverConfig:
    """
    Create SolverConfig from project-level CONFIG dictionary.

    This is the RECOMMENDED way to create configuration - it ensures all
    project settings (including environment variable overrides) are honored.

    Args:
        config_dict: The project CONFIG dictionary from config.py.
        logger: Optional logger instance.

    Returns:
        SolverConfig populated from project CONFIG settings.

    Example:
        >>> from Hangar_Placement.config import CONFIG
        >>> config = config_from_project_config(CONFIG)
        >>> result = optimize_hangars(points, models, config)
    """
    opt_config = config_dict.get("optimization", {})
    budget_config = config_dict.get("search_budget", {})
    greedy_config = config_dict.get("greedy_solver", {})
    bnb_config = config_dict.get("branch_and_bound", {})
    ilp_config = config_dict.get("ilp_crosscheck", {})
    parallel_config = config_dict.get("parallel", {})

    return SolverConfig(
        solver_mode=str(opt_config.get("solver_mode", "exact")).lower().strip(),
        budget=SearchBudget(
            max_nodes=budget_config.get("max_nodes"),
            max_time_ms=budget_config.get("max_time_ms"),
        ),
        greedy=GreedyConfig(
            max_iterations=greedy_config.get("max_iterations", 100000),
        ),
        branch_bound=BranchBoundConfig(
            use_memoization=bnb_config.get("use_memoization", True),
            use_lower_bound=bnb_config.get("use_lower_bound", True),
            progress_log_interval=bnb_config.get("progress_log_interval", 100000),
        ),
        ilp=ILPConfig(
            enabled=ilp_config.get("enabled", False),
            time_limit=ilp_config.get("time_limit_s", 60),
            mip_gap=ilp_config.get("mip_gap", 0.0),
            threads=ilp_config.get("threads", 1),
            verbose=ilp_config.get("verbose", 0),
            mip_heuristic_effort=ilp_config.get("mip_heuristic_effort", 0.05),
            prefer_short_range=ilp_config.get("prefer_short_range", False),
        ),
        parallel=ParallelConfig(
            enabled=parallel_config.get("enabled", False),
            max_workers=parallel_config.get("max_workers", -1),
            optimal_workers_default=parallel_config.get("optimal_workers_default", 4),
            min_branches_for_parallel=parallel_config.get(
                "min_branches_for_parallel", 4
            ),
            backend=parallel_config.get("backend", "loky"),
        ),
        verify_geometry=opt_config.get("verify_geometry", False),
        logger=logger,
    )
