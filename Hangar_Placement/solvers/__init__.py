"""
═══════════════════════════════════════════════════════════════════════════════
📦 SOLVERS PACKAGE
═══════════════════════════════════════════════════════════════════════════════

This package contains the hangar placement optimization components:

Modules:
- solver_config: SolverConfig dataclasses and factory functions
- solver_orchestration: Main solve / optimize_hangars entry points
- coverage_matrix: Site × point × model coverage table
- solver_algorithms: Greedy heuristic and solver mode resolution
- branch_and_bound: Exact search seeded by greedy
- result_assembly: Candidate indices → SolveResult
- ilp_crosscheck: Optional highspy / PuLP cross-validation

Public API:
- solve: Main entry point for optimization
- optimize_hangars: Simplified API using SolverConfig
- SolverConfig, GreedyConfig, ILPConfig, etc.: Configuration dataclasses
- create_default_config, create_fast_config, etc.: Factory functions

Usage:
    from Hangar_Placement.solvers import solve
    from Hangar_Placement.solvers import create_default_config, SolverConfig

    result = solve(points, models, SearchBudget(max_time_ms=2000))

═══════════════════════════════════════════════════════════════════════════════
"""

# Configuration dataclasses and factories
from Hangar_Placement.solvers.solver_config import (
    GreedyConfig,
    BranchBoundConfig,
    ILPConfig,
    ParallelConfig,
    SolverConfig,
    create_default_config,
    create_fast_config,
    create_parallel_config,
    create_validated_config,
    config_from_project_config,
)

# Main orchestration entry points
from Hangar_Placement.solvers.solver_orchestration import (
    solve,
    optimize_hangars,
    verify_coverage,
)

# Solver building blocks (typically used internally)
from Hangar_Placement.solvers.coverage_matrix import (
    CoverageMatrix,
    build_coverage_matrix,
)
from Hangar_Placement.solvers.solver_algorithms import (
    resolve_solver_mode,
    solve_greedy,
    greedy_lower_bound,
)
from Hangar_Placement.solvers.branch_and_bound import (
    BranchAndBoundOutcome,
    BranchAndBoundSearch,
    solve_branch_and_bound,
)
from Hangar_Placement.solvers.result_assembly import assemble_result
from Hangar_Placement.solvers.ilp_crosscheck import (
    cross_validate_with_ilp,
    compare_with_ilp,
)

__all__ = [
    # Config classes
    "GreedyConfig",
    "BranchBoundConfig",
    "ILPConfig",
    "ParallelConfig",
    "SolverConfig",
    # Config factories
    "create_default_config",
    "create_fast_config",
    "create_parallel_config",
    "create_validated_config",
    "config_from_project_config",
    # Orchestration
    "solve",
    "optimize_hangars",
    "verify_coverage",
    # Solvers
    "CoverageMatrix",
    "build_coverage_matrix",
    "resolve_solver_mode",
    "solve_greedy",
    "greedy_lower_bound",
    "BranchAndBoundOutcome",
    "BranchAndBoundSearch",
    "solve_branch_and_bound",
    "assemble_result",
    "cross_validate_with_ilp",
    "compare_with_ilp",
]
