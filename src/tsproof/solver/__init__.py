"""Solver session layer.

Sessions are incremental conversations with a satisfiability oracle. Two
backends ship: in-process Z3 and an external SMT-LIBv2 process.
"""

from .base import SolverSession, BaseSession, step_symbol
from .result import SolverResult, SolverStats
from .z3_solver import Z3Session
from .smt2_solver import Smt2ProcessSession
from .solver_runner import SolverSpec, resolve_solver, is_solver_available, pick_solver, timeout_args

__all__ = [
    "SolverSession",
    "BaseSession",
    "step_symbol",
    "SolverResult",
    "SolverStats",
    "Z3Session",
    "Smt2ProcessSession",
    "SolverSpec",
    "resolve_solver",
    "is_solver_available",
    "pick_solver",
    "timeout_args",
]
