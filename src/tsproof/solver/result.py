"""
Solver result types.
"""
from dataclasses import dataclass
from enum import Enum


class SolverResult(Enum):
    """Result from SMT solver check."""
    SAT = "sat"
    UNSAT = "unsat"
    UNKNOWN = "unknown"


@dataclass
class SolverStats:
    """Per-session solver statistics.

    Attributes:
        checks: Number of check-sat calls answered
        solver_time_ms: Total time spent inside check-sat
        last_time_ms: Time spent in the most recent check-sat
    """
    checks: int = 0
    solver_time_ms: float = 0.0
    last_time_ms: float = 0.0

    def record(self, elapsed_ms: float) -> None:
        self.checks += 1
        self.last_time_ms = elapsed_ms
        self.solver_time_ms += elapsed_ms

    def __str__(self) -> str:
        return f"{self.checks} check(s), {self.solver_time_ms:.2f}ms"
