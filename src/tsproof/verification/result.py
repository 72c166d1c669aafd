"""
Proof result types.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..solver.result import SolverResult
from .trace import CounterexampleTrace

REASON_CANCELLED = "cancelled"
REASON_DEPTH_EXHAUSTED = "depth_exhausted"


class Verdict(Enum):
    """Final verdict on one property."""
    FALSIFIED = "falsified"
    PROVED = "proved"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProofResult:
    """Result of a verification request on one property.

    Attributes:
        verdict: Falsified, proved or unknown
        property_name: Name of the property
        depth: For FALSIFIED, the length of the counterexample; for PROVED,
            the induction depth k; for UNKNOWN, the deepest BMC depth known
            to be free of counterexamples (-1 if none)
        trace: Counterexample, for FALSIFIED only
        reason: Why the result is UNKNOWN
        solver_name: Name of the solver backend that decided the result
        time_ms: Wall-clock time until the verdict
    """
    verdict: Verdict
    property_name: str
    depth: int
    trace: Optional[CounterexampleTrace] = None
    reason: Optional[str] = None
    solver_name: str = "unknown"
    time_ms: float = 0.0

    @classmethod
    def falsified(cls, name: str, trace: CounterexampleTrace, **kw) -> "ProofResult":
        return cls(Verdict.FALSIFIED, name, trace.depth, trace=trace, **kw)

    @classmethod
    def proved(cls, name: str, depth: int, **kw) -> "ProofResult":
        return cls(Verdict.PROVED, name, depth, **kw)

    @classmethod
    def unknown(cls, name: str, reason: str, depth: int = -1, **kw) -> "ProofResult":
        return cls(Verdict.UNKNOWN, name, depth, reason=reason, **kw)

    @property
    def holds(self) -> bool:
        return self.verdict is Verdict.PROVED

    @property
    def is_falsified(self) -> bool:
        return self.verdict is Verdict.FALSIFIED

    @property
    def is_unknown(self) -> bool:
        return self.verdict is Verdict.UNKNOWN

    @property
    def is_cancelled(self) -> bool:
        return self.verdict is Verdict.UNKNOWN and self.reason == REASON_CANCELLED

    def __str__(self) -> str:
        if self.verdict is Verdict.PROVED:
            return (f"Property {self.property_name} proved by {self.depth}-induction "
                    f"({self.solver_name}, {self.time_ms:.2f}ms)")
        if self.verdict is Verdict.FALSIFIED:
            return (f"Property {self.property_name} falsified at depth {self.depth} "
                    f"({self.solver_name}, {self.time_ms:.2f}ms)")
        return (f"Property {self.property_name} unknown: {self.reason}, "
                f"no counterexample up to depth {self.depth} "
                f"({self.solver_name}, {self.time_ms:.2f}ms)")


@dataclass(frozen=True)
class QueryOutcome:
    """Answer of one engine query on one property at one depth."""
    result: SolverResult
    depth: int
    trace: Optional[CounterexampleTrace] = None
    reason: Optional[str] = None
    time_ms: float = 0.0


def inconclusive_reason(reason_unknown: Optional[str], depth: int) -> str:
    """Reason attached to an UNKNOWN query outcome."""
    if reason_unknown == REASON_CANCELLED:
        return REASON_CANCELLED
    if reason_unknown:
        return f"solver inconclusive at depth {depth}: {reason_unknown}"
    return f"solver inconclusive at depth {depth}"
