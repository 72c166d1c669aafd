"""Proof engines: unrolling, BMC, k-induction and their orchestration."""

from .unroller import Unrolling, unroll, place_init, place_trans, place_property, step_refs
from .trace import CounterexampleTrace, validate_trace
from .result import (
    Verdict,
    ProofResult,
    QueryOutcome,
    REASON_CANCELLED,
    REASON_DEPTH_EXHAUSTED,
)
from .bmc import BmcEngine
from .k_induction import KInductionEngine
from .orchestrator import ProofOrchestrator, SessionFactory

__all__ = [
    "Unrolling",
    "unroll",
    "place_init",
    "place_trans",
    "place_property",
    "step_refs",
    "CounterexampleTrace",
    "validate_trace",
    "Verdict",
    "ProofResult",
    "QueryOutcome",
    "REASON_CANCELLED",
    "REASON_DEPTH_EXHAUSTED",
    "BmcEngine",
    "KInductionEngine",
    "ProofOrchestrator",
    "SessionFactory",
]
