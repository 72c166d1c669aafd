"""
BMC and k-induction verification of transition systems.

This package builds transition systems from scoped scripts and proves or
falsifies their invariants using SMT solvers.
"""

__version__ = "0.1.0"

from .errors import (
    TsProofError,
    BuildError,
    DuplicateDeclaration,
    UnboundVariable,
    UnknownNextReference,
    IllegalNextReference,
    UnknownOperator,
    UnknownTypeName,
    TermTypeError,
    InvalidSystem,
    ProtocolError,
    SolverError,
    EvaluationError,
)
from .term import AlgebraicValue, Type, Variable, Op
from .system import System, BuildResult, SystemBuilder, build_system, make_system
from .solver import SolverResult, SolverSession, Z3Session, Smt2ProcessSession
from .verification import (
    Verdict,
    ProofResult,
    CounterexampleTrace,
    ProofOrchestrator,
    REASON_CANCELLED,
    REASON_DEPTH_EXHAUSTED,
)
from .config import VerifyConfig
from .checker import verify, verify_all, make_session_factory

__all__ = [
    "TsProofError",
    "BuildError",
    "DuplicateDeclaration",
    "UnboundVariable",
    "UnknownNextReference",
    "IllegalNextReference",
    "UnknownOperator",
    "UnknownTypeName",
    "TermTypeError",
    "InvalidSystem",
    "ProtocolError",
    "SolverError",
    "EvaluationError",
    "AlgebraicValue",
    "Type",
    "Variable",
    "Op",
    "System",
    "BuildResult",
    "SystemBuilder",
    "build_system",
    "make_system",
    "SolverResult",
    "SolverSession",
    "Z3Session",
    "Smt2ProcessSession",
    "Verdict",
    "ProofResult",
    "CounterexampleTrace",
    "ProofOrchestrator",
    "REASON_CANCELLED",
    "REASON_DEPTH_EXHAUSTED",
    "VerifyConfig",
    "verify",
    "verify_all",
    "make_session_factory",
]
