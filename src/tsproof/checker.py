"""
Main verification API for transition systems.

Provides high-level functions for proving or falsifying the properties of a
system. Calls are synchronous; the BMC and induction sessions run
concurrently underneath.
"""
from typing import Dict, Iterable, Optional, Union

from .config import VerifyConfig
from .errors import SolverError
from .solver.base import SolverSession
from .solver.smt2_solver import Smt2ProcessSession
from .solver.solver_runner import AUTO_SOLVER, pick_solver, resolve_solver
from .solver.z3_solver import Z3Session
from .system import System, ast, build_system
from .verification import ProofOrchestrator, ProofResult, SessionFactory


def make_session_factory(config: VerifyConfig) -> SessionFactory:
    """Map ``config.solver`` to a session constructor.

    ``"z3"`` selects the in-process bindings and ``"auto"`` the first
    external SMT-LIBv2 solver found on this system. Any other value names an
    external solver (a known name or a path).

    Raises:
        SolverError: If ``"auto"`` finds no solver
    """
    if config.solver == "z3":
        def z3_session(role: str) -> SolverSession:
            return Z3Session(timeout_ms=config.solver_timeout_ms)
        return z3_session

    if config.solver == AUTO_SOLVER:
        spec = pick_solver()
        if spec is None:
            raise SolverError("no SMT-LIBv2 solver found (tried z3, cvc5, yices-smt2)")
    else:
        spec = resolve_solver(config.solver)

    def process_session(role: str) -> SolverSession:
        return Smt2ProcessSession(spec, timeout_ms=config.solver_timeout_ms)
    return process_session


def verify(system: Union[System, ast.Script],
           property_name: str,
           depth_bound: Optional[int] = None,
           *,
           config: Optional[VerifyConfig] = None,
           session_factory: Optional[SessionFactory] = None) -> ProofResult:
    """Prove or falsify one property.

    Args:
        system: System, or a script AST to build one from
        property_name: Property to check
        depth_bound: Last BMC depth to explore; overrides ``config``
        config: Verification settings (default: from the environment)
        session_factory: Session constructor per role (default: per ``config``)

    Returns:
        ProofResult: falsified with a counterexample, proved with the
        induction depth, or unknown with a reason and the depth reached

    Raises:
        KeyError: If the system has no property ``property_name``

    Example:
        >>> result = verify(system, "nonneg", depth_bound=10)
        >>> if result.is_falsified:
        ...     print(result.trace.format_trace())
    """
    return verify_all(system, depth_bound, config=config, session_factory=session_factory,
                      names=[property_name])[property_name]


def verify_all(system: Union[System, ast.Script],
               depth_bound: Optional[int] = None,
               *,
               config: Optional[VerifyConfig] = None,
               session_factory: Optional[SessionFactory] = None,
               names: Optional[Iterable[str]] = None) -> Dict[str, ProofResult]:
    """Verify every property of ``system`` (or those in ``names``).

    Properties are tracked independently: one that is decided drops out of
    later rounds, and proved ones strengthen the induction of the others.
    """
    if isinstance(system, ast.Script):
        system = build_system(system).system
    config = config or VerifyConfig.from_env()
    if depth_bound is not None:
        config = config.with_overrides(depth_bound=depth_bound)

    orchestrator = ProofOrchestrator(system, config, session_factory)
    return orchestrator.run(names)
