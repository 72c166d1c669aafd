"""Locate external SMT solvers that speak incremental SMT-LIBv2 on stdin.

Solvers are expected to read commands from stdin and answer each
``(check-sat)`` with one of: sat/unsat/unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple
import os
import shutil


@dataclass(frozen=True)
class SolverSpec:
    """Describes how to invoke an external SMT solver in incremental mode."""

    name: str
    argv: Tuple[str, ...]


SOLVER_ENV_VAR = "TSPROOF_SMT_SOLVER"

# Solver name that asks for the first available external solver
AUTO_SOLVER = "auto"

_KNOWN_SOLVERS = {
    "z3": SolverSpec("z3", ("z3", "-in", "-smt2")),
    "cvc5": SolverSpec("cvc5", ("cvc5", "--lang", "smt2", "--incremental", "--produce-models")),
    "cvc4": SolverSpec("cvc4", ("cvc4", "--lang", "smt2", "--incremental", "--produce-models")),
    "yices": SolverSpec("yices", ("yices-smt2", "--incremental")),
    "yices-smt2": SolverSpec("yices-smt2", ("yices-smt2", "--incremental")),
}


def resolve_solver(name_or_path: str) -> SolverSpec:
    """Resolve a solver name to an invocation spec.

    Unknown names are treated as a path to an executable that reads
    SMT-LIBv2 from stdin with no extra arguments.
    """
    if name_or_path in _KNOWN_SOLVERS:
        return _KNOWN_SOLVERS[name_or_path]

    p = Path(name_or_path)
    return SolverSpec(p.name or str(p), (str(p),))


def timeout_args(spec: SolverSpec, timeout_ms: int) -> Optional[Tuple[str, ...]]:
    """Command-line options bounding each ``(check-sat)`` by ``timeout_ms``.

    Returns an empty tuple for z3, which takes the limit as an option over
    the wire, and None for solvers without a known per-query limit.
    """
    exe = Path(spec.argv[0]).name
    if exe == "z3":
        return ()
    if exe in ("cvc5", "cvc4"):
        return (f"--tlimit-per={int(timeout_ms)}",)
    if exe == "yices-smt2":
        # Whole seconds, rounded up
        return (f"--timeout={max(1, -(-int(timeout_ms) // 1000))}",)
    return None


def is_solver_available(name_or_path: str) -> bool:
    """Return True if the solver executable appears runnable on this system."""
    spec = resolve_solver(name_or_path)
    exe = spec.argv[0]

    # Explicit path
    if os.path.sep in exe or (os.path.altsep and os.path.altsep in exe):
        return os.path.exists(exe) and os.access(exe, os.X_OK)

    return shutil.which(exe) is not None


def pick_solver(preferred: Sequence[str] = ("z3", "cvc5", "yices-smt2")) -> Optional[SolverSpec]:
    """Pick the first available solver from a preference list.

    Users can override by setting $TSPROOF_SMT_SOLVER.
    """
    env = os.environ.get(SOLVER_ENV_VAR)
    if env and env != AUTO_SOLVER and is_solver_available(env):
        return resolve_solver(env)

    for n in preferred:
        if is_solver_available(n):
            return resolve_solver(n)

    return None
