"""
Z3 session backend implementation.
"""
import logging
from typing import Dict, List, Optional

import z3

from ..term import Term, Value, Variable, VarRef
from ..translator.term_to_z3 import TermToZ3Translator
from .base import BaseSession
from .result import SolverResult

logger = logging.getLogger(__name__)


class Z3Session(BaseSession):
    """In-process Z3 session.

    Each session owns a private Z3 context, so sessions can be driven from
    different threads without sharing solver state.
    """

    name = "z3"

    def __init__(self, timeout_ms: Optional[int] = None):
        """Initialize Z3 solver instance.

        Args:
            timeout_ms: Per-check timeout; a check that runs out answers UNKNOWN
        """
        super().__init__()
        self.ctx = z3.Context()
        self.solver = z3.Solver(ctx=self.ctx)
        if timeout_ms:
            self.solver.set("timeout", int(timeout_ms))
        self.translator = TermToZ3Translator(self.ctx)

    def _declare(self, var: Variable, step: int) -> None:
        self.translator.var(VarRef(var, step))

    def _assert(self, term: Term) -> None:
        self.solver.add(self.translator.translate(term))

    def _push(self) -> None:
        self.solver.push()

    def _pop(self) -> None:
        self.solver.pop()

    def _check(self) -> SolverResult:
        result = self.solver.check()
        if result == z3.sat:
            return SolverResult.SAT
        elif result == z3.unsat:
            return SolverResult.UNSAT
        self.reason_unknown = self.solver.reason_unknown()
        logger.debug("z3 answered unknown: %s", self.reason_unknown)
        return SolverResult.UNKNOWN

    def _values(self, refs: List[VarRef]) -> Dict[VarRef, Value]:
        model = self.solver.model()
        types = self.translator.types
        return {
            ref: types.to_python(model.eval(self.translator.var(ref), model_completion=True))
            for ref in refs
        }

    def _interrupt(self) -> None:
        self.ctx.interrupt()

    def _close(self) -> None:
        self.solver.reset()
