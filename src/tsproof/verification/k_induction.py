"""Incremental k-induction (inductive step).

The session holds an unrolling without ``init``: steps ``0..k`` chained by
``k`` transition instances. For induction depth ``k`` a query assumes the
property at steps ``0..k-1`` and asserts its negation at step ``k``.

UNSAT means the inductive step holds (i.e. no counterexample to induction).
SAT means induction fails at this depth (not necessarily that the property
is false). The base case is BMC's job; see :class:`~.bmc.BmcEngine`.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Sequence

from ..solver.base import SolverSession
from ..solver.result import SolverResult
from ..system import System
from ..term import Term, conj, negate
from .bmc import BmcEngine
from .result import REASON_DEPTH_EXHAUSTED, ProofResult, QueryOutcome, inconclusive_reason
from .unroller import place_property, place_trans

logger = logging.getLogger(__name__)


class KInductionEngine:
    """Inductive-step checker over one session, starting at k=1."""

    role = "induction"

    def __init__(self, system: System, session: SolverSession):
        self.system = system
        self.session = session
        self.k = 0
        for v in system.variables:
            session.declare(v, 0)
        self.advance()

    def advance(self) -> int:
        """Move to the next induction depth and return it."""
        k = self.k + 1
        for v in self.system.variables:
            self.session.declare(v, k)
        self.session.assert_term(place_trans(self.system, k - 1))
        self.k = k
        return k

    def check(self, names: Iterable[str], hypotheses: Sequence[Term] = ()) -> Dict[str, QueryOutcome]:
        """Check the inductive step at depth ``k`` for each property.

        Args:
            names: Properties to check
            hypotheses: Step-0 invariants already proved; each one is
                assumed at steps ``0..k-1`` as well
        """
        return {name: self._check_one(name, hypotheses) for name in names}

    def _check_one(self, name: str, hypotheses: Sequence[Term]) -> QueryOutcome:
        k = self.k
        prop = self.system.get_property(name)
        assumed = [prop, *(h for h in hypotheses if h != prop)]

        self.session.push()
        try:
            self.session.assert_term(
                conj(place_property(t, i) for i in range(k) for t in assumed))
            self.session.assert_term(negate(place_property(prop, k)))
            result = self.session.check_sat()
            elapsed = self.session.stats.last_time_ms
            logger.debug("[%s] induction k=%d property=%s hypotheses=%d: %s (%.2fms)",
                         self.session.name, k, name, len(assumed) - 1, result.value, elapsed)

            reason = None
            if result == SolverResult.UNKNOWN:
                reason = inconclusive_reason(self.session.reason_unknown, k)
            return QueryOutcome(result, k, reason=reason, time_ms=elapsed)
        finally:
            self.session.pop()

    def run(self, name: str, base: BmcEngine, max_k: Optional[int] = None,
            hypotheses: Sequence[Term] = ()) -> ProofResult:
        """Run k-induction on one property, sequentially.

        ``base`` checks the base cases; it must sit at depth ``k - 1``.
        BMC at depth ``k - 1`` and the inductive step at ``k`` alternate
        until one of them is conclusive or ``max_k`` is passed.
        """
        self.system.get_property(name)
        if base.depth != self.k - 1:
            raise ValueError(f"base case engine is at depth {base.depth}, "
                             f"expected {self.k - 1}")

        def spent() -> float:
            return base.session.stats.solver_time_ms + self.session.stats.solver_time_ms

        while True:
            b = base.check([name])[name]
            if b.result == SolverResult.SAT:
                return ProofResult.falsified(name, b.trace, solver_name=base.session.name,
                                             time_ms=spent())
            if b.result == SolverResult.UNKNOWN:
                return ProofResult.unknown(name, b.reason, base.depth - 1,
                                           solver_name=base.session.name, time_ms=spent())

            step = self._check_one(name, hypotheses)
            if step.result == SolverResult.UNSAT:
                return ProofResult.proved(name, self.k, solver_name=self.session.name,
                                          time_ms=spent())
            if step.result == SolverResult.UNKNOWN:
                return ProofResult.unknown(name, step.reason, base.depth,
                                           solver_name=self.session.name, time_ms=spent())

            if max_k is not None and self.k >= max_k:
                return ProofResult.unknown(name, REASON_DEPTH_EXHAUSTED, base.depth,
                                           solver_name=self.session.name, time_ms=spent())
            base.advance()
            self.advance()
