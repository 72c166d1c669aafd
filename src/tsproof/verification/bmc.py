"""Incremental bounded model checking (BMC).

The engine keeps one permanent unrolling in its session: ``init`` at step 0
and one transition instance per step. Each query pushes a scope, asserts the
negated property at the last step, checks and pops again, so moving to the
next depth only adds one step.

A query is SAT iff the property can be violated at exactly the current depth.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..solver.base import SolverSession
from ..solver.result import SolverResult
from ..system import System
from ..term import VarRef, negate
from .result import REASON_DEPTH_EXHAUSTED, ProofResult, QueryOutcome, inconclusive_reason
from .trace import CounterexampleTrace
from .unroller import place_init, place_property, place_trans, step_refs

logger = logging.getLogger(__name__)


class BmcEngine:
    """BMC over one session, starting at depth 0."""

    role = "bmc"

    def __init__(self, system: System, session: SolverSession):
        self.system = system
        self.session = session
        self.depth = -1
        self.advance()

    def advance(self) -> int:
        """Extend the unrolling by one step and return the new depth."""
        k = self.depth + 1
        for v in self.system.variables:
            self.session.declare(v, k)
        if k == 0:
            self.session.assert_term(place_init(self.system))
        else:
            self.session.assert_term(place_trans(self.system, k - 1))
        self.depth = k
        return k

    def check(self, names: Iterable[str]) -> Dict[str, QueryOutcome]:
        """Look for a counterexample of length ``depth`` for each property."""
        return {name: self._check_one(name) for name in names}

    def _check_one(self, name: str) -> QueryOutcome:
        k = self.depth
        prop = self.system.get_property(name)
        self.session.push()
        try:
            self.session.assert_term(negate(place_property(prop, k)))
            result = self.session.check_sat()
            elapsed = self.session.stats.last_time_ms
            logger.debug("[%s] bmc depth=%d property=%s: %s (%.2fms)",
                         self.session.name, k, name, result.value, elapsed)

            if result == SolverResult.SAT:
                return QueryOutcome(result, k, trace=self._extract_trace(), time_ms=elapsed)
            if result == SolverResult.UNKNOWN:
                return QueryOutcome(result, k,
                                    reason=inconclusive_reason(self.session.reason_unknown, k),
                                    time_ms=elapsed)
            return QueryOutcome(result, k, time_ms=elapsed)
        finally:
            self.session.pop()

    def _extract_trace(self) -> CounterexampleTrace:
        refs: List[VarRef] = []
        for i in range(self.depth + 1):
            refs.extend(step_refs(self.system, i))
        values = self.session.get_values(refs)

        states = []
        for i in range(self.depth + 1):
            states.append({ref.var.name: values[ref] for ref in step_refs(self.system, i)})
        return CounterexampleTrace(depth=self.depth, states=states, violation_time=self.depth)

    def run(self, name: str, max_depth: Optional[int] = None) -> ProofResult:
        """Run BMC on one property until a verdict or ``max_depth``.

        BMC alone never proves a property: exhausting ``max_depth`` yields
        an UNKNOWN result that still reports the depth reached.
        """
        self.system.get_property(name)
        while True:
            outcome = self._check_one(name)
            if outcome.result == SolverResult.SAT:
                return ProofResult.falsified(name, outcome.trace, solver_name=self.session.name,
                                             time_ms=self.session.stats.solver_time_ms)
            if outcome.result == SolverResult.UNKNOWN:
                return ProofResult.unknown(name, outcome.reason, self.depth - 1,
                                           solver_name=self.session.name,
                                           time_ms=self.session.stats.solver_time_ms)
            if max_depth is not None and self.depth >= max_depth:
                return ProofResult.unknown(name, REASON_DEPTH_EXHAUSTED, self.depth,
                                           solver_name=self.session.name,
                                           time_ms=self.session.stats.solver_time_ms)
            self.advance()
