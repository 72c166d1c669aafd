"""Proof orchestration: BMC and k-induction advancing together.

Round ``r`` runs, concurrently and on separate sessions, BMC at depth ``r``
and the inductive step at ``k = r + 1``. The two tasks are joined before
any verdict is drawn, so a ``Proved(k)`` verdict always rests on base cases
checked by BMC through depth ``k - 1``.

Within a round, per property:
  1. BMC SAT: falsified (the counterexample wins over induction)
  2. BMC UNKNOWN: unknown
  3. induction UNSAT: proved
  4. induction UNKNOWN: unknown
  5. otherwise the property stays open for the next round
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, List, Optional

from ..config import VerifyConfig
from ..solver.base import SolverSession
from ..solver.result import SolverResult
from ..system import System
from .bmc import BmcEngine
from .k_induction import KInductionEngine
from .result import REASON_CANCELLED, REASON_DEPTH_EXHAUSTED, ProofResult, QueryOutcome
from .trace import validate_trace

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], SolverSession]


class ProofOrchestrator:
    """Runs proof attempts for the properties of one system.

    ``session_factory(role)`` is called once per role (``"bmc"`` and
    ``"induction"``) and attempt; sessions are closed when the attempt ends.
    ``cancel()`` may be called from any thread and stops the running attempt
    and every later one. Running out of the time budget only stops the
    current attempt, so ``run()`` may be called again.
    """

    def __init__(self, system: System, config: Optional[VerifyConfig] = None,
                 session_factory: Optional[SessionFactory] = None):
        self.system = system
        self.config = config or VerifyConfig()
        if session_factory is None:
            from ..checker import make_session_factory
            session_factory = make_session_factory(self.config)
        self.session_factory = session_factory
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._sessions: List[SolverSession] = []

    def cancel(self) -> None:
        """Abandon the running and any later attempt; open properties end up cancelled."""
        self._cancelled.set()
        self._interrupt_sessions()

    def _interrupt_sessions(self) -> None:
        with self._lock:
            sessions = list(self._sessions)
        for s in sessions:
            s.interrupt()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self, names: Optional[Iterable[str]] = None) -> Dict[str, ProofResult]:
        """Verify ``names`` (all properties by default).

        Raises:
            KeyError: If a name is not a property of the system
        """
        names = list(self.system.property_names if names is None else names)
        for name in names:
            self.system.get_property(name)
        if not names:
            return {}

        t0 = time.time()
        deadline = None if self.config.timeout_s is None else t0 + self.config.timeout_s

        bmc_session = self._open("bmc")
        try:
            ind_session = self._open("induction")
            try:
                with ThreadPoolExecutor(max_workers=2, thread_name_prefix="tsproof") as pool:
                    results = self._rounds(names, bmc_session, ind_session, pool, t0, deadline)
            finally:
                ind_session.close()
        finally:
            bmc_session.close()
            with self._lock:
                self._sessions.clear()

        return {name: results[name] for name in names}

    def _open(self, role: str) -> SolverSession:
        session = self.session_factory(role)
        with self._lock:
            self._sessions.append(session)
        if self._cancelled.is_set():
            session.interrupt()
        return session

    def _rounds(self, names: List[str], bmc_session: SolverSession,
                ind_session: SolverSession, pool: ThreadPoolExecutor,
                t0: float, deadline: Optional[float]) -> Dict[str, ProofResult]:
        bmc = BmcEngine(self.system, bmc_session)
        ind = KInductionEngine(self.system, ind_session)
        results: Dict[str, ProofResult] = {}
        proved: List[str] = []
        open_names = list(names)
        depth_bound = self.config.depth_bound
        out_of_time = False

        def elapsed_ms() -> float:
            return (time.time() - t0) * 1000.0

        def finish(result: ProofResult) -> None:
            results[result.property_name] = result
            open_names.remove(result.property_name)
            if result.holds:
                proved.append(result.property_name)
            logger.info("%s", result)

        while open_names:
            r = bmc.depth
            if out_of_time or self._cancelled.is_set():
                for name in list(open_names):
                    finish(ProofResult.unknown(name, REASON_CANCELLED, r - 1,
                                               solver_name=bmc_session.name,
                                               time_ms=elapsed_ms()))
                break

            # Proof order, then name, for a stable conjunction
            lemmas = []
            if self.config.strengthen:
                lemmas = [self.system.get_property(n) for n in proved]

            f_bmc = pool.submit(bmc.check, list(open_names))
            f_ind = pool.submit(ind.check, list(open_names), lemmas)
            remaining = None if deadline is None else max(0.0, deadline - time.time())
            _, pending = wait([f_bmc, f_ind], timeout=remaining)
            if pending:
                logger.debug("Time budget of %ss used up in round %d", self.config.timeout_s, r)
                out_of_time = True
                self._interrupt_sessions()
                wait(pending)

            bmc_out = f_bmc.result()
            ind_out = f_ind.result()
            if out_of_time or self._cancelled.is_set():
                continue

            newly_proved = []
            for name in list(open_names):
                verdict = self._decide(name, bmc_out[name], ind_out[name],
                                       bmc_session, ind_session, elapsed_ms())
                if verdict is None:
                    continue
                if verdict.holds:
                    newly_proved.append(verdict)
                else:
                    finish(verdict)
            for verdict in sorted(newly_proved, key=lambda v: v.property_name):
                finish(verdict)

            if not open_names:
                break
            if depth_bound is not None and r >= depth_bound:
                for name in list(open_names):
                    finish(ProofResult.unknown(name, REASON_DEPTH_EXHAUSTED, r,
                                               solver_name=bmc_session.name,
                                               time_ms=elapsed_ms()))
                break

            bmc.advance()
            ind.advance()

        return results

    def _replay(self, name: str, base: QueryOutcome) -> None:
        if not base.trace.is_exact:
            logger.debug("Counterexample for %s at depth %d has irrational values, not replayed",
                         name, base.depth)
        elif not validate_trace(self.system, base.trace, name):
            logger.warning("Counterexample for %s at depth %d does not replay on %s",
                           name, base.depth, self.system.name)

    def _decide(self, name: str, base: QueryOutcome, step: QueryOutcome,
                bmc_session: SolverSession, ind_session: SolverSession,
                time_ms: float) -> Optional[ProofResult]:
        if base.result == SolverResult.SAT:
            if self.config.validate_traces:
                self._replay(name, base)
            return ProofResult.falsified(name, base.trace, solver_name=bmc_session.name,
                                         time_ms=time_ms)
        if base.result == SolverResult.UNKNOWN:
            return ProofResult.unknown(name, base.reason, base.depth - 1,
                                       solver_name=bmc_session.name, time_ms=time_ms)
        if step.result == SolverResult.UNSAT:
            return ProofResult.proved(name, step.depth, solver_name=ind_session.name,
                                      time_ms=time_ms)
        if step.result == SolverResult.UNKNOWN:
            return ProofResult.unknown(name, step.reason, base.depth,
                                       solver_name=ind_session.name, time_ms=time_ms)
        return None
