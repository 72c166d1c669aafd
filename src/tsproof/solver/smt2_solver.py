"""Sessions backed by an external SMT solver process.

The solver runs in incremental mode and receives SMT-LIBv2 commands on
stdin. Only ``check-sat``, ``get-value`` and ``get-info`` produce output,
since ``:print-success`` is turned off.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Dict, List, Optional

from ..errors import SolverError
from ..term import Term, Value, Variable, VarRef
from ..translator.term_to_smt2 import assert_smt2, declare_smt2, get_value_smt2
from .base import BaseSession
from .result import SolverResult
from .sexpr import is_complete, parse_one, parse_value
from .solver_runner import SolverSpec, resolve_solver, timeout_args

logger = logging.getLogger(__name__)


class Smt2ProcessSession(BaseSession):
    """Session talking SMT-LIBv2 to a solver subprocess.

    Interrupting the session kills the process; the in-flight check then
    answers UNKNOWN and the session stays unusable for further checks.
    """

    def __init__(self, solver: "SolverSpec | str", timeout_ms: Optional[int] = None):
        super().__init__()
        self.spec = resolve_solver(solver) if isinstance(solver, str) else solver
        self.name = self.spec.name
        self.argv = list(self.spec.argv)
        limit = timeout_args(self.spec, timeout_ms) if timeout_ms else ()
        if limit is None:
            logger.warning("Solver %s has no known per-query time limit; ignoring timeout of %d ms",
                           self.name, timeout_ms)
        else:
            self.argv.extend(limit)
        logger.debug("Starting solver process: %s", " ".join(self.argv))
        try:
            self._proc = subprocess.Popen(
                self.argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise SolverError(f"cannot start solver '{self.spec.name}': {e}") from e

        self._send("(set-option :print-success false)")
        self._send("(set-option :produce-models true)")
        if timeout_ms and limit == ():
            self._send(f"(set-option :timeout {int(timeout_ms)})")

    # Wire

    def _send(self, command: str) -> None:
        logger.debug("[%s] > %s", self.name, command)
        try:
            self._proc.stdin.write(command + "\n")
            self._proc.stdin.flush()
        except OSError as e:
            if self._interrupted:
                return
            raise SolverError(f"{self.name} stopped accepting commands: {e}") from e

    def _read_line(self) -> Optional[str]:
        """Next non-empty output line, None on end of output."""
        while True:
            line = self._proc.stdout.readline()
            if not line:
                return None
            line = line.strip()
            if line and not line.startswith(";"):
                logger.debug("[%s] < %s", self.name, line)
                return line

    def _read_response(self) -> Optional[str]:
        """Next complete S-expression response, None on end of output."""
        text = self._read_line()
        if text is None:
            return None
        while not is_complete(text):
            more = self._read_line()
            if more is None:
                return None
            text += " " + more
        if text.startswith("(error"):
            raise SolverError(f"{self.name} reported {text}")
        return text

    def _lost(self) -> SolverError:
        code = self._proc.poll()
        return SolverError(f"{self.name} exited unexpectedly (code {code})")

    # Hooks

    def _declare(self, var: Variable, step: int) -> None:
        self._send(declare_smt2(var, step))

    def _assert(self, term: Term) -> None:
        self._send(assert_smt2(term))

    def _push(self) -> None:
        self._send("(push 1)")

    def _pop(self) -> None:
        self._send("(pop 1)")

    def _check(self) -> SolverResult:
        self._send("(check-sat)")
        line = self._read_response()
        if line is None:
            if self._interrupted:
                return SolverResult.UNKNOWN
            raise self._lost()
        result = _parse_solver_result(line)
        if result is None:
            raise SolverError(f"unexpected answer to check-sat from {self.name}: {line}")
        if result == SolverResult.UNKNOWN:
            self.reason_unknown = self._reason_unknown()
        return result

    def _reason_unknown(self) -> str:
        self._send("(get-info :reason-unknown)")
        text = self._read_response()
        if text is None:
            return "cancelled" if self._interrupted else "unknown"
        info = parse_one(text)
        # (:reason-unknown "timeout")
        if isinstance(info, list) and len(info) == 2 and isinstance(info[1], str):
            return info[1]
        return text

    def _values(self, refs: List[VarRef]) -> Dict[VarRef, Value]:
        if not refs:
            return {}
        self._send(get_value_smt2(refs))
        text = self._read_response()
        if text is None:
            raise self._lost()
        pairs = parse_one(text)
        if not isinstance(pairs, list) or len(pairs) != len(refs):
            raise SolverError(f"unexpected get-value answer from {self.name}: {text}")

        # Answers come back in request order
        values = {}
        for ref, pair in zip(refs, pairs):
            if not isinstance(pair, list) or len(pair) != 2:
                raise SolverError(f"unexpected get-value entry from {self.name}: {pair!r}")
            values[ref] = parse_value(pair[1], ref.type)
        return values

    def _interrupt(self) -> None:
        if self._proc.poll() is None:
            logger.debug("Killing %s (pid %d)", self.name, self._proc.pid)
            self._proc.kill()

    def _close(self) -> None:
        if self._proc.poll() is None:
            self._send("(exit)")
        try:
            self._proc.stdin.close()
        except OSError:
            pass
        try:
            self._proc.wait(timeout=1.0)
        except subprocess.TimeoutExpired:
            self._proc.kill()
            self._proc.wait()
        self._proc.stdout.close()


def _parse_solver_result(line: str) -> Optional[SolverResult]:
    s = line.strip()
    if s == "sat":
        return SolverResult.SAT
    if s == "unsat":
        return SolverResult.UNSAT
    if s == "unknown":
        return SolverResult.UNKNOWN
    return None
