"""
Abstract base interface for solver sessions.

A session is an incremental, stateful conversation with a satisfiability
oracle. Terms handed to a session are placed on absolute time steps: a
reference's offset is its step, and step variable ``x`` at step ``k`` is
declared with ``declare(x, k)``.
"""
import time
from typing import Dict, Iterable, List, Optional, Protocol, Set, Tuple

from ..errors import ProtocolError
from ..term import Term, Type, Value, Variable, VarRef, free_refs
from .result import SolverResult, SolverStats

StepVar = Tuple[Variable, int]


class SolverSession(Protocol):
    """Protocol defining the interface for solver sessions.

    This allows pluggable oracle implementations (in-process Z3, external
    SMT-LIB processes, scripted test doubles) while the engines only depend
    on these operations.
    """

    name: str
    stats: SolverStats
    reason_unknown: Optional[str]

    def declare(self, var: Variable, step: int = 0) -> None:
        """Declare step variable ``var@step`` in the current scope."""
        ...

    def assert_term(self, term: Term) -> None:
        """Assert a bool term whose references are declared step variables."""
        ...

    def push(self) -> None:
        """Open a new assertion scope."""
        ...

    def pop(self) -> None:
        """Discard every declaration and assertion since the matching push."""
        ...

    def check_sat(self) -> SolverResult:
        """Check satisfiability of the current assertions. May block."""
        ...

    def get_values(self, refs: Iterable[VarRef]) -> Dict[VarRef, Value]:
        """Values of step variables in the model of the last SAT check."""
        ...

    def interrupt(self) -> None:
        """Abort an in-flight check; subsequent checks answer UNKNOWN."""
        ...

    def close(self) -> None:
        """Tear down the session."""
        ...


class BaseSession:
    """Protocol bookkeeping shared by all session implementations.

    Subclasses implement the ``_declare``, ``_assert``, ``_push``, ``_pop``,
    ``_check``, ``_values``, ``_interrupt`` and ``_close`` hooks; this class
    enforces the protocol around them.
    """

    name = "base"

    def __init__(self):
        self._scopes: List[Set[StepVar]] = [set()]
        self._has_model = False
        self._closed = False
        self._interrupted = False
        self.stats = SolverStats()
        self.reason_unknown: Optional[str] = None

    # Protocol

    def declare(self, var: Variable, step: int = 0) -> None:
        self._check_open()
        if step < 0:
            raise ProtocolError(f"cannot declare '{var.name}' at negative step {step}")
        if self.is_declared(var, step):
            raise ProtocolError(f"'{var.name}@{step}' is already declared")
        self._scopes[-1].add((var, step))
        self._has_model = False
        self._declare(var, step)

    def is_declared(self, var: Variable, step: int) -> bool:
        return any((var, step) in scope for scope in self._scopes)

    def assert_term(self, term: Term) -> None:
        self._check_open()
        if term.type is not Type.BOOL:
            raise ProtocolError(f"cannot assert a term of type '{term.type}': {term}")
        for ref in free_refs(term):
            if not self.is_declared(ref.var, ref.offset):
                raise ProtocolError(f"assertion references undeclared '{ref}'")
        self._has_model = False
        self._assert(term)

    def push(self) -> None:
        self._check_open()
        self._scopes.append(set())
        self._has_model = False
        self._push()

    def pop(self) -> None:
        self._check_open()
        if len(self._scopes) == 1:
            raise ProtocolError("pop without matching push")
        self._scopes.pop()
        self._has_model = False
        self._pop()

    @property
    def scope_depth(self) -> int:
        return len(self._scopes) - 1

    def check_sat(self) -> SolverResult:
        self._check_open()
        self._has_model = False
        if self._interrupted:
            self.reason_unknown = "cancelled"
            return SolverResult.UNKNOWN

        self.reason_unknown = None
        start_time = time.time()
        result = self._check()
        elapsed_ms = (time.time() - start_time) * 1000
        self.stats.record(elapsed_ms)

        if self._interrupted:
            self.reason_unknown = "cancelled"
            return SolverResult.UNKNOWN
        if result == SolverResult.SAT:
            self._has_model = True
        return result

    def get_values(self, refs: Iterable[VarRef]) -> Dict[VarRef, Value]:
        self._check_open()
        if not self._has_model:
            raise ProtocolError("get_values is only valid right after a SAT check")
        refs = list(refs)
        for ref in refs:
            if not self.is_declared(ref.var, ref.offset):
                raise ProtocolError(f"cannot get the value of undeclared '{ref}'")
        return self._values(refs)

    def interrupt(self) -> None:
        self._interrupted = True
        if not self._closed:
            self._interrupt()

    @property
    def interrupted(self) -> bool:
        return self._interrupted

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise ProtocolError(f"{self.name} session is closed")

    # Hooks

    def _declare(self, var: Variable, step: int) -> None:
        raise NotImplementedError

    def _assert(self, term: Term) -> None:
        raise NotImplementedError

    def _push(self) -> None:
        raise NotImplementedError

    def _pop(self) -> None:
        raise NotImplementedError

    def _check(self) -> SolverResult:
        raise NotImplementedError

    def _values(self, refs: List[VarRef]) -> Dict[VarRef, Value]:
        raise NotImplementedError

    def _interrupt(self) -> None:
        pass

    def _close(self) -> None:
        pass


def step_symbol(var: Variable, step: int) -> str:
    """Solver-level name of ``var`` at ``step``."""
    return f"{var.name}@{step}"
