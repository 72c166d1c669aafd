"""
Pytest configuration and fixtures for tsproof tests.
"""
import sys
import threading
from fractions import Fraction
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from tsproof.solver.base import BaseSession  # noqa: E402
from tsproof.solver.result import SolverResult  # noqa: E402
from tsproof.system import make_system  # noqa: E402
from tsproof.term import Op, Type, Variable, VarRef, conj, eq, mk_app, mk_int, mk_rat  # noqa: E402


class ScriptedSession(BaseSession):
    """In-memory session answering every check with a scripted result.

    Args:
        role: Role the session was created for
        result: SolverResult, or a callable taking the session
        model: Values by variable name, the same at every step
        block: Block in check-sat until interrupted
    """

    def __init__(self, role, result=SolverResult.UNSAT, model=None, block=False,
                 reason="incomplete", on_check=None):
        super().__init__()
        self.name = f"scripted-{role}"
        self.role = role
        self.result = result
        self.model = model or {}
        self.block = block
        self.reason = reason
        self.on_check = on_check
        self.log = []
        self._release = threading.Event()

    def _declare(self, var, step):
        self.log.append(("declare", f"{var.name}@{step}"))

    def _assert(self, term):
        self.log.append(("assert", str(term)))

    def _push(self):
        self.log.append(("push",))

    def _pop(self):
        self.log.append(("pop",))

    def _check(self):
        self.log.append(("check",))
        if self.on_check is not None:
            self.on_check(self)
        if self.block:
            self._release.wait(timeout=10)
        result = self.result(self) if callable(self.result) else self.result
        if result == SolverResult.UNKNOWN:
            self.reason_unknown = self.reason
        return result

    def _values(self, refs):
        defaults = {Type.BOOL: False, Type.INT: 0, Type.RAT: Fraction(0)}
        return {ref: self.model.get(ref.var.name, defaults[ref.type]) for ref in refs}

    def _interrupt(self):
        self._release.set()

    @property
    def checks(self):
        return sum(1 for entry in self.log if entry[0] == "check")

    @property
    def assertions(self):
        return [entry[1] for entry in self.log if entry[0] == "assert"]


class ScriptedFactory:
    """Session factory handing out one ScriptedSession per role."""

    def __init__(self, **roles):
        self.roles = roles
        self.sessions = {}
        self.checking = threading.Event()

    def __call__(self, role):
        kwargs = dict(self.roles.get(role, {}))
        kwargs.setdefault("on_check", lambda s: self.checking.set())
        session = ScriptedSession(role, **kwargs)
        self.sessions[role] = session
        return session


@pytest.fixture
def scripted_factory():
    return ScriptedFactory


@pytest.fixture
def x_var():
    return Variable("x", Type.INT)


@pytest.fixture
def counter_system(x_var):
    """init x = 0, x' = x + 1, property x >= 0."""
    x0, x1 = VarRef(x_var, 0), VarRef(x_var, 1)
    return make_system(
        [x_var],
        init=eq(x0, mk_int(0)),
        trans=eq(x1, mk_app(Op.ADD, [x0, mk_int(1)])),
        properties={"nonneg": mk_app(Op.GE, [x0, mk_int(0)])},
        name="counter")


@pytest.fixture
def off_by_one_system(x_var):
    """init x = 0, x' = x - 1, property x >= 0."""
    x0, x1 = VarRef(x_var, 0), VarRef(x_var, 1)
    return make_system(
        [x_var],
        init=eq(x0, mk_int(0)),
        trans=eq(x1, mk_app(Op.SUB, [x0, mk_int(1)])),
        properties={"nonneg": mk_app(Op.GE, [x0, mk_int(0)])},
        name="off_by_one")


@pytest.fixture
def accumulator_system():
    """x counts up from 0 and y accumulates x.

    ``y >= 0`` is not k-inductive on its own for any k, but it is
    1-inductive once ``x >= 0`` is assumed.
    """
    x = Variable("x", Type.INT)
    y = Variable("y", Type.INT)
    x0, x1 = VarRef(x, 0), VarRef(x, 1)
    y0, y1 = VarRef(y, 0), VarRef(y, 1)
    zero = mk_int(0)
    return make_system(
        [x, y],
        init=conj([eq(x0, zero), eq(y0, zero)]),
        trans=conj([
            eq(x1, mk_app(Op.ADD, [x0, mk_int(1)])),
            eq(y1, mk_app(Op.ADD, [y0, x0])),
        ]),
        properties={
            "x_nonneg": mk_app(Op.GE, [x0, zero]),
            "y_nonneg": mk_app(Op.GE, [y0, zero]),
        },
        name="accumulator")


@pytest.fixture
def sqrt2_system():
    """init r * r = 2, r' = r, property r <= 0, with r rational.

    Every counterexample assigns r an irrational value.
    """
    r = Variable("r", Type.RAT)
    r0, r1 = VarRef(r, 0), VarRef(r, 1)
    return make_system(
        [r],
        init=eq(mk_app(Op.MUL, [r0, r0]), mk_rat(2)),
        trans=eq(r1, r0),
        properties={"nonpos": mk_app(Op.LE, [r0, mk_rat(0)])},
        name="sqrt2")
