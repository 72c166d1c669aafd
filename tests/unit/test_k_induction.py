"""
Tests for the k-induction engine.
"""
import pytest

from tsproof.solver import SolverResult, Z3Session
from tsproof.system import make_system
from tsproof.term import Op, Type, Variable, VarRef, conj, eq, mk_app, mk_int
from tsproof.verification import (
    REASON_DEPTH_EXHAUSTED,
    BmcEngine,
    KInductionEngine,
    Verdict,
)


def test_counter_proved_at_one(counter_system):
    with Z3Session() as base_s, Z3Session() as step_s:
        result = KInductionEngine(counter_system, step_s).run(
            "nonneg", BmcEngine(counter_system, base_s), max_k=5)

    assert result.verdict is Verdict.PROVED
    assert result.depth == 1
    assert result.holds


def test_off_by_one_falsified_by_base_case(off_by_one_system):
    with Z3Session() as base_s, Z3Session() as step_s:
        result = KInductionEngine(off_by_one_system, step_s).run(
            "nonneg", BmcEngine(off_by_one_system, base_s), max_k=5)

    assert result.verdict is Verdict.FALSIFIED
    assert result.depth == 1
    assert result.trace.values_of("x") == [0, -1]


def test_step_without_init(counter_system):
    """The inductive step alone fails when the property is not inductive."""
    x = counter_system.variables[0]
    system = make_system(
        [x],
        init=counter_system.init,
        trans=counter_system.trans,
        properties={"small": mk_app(Op.LT, [VarRef(x, 0), mk_int(3)])},
    )
    with Z3Session() as s:
        engine = KInductionEngine(system, s)
        assert engine.k == 1
        assert engine.check(["small"])["small"].result == SolverResult.SAT
        assert s.scope_depth == 0


def test_two_step_inductive_property():
    """Swapping x and y keeps x = 0 only two steps at a time."""
    x = Variable("x", Type.INT)
    y = Variable("y", Type.INT)
    x0, x1 = VarRef(x, 0), VarRef(x, 1)
    y0, y1 = VarRef(y, 0), VarRef(y, 1)
    system = make_system(
        [x, y],
        init=conj([eq(x0, mk_int(0)), eq(y0, mk_int(0))]),
        trans=conj([eq(x1, y0), eq(y1, x0)]),
        properties={"x_zero": eq(x0, mk_int(0))},
    )
    with Z3Session() as base_s, Z3Session() as step_s:
        result = KInductionEngine(system, step_s).run(
            "x_zero", BmcEngine(system, base_s), max_k=3)
    assert result.verdict is Verdict.PROVED
    assert result.depth == 2


def test_strengthening_with_proved_lemma(accumulator_system):
    lemma = accumulator_system.get_property("x_nonneg")
    with Z3Session() as s:
        engine = KInductionEngine(accumulator_system, s)
        plain = engine.check(["y_nonneg"])["y_nonneg"]
        strengthened = engine.check(["y_nonneg"], [lemma])["y_nonneg"]

    assert plain.result == SolverResult.SAT
    assert strengthened.result == SolverResult.UNSAT


def test_not_inductive_without_lemma(accumulator_system):
    with Z3Session() as base_s, Z3Session() as step_s:
        result = KInductionEngine(accumulator_system, step_s).run(
            "y_nonneg", BmcEngine(accumulator_system, base_s), max_k=4)

    assert result.verdict is Verdict.UNKNOWN
    assert result.reason == REASON_DEPTH_EXHAUSTED
    assert result.depth == 3


def test_query_protocol(counter_system, scripted_factory):
    session = scripted_factory(induction={"result": SolverResult.SAT})("induction")
    engine = KInductionEngine(counter_system, session)
    engine.advance()
    engine.check(["nonneg"])

    assert session.log == [
        ("declare", "x@0"),
        ("declare", "x@1"),
        ("assert", "(= x@1 (+ x@0 1))"),
        ("declare", "x@2"),
        ("assert", "(= x@2 (+ x@1 1))"),
        ("push",),
        ("assert", "(and (>= x@0 0) (>= x@1 0))"),
        ("assert", "(not (>= x@2 0))"),
        ("check",),
        ("pop",),
    ]


def test_misaligned_base(counter_system):
    with Z3Session() as base_s, Z3Session() as step_s:
        base = BmcEngine(counter_system, base_s)
        base.advance()
        with pytest.raises(ValueError):
            KInductionEngine(counter_system, step_s).run("nonneg", base)
