"""
Tests for the high-level verification API.
"""
import logging

import pytest

from tsproof import checker
from tsproof import (
    REASON_DEPTH_EXHAUSTED,
    SolverError,
    Verdict,
    VerifyConfig,
    Z3Session,
    make_session_factory,
    verify,
    verify_all,
)
from tsproof.system.ast import Apply, Init, Literal, Name, Property, Script, Trans, VarDecl


def _counter_script():
    x = Name("x")
    return Script((
        VarDecl(("x",), "int"),
        Init((Apply("=", (x, Literal(0))),)),
        Trans((Apply("=", (Name("x", next=True), Apply("+", (x, Literal(1))))),)),
        Property("nonneg", Apply(">=", (x, Literal(0)))),
        Property("below_three", Apply("<", (x, Literal(3)))),
    ), name="counter")


def test_verify_proved(counter_system):
    result = verify(counter_system, "nonneg", depth_bound=10, config=VerifyConfig())
    assert result.holds
    assert result.depth == 1
    assert result.solver_name == "z3"
    assert "proved by 1-induction" in str(result)


def test_verify_falsified(off_by_one_system):
    result = verify(off_by_one_system, "nonneg", config=VerifyConfig())
    assert result.verdict is Verdict.FALSIFIED
    assert result.trace.values_of("x") == [0, -1]
    text = result.trace.format_trace()
    assert "Time 1:" in text
    assert "  x = (- 1)" in text
    assert "Property violated at time 1" in text


def test_verify_script():
    results = verify_all(_counter_script(), config=VerifyConfig())
    assert results["nonneg"].verdict is Verdict.PROVED
    assert results["below_three"].verdict is Verdict.FALSIFIED
    assert results["below_three"].depth == 3
    assert results["below_three"].trace.values_of("x") == [0, 1, 2, 3]


def test_depth_bound_overrides_config(accumulator_system):
    config = VerifyConfig(depth_bound=10, strengthen=False)
    result = verify(accumulator_system, "y_nonneg", 2, config=config)
    assert result.verdict is Verdict.UNKNOWN
    assert result.reason == REASON_DEPTH_EXHAUSTED
    assert result.depth == 2
    assert "no counterexample up to depth 2" in str(result)


def test_verify_unknown_property(counter_system):
    with pytest.raises(KeyError):
        verify(counter_system, "missing", config=VerifyConfig())


def test_verify_with_session_factory(counter_system, scripted_factory):
    factory = scripted_factory()
    result = verify(counter_system, "nonneg", depth_bound=0,
                    config=VerifyConfig(validate_traces=False), session_factory=factory)
    assert result.verdict is Verdict.PROVED
    assert set(factory.sessions) == {"bmc", "induction"}


def test_verdicts_are_logged(counter_system, caplog):
    with caplog.at_level(logging.INFO, logger="tsproof.verification.orchestrator"):
        verify(counter_system, "nonneg", config=VerifyConfig())
    assert "Property nonneg proved" in caplog.text


def test_config_from_env(monkeypatch, counter_system):
    monkeypatch.setenv("TSPROOF_DEPTH_BOUND", "0")
    monkeypatch.delenv("TSPROOF_SMT_SOLVER", raising=False)
    monkeypatch.delenv("TSPROOF_TIMEOUT_S", raising=False)
    result = verify(counter_system, "nonneg")
    assert result.holds


def test_session_factory_z3():
    factory = make_session_factory(VerifyConfig(solver_timeout_ms=500))
    with factory("bmc") as s:
        assert isinstance(s, Z3Session)


def test_session_factory_external(tmp_path):
    factory = make_session_factory(VerifyConfig(solver=str(tmp_path / "no-such-solver")))
    # The external solver is only started when a session is requested
    assert callable(factory)
    with pytest.raises(SolverError, match="no-such-solver"):
        factory("bmc")


def test_session_factory_auto(monkeypatch, tmp_path):
    exe = tmp_path / "fake-solver"
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    monkeypatch.setenv("TSPROOF_SMT_SOLVER", str(exe))
    started = []
    monkeypatch.setattr(checker, "Smt2ProcessSession",
                        lambda spec, timeout_ms=None: started.append(spec) or spec)

    factory = make_session_factory(VerifyConfig(solver="auto"))
    factory("bmc")
    assert started[0].argv == (str(exe),)


def test_session_factory_auto_without_solvers(monkeypatch, tmp_path):
    monkeypatch.setenv("PATH", str(tmp_path))
    monkeypatch.setenv("TSPROOF_SMT_SOLVER", "auto")
    with pytest.raises(SolverError, match="no SMT-LIBv2 solver"):
        make_session_factory(VerifyConfig.from_env())
