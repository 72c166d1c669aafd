"""
Tests for proof orchestration: round precedence, strengthening, cancellation.
"""
import logging
import threading

import pytest

from tsproof.config import VerifyConfig
from tsproof.solver import SolverResult, Z3Session
from tsproof.term import AlgebraicValue
from tsproof.verification import (
    REASON_CANCELLED,
    REASON_DEPTH_EXHAUSTED,
    ProofOrchestrator,
    Verdict,
)

NO_REPLAY = VerifyConfig(validate_traces=False)


def z3_factory(role):
    return Z3Session()


def test_falsification_takes_precedence(counter_system, scripted_factory):
    factory = scripted_factory(
        bmc={"result": SolverResult.SAT, "model": {"x": -5}},
        induction={"result": SolverResult.UNSAT},
    )
    result = ProofOrchestrator(counter_system, NO_REPLAY, factory).run()["nonneg"]

    assert result.verdict is Verdict.FALSIFIED
    assert result.depth == 0
    assert result.trace.states == [{"x": -5}]
    assert result.solver_name == "scripted-bmc"
    assert factory.sessions["induction"].checks == 1


def test_bmc_unknown_beats_induction_proof(counter_system, scripted_factory):
    factory = scripted_factory(
        bmc={"result": SolverResult.UNKNOWN, "reason": "incomplete"},
        induction={"result": SolverResult.UNSAT},
    )
    result = ProofOrchestrator(counter_system, NO_REPLAY, factory).run()["nonneg"]

    assert result.verdict is Verdict.UNKNOWN
    assert result.reason == "solver inconclusive at depth 0: incomplete"
    assert result.depth == -1


def test_induction_proof(counter_system, scripted_factory):
    factory = scripted_factory(induction={"result": SolverResult.UNSAT})
    result = ProofOrchestrator(counter_system, NO_REPLAY, factory).run()["nonneg"]

    assert result.verdict is Verdict.PROVED
    assert result.depth == 1
    assert result.solver_name == "scripted-induction"


def test_induction_unknown(counter_system, scripted_factory):
    factory = scripted_factory(induction={"result": SolverResult.UNKNOWN})
    result = ProofOrchestrator(counter_system, NO_REPLAY, factory).run()["nonneg"]

    assert result.verdict is Verdict.UNKNOWN
    assert result.reason == "solver inconclusive at depth 1: incomplete"
    assert result.depth == 0


def test_depth_exhausted(counter_system, scripted_factory):
    factory = scripted_factory(induction={"result": SolverResult.SAT})
    config = VerifyConfig(depth_bound=3, validate_traces=False)
    result = ProofOrchestrator(counter_system, config, factory).run()["nonneg"]

    assert result.verdict is Verdict.UNKNOWN
    assert result.reason == REASON_DEPTH_EXHAUSTED
    assert result.depth == 3
    assert factory.sessions["bmc"].checks == 4
    assert factory.sessions["induction"].checks == 4


def test_sessions_closed(counter_system, scripted_factory):
    factory = scripted_factory()
    ProofOrchestrator(counter_system, NO_REPLAY, factory).run()
    assert factory.sessions["bmc"].closed
    assert factory.sessions["induction"].closed


def test_counter_proved_with_z3(counter_system):
    result = ProofOrchestrator(counter_system, VerifyConfig(), z3_factory).run(["nonneg"])["nonneg"]
    assert result.verdict is Verdict.PROVED
    assert result.depth == 1


def test_off_by_one_falsified_with_z3(off_by_one_system):
    result = ProofOrchestrator(off_by_one_system, VerifyConfig(), z3_factory).run()["nonneg"]
    assert result.verdict is Verdict.FALSIFIED
    assert result.depth == 1
    assert result.trace.states == [{"x": 0}, {"x": -1}]


def test_irrational_counterexample(sqrt2_system, caplog):
    with caplog.at_level(logging.DEBUG, logger="tsproof.verification.orchestrator"):
        result = ProofOrchestrator(sqrt2_system, VerifyConfig(), z3_factory).run()["nonpos"]

    assert result.verdict is Verdict.FALSIFIED
    assert result.depth == 0
    value = result.trace.values_of("r")[0]
    assert isinstance(value, AlgebraicValue)
    assert value.approx > 0
    assert not result.trace.is_exact
    assert "r = (root-obj" in result.trace.format_trace()
    assert "not replayed" in caplog.text
    assert "does not replay" not in caplog.text


def test_strengthening(accumulator_system):
    results = ProofOrchestrator(accumulator_system, VerifyConfig(), z3_factory).run()

    assert results["x_nonneg"].verdict is Verdict.PROVED
    assert results["x_nonneg"].depth == 1
    assert results["y_nonneg"].verdict is Verdict.PROVED
    assert results["y_nonneg"].depth == 2
    assert list(results) == ["x_nonneg", "y_nonneg"]


def test_no_strengthening(accumulator_system):
    config = VerifyConfig(depth_bound=3, strengthen=False)
    results = ProofOrchestrator(accumulator_system, config, z3_factory).run()

    assert results["x_nonneg"].verdict is Verdict.PROVED
    assert results["y_nonneg"].verdict is Verdict.UNKNOWN
    assert results["y_nonneg"].reason == REASON_DEPTH_EXHAUSTED
    assert results["y_nonneg"].depth == 3


def test_strengthening_hypotheses_sent(accumulator_system, scripted_factory):
    # x_nonneg is proved in round 0, y_nonneg stays open
    def induction(session):
        last = session.assertions[-1]
        return SolverResult.UNSAT if "x@" in last else SolverResult.SAT

    factory = scripted_factory(induction={"result": induction})
    config = VerifyConfig(depth_bound=1, validate_traces=False)
    ProofOrchestrator(accumulator_system, config, factory).run()

    hypotheses = factory.sessions["induction"].assertions[-2]
    assert hypotheses == "(and (>= y@0 0) (>= x@0 0) (>= y@1 0) (>= x@1 0))"


def test_unknown_property(counter_system, scripted_factory):
    with pytest.raises(KeyError):
        ProofOrchestrator(counter_system, NO_REPLAY, scripted_factory()).run(["missing"])


def test_no_properties(counter_system, scripted_factory):
    factory = scripted_factory()
    assert ProofOrchestrator(counter_system, NO_REPLAY, factory).run([]) == {}
    assert factory.sessions == {}


def _run_in_thread(orchestrator):
    out = {}
    thread = threading.Thread(target=lambda: out.update(orchestrator.run()))
    thread.start()
    return thread, out


@pytest.mark.parametrize("bmc_result", [SolverResult.SAT, SolverResult.UNSAT])
def test_cancel_mid_search(counter_system, scripted_factory, bmc_result):
    factory = scripted_factory(
        bmc={"result": bmc_result, "block": True},
        induction={"result": SolverResult.UNSAT, "block": True},
    )
    orchestrator = ProofOrchestrator(counter_system, NO_REPLAY, factory)
    thread, out = _run_in_thread(orchestrator)

    assert factory.checking.wait(timeout=5)
    orchestrator.cancel()
    thread.join(timeout=10)

    assert not thread.is_alive()
    result = out["nonneg"]
    assert result.verdict is Verdict.UNKNOWN
    assert result.reason == REASON_CANCELLED
    assert result.is_cancelled
    assert orchestrator.cancelled


def test_cancel_before_run(counter_system, scripted_factory):
    factory = scripted_factory(induction={"result": SolverResult.UNSAT})
    orchestrator = ProofOrchestrator(counter_system, NO_REPLAY, factory)
    orchestrator.cancel()
    result = orchestrator.run()["nonneg"]

    assert result.is_cancelled
    assert factory.sessions["bmc"].interrupted


def test_timeout_cancels(counter_system, scripted_factory):
    factory = scripted_factory(
        bmc={"block": True},
        induction={"block": True},
    )
    config = VerifyConfig(timeout_s=0.2, validate_traces=False)
    result = ProofOrchestrator(counter_system, config, factory).run()["nonneg"]

    assert result.verdict is Verdict.UNKNOWN
    assert result.reason == REASON_CANCELLED
    assert factory.sessions["bmc"].interrupted
    assert factory.sessions["induction"].interrupted


def test_run_again_after_timeout(counter_system, scripted_factory):
    config = VerifyConfig(timeout_s=0.2, validate_traces=False)
    orchestrator = ProofOrchestrator(
        counter_system, config, scripted_factory(bmc={"block": True}, induction={"block": True}))
    assert orchestrator.run()["nonneg"].is_cancelled
    assert not orchestrator.cancelled

    orchestrator.session_factory = scripted_factory(induction={"result": SolverResult.UNSAT})
    result = orchestrator.run()["nonneg"]
    assert result.verdict is Verdict.PROVED
    assert result.depth == 1


def test_cancel_is_sticky(counter_system, scripted_factory):
    orchestrator = ProofOrchestrator(counter_system, NO_REPLAY, scripted_factory())
    orchestrator.cancel()
    assert orchestrator.run()["nonneg"].is_cancelled
    assert orchestrator.run()["nonneg"].is_cancelled
