"""
Tests for verification configuration.
"""
import pytest

from tsproof.config import VerifyConfig


def test_defaults():
    config = VerifyConfig()
    assert config.depth_bound == 20
    assert config.timeout_s is None
    assert config.solver == "z3"
    assert config.strengthen
    assert config.validate_traces


def test_from_env():
    config = VerifyConfig.from_env({
        "TSPROOF_SMT_SOLVER": "cvc5",
        "TSPROOF_DEPTH_BOUND": "7",
        "TSPROOF_TIMEOUT_S": "2.5",
    })
    assert config.solver == "cvc5"
    assert config.depth_bound == 7
    assert config.timeout_s == 2.5


def test_from_env_unbounded_and_overrides():
    config = VerifyConfig.from_env({"TSPROOF_DEPTH_BOUND": "none"}, strengthen=False)
    assert config.depth_bound is None
    assert not config.strengthen


def test_from_env_empty():
    assert VerifyConfig.from_env({}) == VerifyConfig()


@pytest.mark.parametrize("env", [
    {"TSPROOF_DEPTH_BOUND": "deep"},
    {"TSPROOF_DEPTH_BOUND": "-1"},
    {"TSPROOF_TIMEOUT_S": "soon"},
    {"TSPROOF_TIMEOUT_S": "0"},
])
def test_from_env_invalid(env):
    with pytest.raises(ValueError):
        VerifyConfig.from_env(env)


def test_with_overrides():
    base = VerifyConfig()
    changed = base.with_overrides(depth_bound=3, solver="yices")
    assert changed.depth_bound == 3
    assert changed.solver == "yices"
    assert base.depth_bound == 20
    with pytest.raises(ValueError):
        base.with_overrides(solver_timeout_ms=0)
