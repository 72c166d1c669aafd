"""Verification configuration.

Defaults can be overridden from the environment:
  - TSPROOF_SMT_SOLVER: solver backend ("z3" for the in-process bindings,
    "auto" for the first external solver found, or the name/path of an
    SMT-LIBv2 solver executable)
  - TSPROOF_DEPTH_BOUND: maximal BMC depth, "none" for unbounded
  - TSPROOF_TIMEOUT_S: wall-clock budget per verification request
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .solver.solver_runner import SOLVER_ENV_VAR

DEPTH_BOUND_ENV_VAR = "TSPROOF_DEPTH_BOUND"
TIMEOUT_ENV_VAR = "TSPROOF_TIMEOUT_S"


@dataclass(frozen=True)
class VerifyConfig:
    """Settings of a verification request."""
    # Last BMC depth explored; None = unbounded
    depth_bound: Optional[int] = 20
    # Wall-clock budget in seconds; None = no limit
    timeout_s: Optional[float] = None
    # "z3" = in-process bindings, "auto" = first external solver found,
    # anything else = external SMT-LIBv2 solver
    solver: str = "z3"
    # Per check-sat timeout passed to the solver
    solver_timeout_ms: Optional[int] = None
    # Assume already proved properties in later induction steps
    strengthen: bool = True
    # Replay counterexamples on the system before reporting them
    validate_traces: bool = True

    def __post_init__(self):
        if self.depth_bound is not None and self.depth_bound < 0:
            raise ValueError(f"depth_bound must be >= 0, got {self.depth_bound}")
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")
        if self.solver_timeout_ms is not None and self.solver_timeout_ms <= 0:
            raise ValueError(f"solver_timeout_ms must be > 0, got {self.solver_timeout_ms}")
        if not self.solver:
            raise ValueError("solver must not be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "VerifyConfig":
        """Build a config from defaults, the environment, then ``overrides``."""
        env = os.environ if environ is None else environ
        kw = {}

        solver = env.get(SOLVER_ENV_VAR)
        if solver:
            kw["solver"] = solver

        depth = env.get(DEPTH_BOUND_ENV_VAR)
        if depth:
            if depth.strip().lower() == "none":
                kw["depth_bound"] = None
            else:
                kw["depth_bound"] = _parse(int, DEPTH_BOUND_ENV_VAR, depth)

        timeout = env.get(TIMEOUT_ENV_VAR)
        if timeout:
            kw["timeout_s"] = _parse(float, TIMEOUT_ENV_VAR, timeout)

        kw.update(overrides)
        return cls(**kw)

    def with_overrides(self, **overrides) -> "VerifyConfig":
        return dataclasses.replace(self, **overrides)


def _parse(conv, name: str, text: str):
    try:
        return conv(text.strip())
    except ValueError:
        raise ValueError(f"invalid value for ${name}: {text!r}") from None
