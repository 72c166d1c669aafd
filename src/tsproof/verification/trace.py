"""Counterexample trace representation and replay."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from ..errors import EvaluationError
from ..system import System
from ..term import AlgebraicValue, Term, Value, VarRef, evaluate, format_value

logger = logging.getLogger(__name__)


@dataclass
class CounterexampleTrace:
    """A counterexample trace showing a property violation.

    ``states[k]`` maps each state variable name to its value at time ``k``.
    """

    depth: int
    states: List[Dict[str, Value]]
    violation_time: int

    def __len__(self) -> int:
        return len(self.states)

    def values_of(self, name: str) -> List[Value]:
        """Values of one state variable over time."""
        return [st[name] for st in self.states]

    @property
    def is_exact(self) -> bool:
        """True if no value is irrational, so the trace can be replayed."""
        return not any(isinstance(val, AlgebraicValue)
                       for st in self.states for val in st.values())

    def format_trace(self) -> str:
        lines: List[str] = []
        lines.append(f"Counterexample trace (length {self.depth}):")
        lines.append("")
        for k, st in enumerate(self.states):
            lines.append(f"Time {k}:")
            for sig, val in sorted(st.items()):
                lines.append(f"  {sig} = {format_value(val)}")
            lines.append("")
        lines.append(f"Property violated at time {self.violation_time}")
        return "\n".join(lines)


def validate_trace(system: System, trace: CounterexampleTrace, property_name: str) -> bool:
    """Replay ``trace`` on ``system`` without a solver.

    Checks that the first state satisfies ``init``, that each consecutive
    pair of states satisfies ``trans``, and that the property is false at
    the violation time.
    Traces holding irrational values are not replayed and yield False.
    """
    prop = system.get_property(property_name)
    states = trace.states
    if not states or trace.violation_time >= len(states):
        return False
    if not trace.is_exact:
        logger.debug("Trace for %s has irrational values and cannot be replayed", property_name)
        return False

    try:
        if not _holds(system.init, system, states, 0, 1):
            logger.debug("Trace for %s does not start in an initial state", property_name)
            return False
        for k in range(len(states) - 1):
            if not _holds(system.trans, system, states, k, 2):
                logger.debug("Trace for %s breaks the transition relation at %d", property_name, k)
                return False
        if _holds(prop, system, states, trace.violation_time, 1):
            logger.debug("Property %s holds at time %d of its trace", property_name,
                         trace.violation_time)
            return False
    except EvaluationError as e:
        logger.debug("Cannot replay trace for %s: %s", property_name, e)
        return False
    return True


def _holds(term: Term, system: System, states: List[Dict[str, Value]], start: int, width: int) -> bool:
    env = {}
    for off in range(width):
        st = states[start + off]
        for v in system.variables:
            if v.name in st:
                env[VarRef(v, off)] = st[v.name]
    return bool(evaluate(term, env))
