"""
Placement of a system on absolute time steps.

Both proof engines encode steps through the helpers below, so the induction
step lines up exactly with the BMC unrolling: step variable ``x`` at step
``i`` is ``VarRef(x, i)``, ``init`` sits at step 0 and the ``i``-th
transition instance relates steps ``i`` and ``i + 1``.
"""
from dataclasses import dataclass
from typing import List, Tuple

from ..system import System
from ..term import Term, VarRef, reindex


@dataclass(frozen=True)
class Unrolling:
    """A system unrolled to ``depth``.

    Attributes:
        depth: Last step
        steps: Step variables, one tuple per step ``0..depth``
        init: ``init`` at step 0
        trans: Transition instances, the ``i``-th over steps ``i`` and ``i + 1``
    """
    depth: int
    steps: Tuple[Tuple[VarRef, ...], ...]
    init: Term
    trans: Tuple[Term, ...]

    def assertions(self) -> List[Term]:
        return [self.init, *self.trans]

    def refs(self) -> List[VarRef]:
        return [ref for step in self.steps for ref in step]


def step_refs(system: System, i: int) -> Tuple[VarRef, ...]:
    return tuple(VarRef(v, i) for v in system.variables)


def place_init(system: System) -> Term:
    return system.init


def place_trans(system: System, i: int) -> Term:
    """Transition relation between steps ``i`` and ``i + 1``."""
    return reindex(system.trans, i)


def place_property(term: Term, i: int) -> Term:
    return reindex(term, i)


def unroll(system: System, k: int) -> Unrolling:
    """Unroll ``system`` to depth ``k``: steps ``0..k`` and ``k`` transitions."""
    if k < 0:
        raise ValueError(f"unrolling depth must be >= 0, got {k}")
    return Unrolling(
        depth=k,
        steps=tuple(step_refs(system, i) for i in range(k + 1)),
        init=place_init(system),
        trans=tuple(place_trans(system, i) for i in range(k)),
    )
