"""
Typed, immutable expression trees over current- and next-state variables.

A variable reference carries a step offset. In a system, offset 0 is the
current state and offset 1 the next state; once placed on an unrolling the
offset is the absolute time step.
"""
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Callable, FrozenSet, Iterable, Mapping, Optional, Sequence, Set, Tuple, TypeVar, Union

from ..errors import TermTypeError
from .ops import Op
from .types import Type, Variable

A = TypeVar("A")


@dataclass(frozen=True)
class AlgebraicValue:
    """Irrational real value from a solver model.

    Kept as the solver's root object text, with a rational approximation
    when one is available. Traces display it, but terms cannot be evaluated
    over it exactly.
    """
    text: str
    approx: Optional[Fraction] = None

    def __str__(self) -> str:
        return self.text


Value = Union[bool, int, Fraction, AlgebraicValue]


@dataclass(frozen=True)
class Const:
    """Literal constant."""
    value: Value
    type: Type

    def __str__(self) -> str:
        return format_value(self.value)


@dataclass(frozen=True)
class VarRef:
    """Reference to a variable at a relative (or absolute) step offset."""
    var: Variable
    offset: int = 0

    @property
    def type(self) -> Type:
        return self.var.type

    def __str__(self) -> str:
        return f"{self.var.name}@{self.offset}"


@dataclass(frozen=True)
class App:
    """Operator application. Its type is computed once, at construction."""
    op: Op
    args: Tuple["Term", ...]
    type: Type = field(init=False)

    def __post_init__(self):
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "type", self.op.type_check([a.type for a in self.args]))

    def __str__(self) -> str:
        return "(" + " ".join([self.op.value] + [str(a) for a in self.args]) + ")"


Term = Union[Const, VarRef, App]


def format_value(value: Value) -> str:
    """Render a constant value in SMT-LIB style."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, AlgebraicValue):
        return value.text
    if isinstance(value, Fraction):
        num, den = value.numerator, value.denominator
        if num < 0:
            return f"(- (/ {-num} {den}))"
        return f"(/ {num} {den})"
    if value < 0:
        return f"(- {-value})"
    return str(value)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

TRUE = Const(True, Type.BOOL)
FALSE = Const(False, Type.BOOL)


def mk_bool(b: bool) -> Const:
    return TRUE if b else FALSE


def mk_int(i: int) -> Const:
    if isinstance(i, bool) or not isinstance(i, int):
        raise TermTypeError(f"expected an integer constant, got {i!r}")
    return Const(i, Type.INT)


def mk_rat(r: Union[int, str, Fraction], den: int = 1) -> Const:
    value = Fraction(r) / den
    return Const(value, Type.RAT)


def mk_const(value: Any) -> Const:
    """Create a constant, inferring its type from the Python value."""
    if isinstance(value, bool):
        return mk_bool(value)
    if isinstance(value, int):
        return mk_int(value)
    if isinstance(value, Fraction):
        return Const(value, Type.RAT)
    raise TermTypeError(f"unsupported constant {value!r}")


def mk_var(var: Variable, offset: int = 0) -> VarRef:
    return VarRef(var, offset)


def mk_app(op: Op, args: Sequence[Term]) -> Term:
    """Create a type-checked operator application.

    Performs a few local simplifications: negation of a constant folds into
    the constant, and unary ``+``/``and``/``or`` collapse to their argument.

    Raises:
        TermTypeError: If operand types do not fit the operator
    """
    args = tuple(args)
    op.type_check([a.type for a in args])
    if len(args) == 1:
        arg = args[0]
        if op is Op.SUB and isinstance(arg, Const):
            return Const(-arg.value, arg.type)
        if op in (Op.ADD, Op.AND, Op.OR):
            return arg
    return App(op, args)


def negate(term: Term) -> Term:
    if isinstance(term, Const) and term.type is Type.BOOL:
        return mk_bool(not term.value)
    return mk_app(Op.NOT, [term])


def conj(terms: Iterable[Term]) -> Term:
    """Conjunction of ``terms``; ``true`` when empty."""
    args = [t for t in terms if t != TRUE]
    if not args:
        return TRUE
    return mk_app(Op.AND, args)


def disj(terms: Iterable[Term]) -> Term:
    """Disjunction of ``terms``; ``false`` when empty."""
    args = [t for t in terms if t != FALSE]
    if not args:
        return FALSE
    return mk_app(Op.OR, args)


def implies(lhs: Term, rhs: Term) -> Term:
    return mk_app(Op.IMPLIES, [lhs, rhs])


def eq(lhs: Term, rhs: Term) -> Term:
    return mk_app(Op.EQ, [lhs, rhs])


# ---------------------------------------------------------------------------
# Traversals
# ---------------------------------------------------------------------------

def fold(term: Term,
         on_const: Callable[[Const], A],
         on_var: Callable[[VarRef], A],
         on_app: Callable[[App, Sequence[A]], A]) -> A:
    """Bottom-up fold over a term."""
    if isinstance(term, Const):
        return on_const(term)
    if isinstance(term, VarRef):
        return on_var(term)
    return on_app(term, [fold(a, on_const, on_var, on_app) for a in term.args])


def _rebuild(app: App, args: Sequence[Term]) -> Term:
    if all(new is old for new, old in zip(args, app.args)):
        return app
    return App(app.op, tuple(args))


def reindex(term: Term, delta: int) -> Term:
    """Shift every variable reference's step offset by ``delta``."""
    if delta == 0:
        return term
    return fold(
        term,
        lambda c: c,
        lambda v: VarRef(v.var, v.offset + delta),
        _rebuild,
    )


def substitute(term: Term, mapping: Mapping[Variable, Term]) -> Term:
    """Replace variables by terms.

    A reference ``v@d`` is replaced by ``mapping[v]`` reindexed by ``d``.

    Raises:
        TermTypeError: If a replacement's type differs from its variable's
    """
    for var, repl in mapping.items():
        if repl.type is not var.type:
            raise TermTypeError(
                f"cannot substitute '{var.name}: {var.type}' with a term of type '{repl.type}'",
                name=var.name)
    if not mapping:
        return term

    def on_var(ref: VarRef) -> Term:
        repl = mapping.get(ref.var)
        if repl is None:
            return ref
        return reindex(repl, ref.offset)

    return fold(term, lambda c: c, on_var, _rebuild)


def free_refs(term: Term) -> FrozenSet[VarRef]:
    """All variable references occurring in ``term``."""
    out: Set[VarRef] = set()

    def walk(t: Term):
        if isinstance(t, VarRef):
            out.add(t)
        elif isinstance(t, App):
            for a in t.args:
                walk(a)

    walk(term)
    return frozenset(out)


def variables_of(term: Term) -> FrozenSet[Variable]:
    return frozenset(ref.var for ref in free_refs(term))


def offsets_of(term: Term) -> FrozenSet[int]:
    return frozenset(ref.offset for ref in free_refs(term))


def size(term: Term) -> int:
    """Number of nodes in ``term``."""
    return fold(term, lambda c: 1, lambda v: 1, lambda app, kids: 1 + sum(kids))
