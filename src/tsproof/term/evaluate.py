"""
Evaluation of terms under a valuation of their variable references.

Follows SMT-LIB semantics: ``div``/``mod`` are Euclidean, relations and
``=`` are chainable, ``=>`` associates to the right.
"""
from fractions import Fraction
from typing import Mapping, Sequence

from ..errors import EvaluationError
from .ops import Op
from .term import AlgebraicValue, Term, Value, VarRef, fold


def evaluate(term: Term, env: Mapping[VarRef, Value]) -> Value:
    """Evaluate ``term``.

    Args:
        term: Term to evaluate
        env: Values for the variable references of ``term``

    Returns:
        The value of ``term`` (bool, int or Fraction)

    Raises:
        EvaluationError: On a missing reference, an irrational value or a
            division by zero
    """
    def on_var(ref: VarRef) -> Value:
        try:
            value = env[ref]
        except KeyError:
            raise EvaluationError(f"no value for '{ref}'") from None
        if isinstance(value, AlgebraicValue):
            raise EvaluationError(f"'{ref}' has the irrational value {value}")
        return value

    return fold(term, lambda c: c.value, on_var, lambda app, vals: apply_op(app.op, vals))


def apply_op(op: Op, args: Sequence[Value]) -> Value:
    """Apply ``op`` to constant operands (already type-checked)."""
    if op is Op.ITE:
        return args[1] if args[0] else args[2]
    if op is Op.NOT:
        return not args[0]
    if op is Op.AND:
        return all(args)
    if op is Op.OR:
        return any(args)
    if op is Op.IMPLIES:
        res = args[-1]
        for a in reversed(args[:-1]):
            res = (not a) or res
        return bool(res)
    if op is Op.EQ:
        return all(a == args[0] for a in args[1:])
    if op.is_relation:
        return all(_compare(op, lhs, rhs) for lhs, rhs in zip(args, args[1:]))

    if op is Op.ADD:
        return sum(args[1:], args[0])
    if op is Op.SUB:
        if len(args) == 1:
            return -args[0]
        res = args[0]
        for a in args[1:]:
            res = res - a
        return res
    if op is Op.MUL:
        res = args[0]
        for a in args[1:]:
            res = res * a
        return res
    if op is Op.DIV:
        lhs, rhs = args
        if rhs == 0:
            raise EvaluationError("division by zero")
        return Fraction(lhs) / Fraction(rhs)
    if op in (Op.IDIV, Op.MOD):
        lhs, rhs = args
        if rhs == 0:
            raise EvaluationError(f"'{op.value}' by zero")
        r = lhs % abs(rhs)
        if op is Op.MOD:
            return r
        return (lhs - r) // rhs
    raise EvaluationError(f"cannot evaluate operator '{op.value}'")


def _compare(op: Op, lhs: Value, rhs: Value) -> bool:
    if op is Op.GE:
        return lhs >= rhs
    if op is Op.LE:
        return lhs <= rhs
    if op is Op.GT:
        return lhs > rhs
    return lhs < rhs
