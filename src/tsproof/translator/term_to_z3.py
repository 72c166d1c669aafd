"""
Term to Z3 expression translation.
"""
from functools import reduce
from typing import Callable, Dict, List, Optional

import z3

from ..term import App, Op, Term, Type, VarRef, fold
from .type_translator import TypeTranslator


class TermToZ3Translator:
    """Translates terms placed on absolute steps to Z3 expressions.

    Step variables are created on demand and cached, so the same reference
    always maps to the same Z3 constant.
    """

    def __init__(self, ctx: Optional[z3.Context] = None,
                 symbol: Optional[Callable[[VarRef], str]] = None):
        self.types = TypeTranslator(ctx)
        self._symbol = symbol or str
        self._consts: Dict[VarRef, z3.ExprRef] = {}

    def var(self, ref: VarRef) -> z3.ExprRef:
        const = self._consts.get(ref)
        if const is None:
            const = self.types.translate_var(self._symbol(ref), ref.type)
            self._consts[ref] = const
        return const

    def translate(self, term: Term) -> z3.ExprRef:
        return fold(
            term,
            lambda c: self.types.translate_value(c.value, c.type),
            self.var,
            self._translate_app,
        )

    def _translate_app(self, app: App, args: List[z3.ExprRef]) -> z3.ExprRef:
        op = app.op
        if op is Op.ITE:
            return z3.If(args[0], args[1], args[2])
        if op is Op.NOT:
            return z3.Not(args[0])
        if op is Op.AND:
            return z3.And(*args)
        if op is Op.OR:
            return z3.Or(*args)
        if op is Op.IMPLIES:
            # Right-associative
            return reduce(lambda acc, lhs: z3.Implies(lhs, acc), reversed(args[:-1]), args[-1])
        if op is Op.EQ:
            return _chain(args, lambda a, b: a == b)
        if op is Op.GE:
            return _chain(args, lambda a, b: a >= b)
        if op is Op.LE:
            return _chain(args, lambda a, b: a <= b)
        if op is Op.GT:
            return _chain(args, lambda a, b: a > b)
        if op is Op.LT:
            return _chain(args, lambda a, b: a < b)
        if op is Op.ADD:
            return reduce(lambda a, b: a + b, args)
        if op is Op.SUB:
            if len(args) == 1:
                return -args[0]
            return reduce(lambda a, b: a - b, args)
        if op is Op.MUL:
            return reduce(lambda a, b: a * b, args)
        if op is Op.DIV:
            # Z3's `/` on Int operands is integer division
            if app.args[0].type is Type.INT:
                args = [z3.ToReal(a) for a in args]
            return args[0] / args[1]
        if op is Op.IDIV:
            return args[0] / args[1]
        if op is Op.MOD:
            return args[0] % args[1]
        raise NotImplementedError(f"Operator not supported: {op}")


def _chain(args: List[z3.ExprRef], rel: Callable[[z3.ExprRef, z3.ExprRef], z3.BoolRef]) -> z3.BoolRef:
    pairs = [rel(a, b) for a, b in zip(args, args[1:])]
    if len(pairs) == 1:
        return pairs[0]
    return z3.And(*pairs)
