"""
Closed operator set of the term model and its type signatures.
"""
from enum import Enum
from typing import Optional, Sequence

from ..errors import TermTypeError
from .types import Type


class Op(Enum):
    """Term operators. Values are the SMT-LIB symbols."""
    ITE = "ite"
    IMPLIES = "=>"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    IDIV = "div"
    MOD = "mod"
    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    EQ = "="
    NOT = "not"
    AND = "and"
    OR = "or"

    @classmethod
    def of_str(cls, s: str) -> Optional["Op"]:
        """Parse an operator, accepting the script-level aliases.

        Returns None if ``s`` is not an operator.
        """
        return _ALIASES.get(s)

    @property
    def smt_name(self) -> str:
        return self.value

    @property
    def min_arity(self) -> int:
        if self in (Op.NOT, Op.ADD, Op.SUB, Op.AND, Op.OR):
            return 1
        if self is Op.ITE:
            return 3
        return 2

    @property
    def max_arity(self) -> Optional[int]:
        """Maximal arity, None if unbounded."""
        if self is Op.NOT:
            return 1
        if self in (Op.MOD, Op.DIV, Op.IDIV):
            return 2
        if self is Op.ITE:
            return 3
        return None

    @property
    def is_relation(self) -> bool:
        return self in _RELATIONS

    @property
    def is_bool_connective(self) -> bool:
        return self in (Op.IMPLIES, Op.AND, Op.OR, Op.NOT)

    def type_check(self, arg_types: Sequence[Type]) -> Type:
        """Compute the result type of an application of this operator.

        Args:
            arg_types: Types of the operands, in order

        Returns:
            Result type

        Raises:
            TermTypeError: On arity or operand type mismatch
        """
        n = len(arg_types)
        if n < self.min_arity:
            raise TermTypeError(
                f"'{self.value}' expects at least {self.min_arity} argument(s), got {n}")
        if self.max_arity is not None and n > self.max_arity:
            raise TermTypeError(
                f"'{self.value}' expects at most {self.max_arity} argument(s), got {n}")

        if self is Op.ITE:
            cnd, thn, els = arg_types
            if cnd is not Type.BOOL:
                raise TermTypeError(
                    f"'ite' expects a bool condition, got '{cnd}'")
            if thn is not els:
                raise TermTypeError(
                    f"'ite' branches must have the same type, got '{thn}' and '{els}'")
            return thn

        if self.is_bool_connective:
            for t in arg_types:
                if t is not Type.BOOL:
                    raise TermTypeError(
                        f"'{self.value}' arguments must all be bool, got '{t}'")
            return Type.BOOL

        first = arg_types[0]
        for t in arg_types[1:]:
            if t is not first:
                raise TermTypeError(
                    f"'{self.value}' arguments must all have the same type, "
                    f"got '{first}' and '{t}'")

        if self is Op.EQ:
            return Type.BOOL

        # Arithmetic operators and relations
        if not first.is_arith:
            raise TermTypeError(
                f"'{self.value}' arguments must be arithmetic, got '{first}'")
        if self in (Op.IDIV, Op.MOD) and first is not Type.INT:
            raise TermTypeError(
                f"'{self.value}' only applies to int arguments, got '{first}'")
        if self is Op.DIV:
            return Type.RAT
        if self.is_relation:
            return Type.BOOL
        return first

    def __str__(self) -> str:
        return self.value


_RELATIONS = frozenset([Op.GE, Op.LE, Op.GT, Op.LT])

_ALIASES = {op.value: op for op in Op}
_ALIASES.update({
    "implies": Op.IMPLIES,
    "⇒": Op.IMPLIES,
    "≥": Op.GE,
    "≤": Op.LE,
    "!": Op.NOT,
    "¬": Op.NOT,
    "&&": Op.AND,
    "⋀": Op.AND,
    "||": Op.OR,
    "⋁": Op.OR,
    "%": Op.MOD,
})
