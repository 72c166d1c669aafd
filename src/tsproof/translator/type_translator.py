"""
Type translator from term-model types to Z3 sorts and back.
"""
from fractions import Fraction
from typing import Any, Optional

import z3

from ..errors import SolverError
from ..term import AlgebraicValue, Type, Value


class TypeTranslator:
    """Translates term-model types to Z3 and Z3 values to Python.

    Mapping:
        bool -> Bool
        int -> Int
        rat -> Real
    """

    def __init__(self, ctx: Optional[z3.Context] = None):
        """Initialize type translator.

        Args:
            ctx: Z3 context owning every created object (main context if None)
        """
        self.ctx = ctx

    def translate_sort(self, typ: Type) -> z3.SortRef:
        if typ is Type.BOOL:
            return z3.BoolSort(self.ctx)
        if typ is Type.INT:
            return z3.IntSort(self.ctx)
        return z3.RealSort(self.ctx)

    def translate_var(self, name: str, typ: Type) -> z3.ExprRef:
        """Create a Z3 constant.

        Args:
            name: Constant name
            typ: Term-model type

        Returns:
            Z3 Bool, Int or Real constant
        """
        return z3.Const(name, self.translate_sort(typ))

    def translate_value(self, value: Value, typ: Type) -> z3.ExprRef:
        if typ is Type.BOOL:
            return z3.BoolVal(bool(value), self.ctx)
        if typ is Type.INT:
            return z3.IntVal(int(value), self.ctx)
        frac = Fraction(value)
        return z3.RatVal(frac.numerator, frac.denominator, self.ctx)

    def to_python(self, value: Any) -> Any:
        """Convert a Z3 model value to a Python value.

        Integers become ``int``, rationals ``Fraction``, booleans ``bool``
        and irrational algebraic numbers ``AlgebraicValue``.

        Raises:
            SolverError: For any other kind of value
        """
        if z3.is_true(value):
            return True
        if z3.is_false(value):
            return False
        if z3.is_int_value(value):
            return value.as_long()
        if z3.is_rational_value(value):
            return Fraction(value.numerator_as_long(), value.denominator_as_long())
        if z3.is_algebraic_value(value):
            approx = value.approx(20)
            return AlgebraicValue(value.sexpr(),
                                  Fraction(approx.numerator_as_long(), approx.denominator_as_long()))
        raise SolverError(f"unsupported model value {value}")
