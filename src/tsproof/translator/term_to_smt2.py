"""
Term to SMT-LIBv2 text translation.

This is solver-independent: it only emits SMT-LIBv2 and does not require the
Python Z3 bindings.
"""
from fractions import Fraction
from typing import List

from ..term import App, Op, Term, Type, Value, Variable, VarRef, fold


def symbol(var: Variable, step: int) -> str:
    """Quoted SMT-LIB symbol of ``var`` at ``step``."""
    return f"|{var.name}@{step}|"


def value_to_smt2(value: Value, typ: Type) -> str:
    if typ is Type.BOOL:
        return "true" if value else "false"
    if typ is Type.INT:
        return f"(- {-value})" if value < 0 else str(value)
    frac = Fraction(value)
    num, den = abs(frac.numerator), frac.denominator
    body = f"{num}.0" if den == 1 else f"(/ {num}.0 {den}.0)"
    return f"(- {body})" if frac < 0 else body


def declare_smt2(var: Variable, step: int) -> str:
    return f"(declare-const {symbol(var, step)} {var.type.smt_sort})"


def term_to_smt2(term: Term) -> str:
    """Render a term placed on absolute steps as an SMT-LIB expression."""
    return fold(
        term,
        lambda c: value_to_smt2(c.value, c.type),
        lambda ref: symbol(ref.var, ref.offset),
        _app_to_smt2,
    )


def _app_to_smt2(app: App, args: List[str]) -> str:
    if app.op is Op.DIV and app.args[0].type is Type.INT:
        args = [f"(to_real {a})" for a in args]
    return "(" + " ".join([app.op.smt_name] + args) + ")"


def assert_smt2(term: Term) -> str:
    return f"(assert {term_to_smt2(term)})"


def get_value_smt2(refs: List[VarRef]) -> str:
    return "(get-value (" + " ".join(symbol(r.var, r.offset) for r in refs) + "))"
