"""
Translation from the term model to solver input (Z3 objects, SMT-LIB text).
"""

from .type_translator import TypeTranslator
from .term_to_z3 import TermToZ3Translator
from .term_to_smt2 import (
    symbol,
    value_to_smt2,
    declare_smt2,
    term_to_smt2,
    assert_smt2,
    get_value_smt2,
)

__all__ = [
    "TypeTranslator",
    "TermToZ3Translator",
    "symbol",
    "value_to_smt2",
    "declare_smt2",
    "term_to_smt2",
    "assert_smt2",
    "get_value_smt2",
]
