"""
Term model: typed expression trees over step-indexed variables.
"""

from .types import Type, Role, Variable
from .ops import Op
from .term import (
    AlgebraicValue,
    Const,
    VarRef,
    App,
    Term,
    Value,
    TRUE,
    FALSE,
    format_value,
    mk_bool,
    mk_int,
    mk_rat,
    mk_const,
    mk_var,
    mk_app,
    negate,
    conj,
    disj,
    implies,
    eq,
    fold,
    reindex,
    substitute,
    free_refs,
    variables_of,
    offsets_of,
    size,
)
from .evaluate import evaluate, apply_op

__all__ = [
    "AlgebraicValue",
    "Type",
    "Role",
    "Variable",
    "Op",
    "Const",
    "VarRef",
    "App",
    "Term",
    "Value",
    "TRUE",
    "FALSE",
    "format_value",
    "mk_bool",
    "mk_int",
    "mk_rat",
    "mk_const",
    "mk_var",
    "mk_app",
    "negate",
    "conj",
    "disj",
    "implies",
    "eq",
    "fold",
    "reindex",
    "substitute",
    "free_refs",
    "variables_of",
    "offsets_of",
    "size",
    "evaluate",
    "apply_op",
]
