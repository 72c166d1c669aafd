"""
Script AST consumed by the system builder.

Produced by a script parser (not part of this package). Scoping is purely
syntactic here: the builder resolves names, shadowing and duplicates.
"""
from dataclasses import dataclass, field
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Span:
    """Source location of a node."""
    line: int = 0
    col: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"


NO_SPAN = Span()


# Expressions

@dataclass(frozen=True)
class Literal:
    """Constant: bool, int, or Fraction/str for rationals (``"1/2"``)."""
    value: Any
    span: Span = NO_SPAN


@dataclass(frozen=True)
class Name:
    """Reference to a declared name. ``next`` selects the next-state form."""
    ident: str
    next: bool = False
    span: Span = NO_SPAN


@dataclass(frozen=True)
class Apply:
    """Operator application; ``op`` is an operator string such as ``"+"``."""
    op: str
    args: Tuple["Expr", ...] = ()
    span: Span = NO_SPAN


@dataclass(frozen=True)
class LetIn:
    """``let a = e1; b = e2 in body``. Bindings are visible in later bindings and in the body."""
    bindings: Tuple["LetDecl", ...]
    body: "Expr"
    span: Span = NO_SPAN


Expr = Union[Literal, Name, Apply, LetIn]


# Items

@dataclass(frozen=True)
class VarDecl:
    """Declares one or more state variables of the same type."""
    names: Tuple[str, ...]
    typ: str
    span: Span = NO_SPAN


@dataclass(frozen=True)
class LetDecl:
    """Binds ``name`` to an expression for the rest of the enclosing scope."""
    name: str
    value: Expr
    span: Span = NO_SPAN


@dataclass(frozen=True)
class Init:
    """Initial-state constraints, conjoined."""
    exprs: Tuple[Expr, ...]
    span: Span = NO_SPAN


@dataclass(frozen=True)
class Trans:
    """Transition constraints, conjoined."""
    exprs: Tuple[Expr, ...]
    span: Span = NO_SPAN


@dataclass(frozen=True)
class Property:
    """Named candidate invariant."""
    name: str
    expr: Expr
    span: Span = NO_SPAN


@dataclass(frozen=True)
class Block:
    """Nested scope."""
    items: Tuple["Item", ...]
    span: Span = NO_SPAN


Item = Union[VarDecl, LetDecl, Init, Trans, Property, Block]


@dataclass(frozen=True)
class Script:
    """Root of a script."""
    items: Tuple[Item, ...] = field(default_factory=tuple)
    name: str = "system"
