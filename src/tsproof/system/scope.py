"""
Lexical scopes used while building a system.

A lookup resolves to the innermost binding. Declaring a name in a nested
scope shadows the outer binding without touching it; popping the nested
scope makes the outer binding visible again.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from ..errors import DuplicateDeclaration, UnboundVariable
from ..term import Term, Variable
from .ast import Span


@dataclass
class Binding:
    """What a name is bound to.

    Attributes:
        name: Name as written in the script
        variable: State variable, or placeholder variable for a let binding
        value: Let-bound term (None for state variables)
        span: Declaration site
        used: Set once the binding is referenced
    """
    name: str
    variable: Variable
    value: Optional[Term] = None
    span: Optional[Span] = None
    used: bool = False

    @property
    def is_let(self) -> bool:
        return self.value is not None


class Scope:
    """One level of name bindings."""

    def __init__(self):
        self.bindings: Dict[str, Binding] = {}

    def check_undeclared(self, name: str, span: Optional[Span] = None) -> None:
        """Raise DuplicateDeclaration if ``name`` is already bound in this scope."""
        prev = self.bindings.get(name)
        if prev is not None:
            where = f" (previous declaration at {prev.span})" if prev.span is not None else ""
            raise DuplicateDeclaration(
                f"'{name}' is already declared in this scope{where}",
                name=name,
                span=span)

    def declare(self, binding: Binding) -> None:
        self.check_undeclared(binding.name, binding.span)
        self.bindings[binding.name] = binding

    def get(self, name: str) -> Optional[Binding]:
        return self.bindings.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.bindings

    def __iter__(self) -> Iterator[Binding]:
        return iter(self.bindings.values())


class ScopeStack:
    """Stack of scopes; the bottom one is the script's top level."""

    def __init__(self):
        self._scopes: List[Scope] = [Scope()]

    @property
    def depth(self) -> int:
        return len(self._scopes)

    @property
    def current(self) -> Scope:
        return self._scopes[-1]

    def push(self) -> Scope:
        scope = Scope()
        self._scopes.append(scope)
        return scope

    def pop(self) -> Scope:
        if len(self._scopes) == 1:
            raise IndexError("cannot pop the top-level scope")
        return self._scopes.pop()

    @contextmanager
    def nested(self) -> Iterator[Scope]:
        """Push a scope for the duration of a ``with`` block."""
        scope = self.push()
        try:
            yield scope
        finally:
            self.pop()

    def declare(self, binding: Binding) -> None:
        self.current.declare(binding)

    def find(self, name: str) -> Optional[Binding]:
        for scope in reversed(self._scopes):
            binding = scope.get(name)
            if binding is not None:
                return binding
        return None

    def lookup(self, name: str, span: Optional[Span] = None) -> Binding:
        """Resolve ``name`` to its innermost binding.

        Raises:
            UnboundVariable: If no enclosing scope binds ``name``
        """
        binding = self.find(name)
        if binding is None:
            raise UnboundVariable(f"unknown identifier '{name}'", name=name, span=span)
        return binding

    def visible_lets(self) -> Dict[Variable, Term]:
        """Let placeholders visible from the current scope, innermost last."""
        out: Dict[Variable, Term] = {}
        for scope in self._scopes:
            for binding in scope:
                if binding.is_let:
                    out[binding.variable] = binding.value
        return out
