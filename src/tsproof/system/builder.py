"""
Script AST to System translation.

Resolves lexical scoping (declarations, let bindings, shadowing) into a flat
System whose only variables are state variables.
"""
import logging
from fractions import Fraction
from typing import Dict, List, Optional, Set

from ..errors import (
    DuplicateDeclaration,
    IllegalNextReference,
    TermTypeError,
    UnknownNextReference,
    UnknownOperator,
    UnknownTypeName,
)
from ..term import (
    Op,
    Role,
    Term,
    Type,
    Variable,
    VarRef,
    conj,
    free_refs,
    mk_app,
    mk_bool,
    mk_int,
    mk_rat,
    offsets_of,
    substitute,
)
from . import ast
from .scope import Binding, Scope, ScopeStack
from .system import BuildResult, Diagnostic, System

logger = logging.getLogger(__name__)


class SystemBuilder:
    """Builds a System from a script AST.

    The build follows these steps:
    1. Walk items in order, declaring state variables and let bindings in the
       current scope
    2. Translate init/trans/property expressions, resolving names against the
       scope stack
    3. Eliminate let placeholders by substitution as soon as an expression
       is complete
    4. Check step constraints and collect non-fatal diagnostics
    """

    def __init__(self):
        self._reset()

    def _reset(self):
        self.scopes = ScopeStack()
        self.variables: List[Variable] = []
        self.init_terms: List[Term] = []
        self.trans_terms: List[Term] = []
        self.properties: Dict[str, Term] = {}
        self.diagnostics: List[Diagnostic] = []
        self._state_names: Set[str] = set()
        self._rename_counter = 0

    def build(self, script: ast.Script) -> BuildResult:
        """Build a system from ``script``.

        Args:
            script: Parsed script

        Returns:
            BuildResult with the finalized system and warnings

        Raises:
            BuildError: On the first scoping, typing or step error; the
                script is rejected as a whole
        """
        self._reset()
        logger.debug("building system '%s' (%d items)", script.name, len(script.items))

        for item in script.items:
            self._translate_item(item)
        self._report_unused(self.scopes.current)

        trans = conj(self.trans_terms)
        self._report_unconstrained(trans)

        system = System(
            variables=tuple(self.variables),
            init=conj(self.init_terms),
            trans=trans,
            properties=dict(self.properties),
            name=script.name,
        )
        for diag in self.diagnostics:
            logger.warning("%s", diag)
        return BuildResult(system, tuple(self.diagnostics))

    # Items

    def _translate_item(self, item: ast.Item) -> None:
        if isinstance(item, ast.VarDecl):
            self._translate_var_decl(item)
        elif isinstance(item, ast.LetDecl):
            self._translate_let(item)
        elif isinstance(item, ast.Init):
            for e in item.exprs:
                self.init_terms.append(self._step0_formula(e, "init"))
        elif isinstance(item, ast.Trans):
            for e in item.exprs:
                self.trans_terms.append(self._formula(e, "trans"))
        elif isinstance(item, ast.Property):
            self._translate_property(item)
        elif isinstance(item, ast.Block):
            with self.scopes.nested() as scope:
                for sub in item.items:
                    self._translate_item(sub)
                self._report_unused(scope)
        else:
            raise TypeError(f"Unsupported script item: {type(item)}")

    def _translate_var_decl(self, decl: ast.VarDecl) -> None:
        try:
            typ = Type.of_str(decl.typ)
        except ValueError:
            raise UnknownTypeName(f"unknown type '{decl.typ}'", name=decl.typ, span=decl.span) from None

        for name in decl.names:
            self.scopes.current.check_undeclared(name, decl.span)
            var = Variable(self._state_name(name, decl.span), typ)
            self.scopes.declare(Binding(name, var, span=decl.span))
            self.variables.append(var)
            self._state_names.add(var.name)

    def _state_name(self, name: str, span: Optional[ast.Span]) -> str:
        """Globally unique name for a state variable.

        A declaration clashing with an existing state variable gets a
        ``name#N`` suffix.
        """
        if name not in self._state_names:
            return name
        while True:
            self._rename_counter += 1
            candidate = f"{name}#{self._rename_counter}"
            if candidate not in self._state_names:
                break
        self.diagnostics.append(Diagnostic(
            f"state variable '{name}' clashes with another state variable, renamed to '{candidate}'",
            name=name,
            span=span))
        return candidate

    def _translate_let(self, decl: ast.LetDecl) -> None:
        self.scopes.current.check_undeclared(decl.name, decl.span)
        value = self._closed(decl.value)
        placeholder = Variable(decl.name, value.type, Role.LET)
        self.scopes.declare(Binding(decl.name, placeholder, value=value, span=decl.span))

    def _translate_property(self, prop: ast.Property) -> None:
        if prop.name in self.properties:
            raise DuplicateDeclaration(
                f"property '{prop.name}' is already declared", name=prop.name, span=prop.span)
        self.properties[prop.name] = self._step0_formula(prop.expr, f"property '{prop.name}'")

    # Expressions

    def _closed(self, expr: ast.Expr) -> Term:
        """Translate ``expr`` and eliminate every visible let placeholder."""
        return substitute(self._translate_expr(expr), self.scopes.visible_lets())

    def _formula(self, expr: ast.Expr, what: str) -> Term:
        term = self._closed(expr)
        if term.type is not Type.BOOL:
            raise TermTypeError(
                f"{what} expression must be bool, got '{term.type}'", span=_span_of(expr))
        return term

    def _step0_formula(self, expr: ast.Expr, what: str) -> Term:
        term = self._formula(expr, what)
        if any(off != 0 for off in offsets_of(term)):
            raise IllegalNextReference(
                f"{what} cannot reference next-state variables", span=_span_of(expr))
        return term

    def _translate_expr(self, expr: ast.Expr) -> Term:
        if isinstance(expr, ast.Literal):
            return self._translate_literal(expr)
        elif isinstance(expr, ast.Name):
            return self._translate_name(expr)
        elif isinstance(expr, ast.Apply):
            return self._translate_apply(expr)
        elif isinstance(expr, ast.LetIn):
            with self.scopes.nested() as scope:
                for binding in expr.bindings:
                    self._translate_let(binding)
                body = self._closed(expr.body)
                self._report_unused(scope)
            return body
        raise TypeError(f"Unsupported expression: {type(expr)}")

    def _translate_literal(self, lit: ast.Literal) -> Term:
        value = lit.value
        if isinstance(value, bool):
            return mk_bool(value)
        if isinstance(value, int):
            return mk_int(value)
        if isinstance(value, (Fraction, str, float)):
            try:
                return mk_rat(Fraction(str(value)) if isinstance(value, float) else value)
            except (ValueError, ZeroDivisionError):
                pass
        raise TermTypeError(f"invalid literal {value!r}", span=lit.span)

    def _translate_name(self, name: ast.Name) -> Term:
        if name.next:
            binding = self.scopes.find(name.ident)
            if binding is None or binding.is_let:
                raise UnknownNextReference(
                    f"'{name.ident}' is not a state variable and has no next-state form",
                    name=name.ident,
                    span=name.span)
        else:
            binding = self.scopes.lookup(name.ident, name.span)
        binding.used = True
        return VarRef(binding.variable, 1 if name.next else 0)

    def _translate_apply(self, app: ast.Apply) -> Term:
        op = Op.of_str(app.op)
        if op is None:
            raise UnknownOperator(f"unknown operator '{app.op}'", name=app.op, span=app.span)
        args = [self._translate_expr(a) for a in app.args]
        try:
            return mk_app(op, args)
        except TermTypeError as err:
            raise TermTypeError(err.message, name=app.op, span=app.span) from None

    # Diagnostics

    def _report_unused(self, scope: Scope) -> None:
        for binding in scope:
            if binding.is_let and not binding.used:
                self.diagnostics.append(Diagnostic(
                    f"unused let binding '{binding.name}'", name=binding.name, span=binding.span))

    def _report_unconstrained(self, trans: Term) -> None:
        refs = free_refs(trans)
        for var in self.variables:
            if VarRef(var, 1) not in refs:
                self.diagnostics.append(Diagnostic(
                    f"next state of '{var.name}' is unconstrained", name=var.name))


def _span_of(expr: ast.Expr) -> Optional[ast.Span]:
    return getattr(expr, "span", None)


def build_system(script: ast.Script) -> BuildResult:
    """Build a system from a script AST (see SystemBuilder.build)."""
    return SystemBuilder().build(script)
