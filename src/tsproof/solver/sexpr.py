"""
Minimal S-expression reader for SMT-LIBv2 solver responses.

Atoms are returned as strings, lists as Python lists. Quoted symbols lose
their bars and string literals lose their double quotes.
"""
import re
from fractions import Fraction
from typing import List, Union

from ..errors import SolverError
from ..term import AlgebraicValue, Type, Value

SExpr = Union[str, List["SExpr"]]

_TOKEN_RE = re.compile(
    r'\s*(?:'
    r'(?P<comment>;[^\n]*)'
    r'|(?P<lp>\()'
    r'|(?P<rp>\))'
    r'|"(?P<string>(?:[^"]|"")*)"'
    r'|\|(?P<quoted>[^|]*)\|'
    r'|(?P<atom>[^\s()|";]+)'
    r')')


def tokenize(text: str) -> List[str]:
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None or m.end() == pos:
            raise SolverError(f"cannot read solver output at {pos}: {text[pos:pos + 20]!r}")
        pos = m.end()
        if m.group("comment") is not None:
            continue
        if m.group("lp") is not None:
            tokens.append("(")
        elif m.group("rp") is not None:
            tokens.append(")")
        elif m.group("string") is not None:
            tokens.append(_Atom(m.group("string").replace('""', '"')))
        elif m.group("quoted") is not None:
            tokens.append(_Atom(m.group("quoted")))
        else:
            tokens.append(_Atom(m.group("atom")))
    return tokens


class _Atom(str):
    """Marks tokens that are atoms, so an atom spelled "(" is not a paren."""


def parse(text: str) -> List[SExpr]:
    """Parse every S-expression in ``text``."""
    stack: List[List[SExpr]] = [[]]
    for tok in tokenize(text):
        if isinstance(tok, _Atom):
            stack[-1].append(str(tok))
        elif tok == "(":
            stack.append([])
        else:
            if len(stack) == 1:
                raise SolverError(f"unbalanced ')' in solver output: {text!r}")
            done = stack.pop()
            stack[-1].append(done)
    if len(stack) != 1:
        raise SolverError(f"incomplete solver output: {text!r}")
    return stack[0]


def parse_one(text: str) -> SExpr:
    exprs = parse(text)
    if len(exprs) != 1:
        raise SolverError(f"expected one S-expression, got {len(exprs)}: {text!r}")
    return exprs[0]


def render(sexpr: SExpr) -> str:
    """Print an S-expression back to text."""
    if isinstance(sexpr, str):
        return sexpr
    return "(" + " ".join(render(s) for s in sexpr) + ")"


def is_complete(text: str) -> bool:
    """True if ``text`` holds at least one token and balanced parentheses."""
    depth = 0
    seen = False
    in_string = in_quoted = False
    for ch in text:
        if in_string:
            in_string = ch != '"'
        elif in_quoted:
            in_quoted = ch != "|"
        elif ch == '"':
            in_string = seen = True
        elif ch == "|":
            in_quoted = seen = True
        elif ch == "(":
            depth += 1
            seen = True
        elif ch == ")":
            depth -= 1
        elif not ch.isspace():
            seen = True
    return seen and depth <= 0 and not in_string and not in_quoted


def parse_value(sexpr: SExpr, typ: Type) -> Value:
    """Read a model value of type ``typ``.

    Accepts the forms solvers print for values: ``true``/``false``,
    numerals, decimals, ``(- v)`` and ``(/ n d)``. Irrational reals printed
    as ``(root-obj p i)`` become an ``AlgebraicValue`` without approximation.
    """
    if typ is Type.BOOL:
        if sexpr == "true":
            return True
        if sexpr == "false":
            return False
        raise SolverError(f"expected a bool value, got {sexpr!r}")
    if typ is Type.RAT and isinstance(sexpr, list) and sexpr and sexpr[0] == "root-obj":
        return AlgebraicValue(render(sexpr))
    value = _parse_number(sexpr)
    if typ is Type.INT:
        if value.denominator != 1:
            raise SolverError(f"expected an int value, got {sexpr!r}")
        return int(value)
    return value


def _parse_number(sexpr: SExpr) -> Fraction:
    if isinstance(sexpr, str):
        try:
            return Fraction(sexpr)
        except ValueError:
            raise SolverError(f"expected a numeric value, got {sexpr!r}") from None
    if len(sexpr) == 2 and sexpr[0] == "-":
        return -_parse_number(sexpr[1])
    if len(sexpr) == 3 and sexpr[0] == "/":
        return _parse_number(sexpr[1]) / _parse_number(sexpr[2])
    # cvc5 may wrap integral reals in to_real
    if len(sexpr) == 2 and sexpr[0] == "to_real":
        return _parse_number(sexpr[1])
    raise SolverError(f"expected a numeric value, got {sexpr!r}")
