"""
Flat, scope-free transition system.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import InvalidSystem
from ..term import TRUE, Term, Type, Variable, free_refs
from .ast import Span


@dataclass(frozen=True, eq=False)
class System:
    """A transition system over typed state variables.

    Attributes:
        variables: State variables, in declaration order
        init: Initial predicate, over step 0 only
        trans: Transition predicate, over steps 0 (current) and 1 (next)
        properties: Candidate invariants by name, over step 0 only
        name: Display name

    Raises:
        InvalidSystem: On construction, if any invariant above is violated
    """
    variables: Tuple[Variable, ...]
    init: Term = TRUE
    trans: Term = TRUE
    properties: Mapping[str, Term] = field(default_factory=dict)
    name: str = "system"

    def __post_init__(self):
        object.__setattr__(self, "variables", tuple(self.variables))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

        names = set()
        for v in self.variables:
            if not v.is_state:
                raise InvalidSystem(f"variable '{v.name}' is not a state variable")
            if v.name in names:
                raise InvalidSystem(f"state variable '{v.name}' declared twice")
            names.add(v.name)

        self._check("init", self.init, (0,))
        self._check("trans", self.trans, (0, 1))
        for pname, prop in self.properties.items():
            self._check(f"property '{pname}'", prop, (0,))

    def _check(self, what: str, term: Term, offsets: Tuple[int, ...]) -> None:
        if term.type is not Type.BOOL:
            raise InvalidSystem(f"{what} must be bool, got '{term.type}'")
        known = set(self.variables)
        for ref in free_refs(term):
            if ref.var not in known:
                raise InvalidSystem(f"{what} references undeclared variable '{ref.var.name}'")
            if ref.offset not in offsets:
                raise InvalidSystem(f"{what} references '{ref}' outside steps {list(offsets)}")

    def variable(self, name: str) -> Variable:
        for v in self.variables:
            if v.name == name:
                return v
        raise KeyError(name)

    def get_property(self, name: str) -> Term:
        try:
            return self.properties[name]
        except KeyError:
            raise KeyError(f"unknown property '{name}' (known: {sorted(self.properties)})") from None

    @property
    def property_names(self) -> List[str]:
        return list(self.properties)

    def __str__(self) -> str:
        lines = [f"system {self.name}"]
        for v in self.variables:
            lines.append(f"  var {v.name}: {v.type}")
        lines.append(f"  init {self.init}")
        lines.append(f"  trans {self.trans}")
        for pname, prop in self.properties.items():
            lines.append(f"  prop {pname}: {prop}")
        return "\n".join(lines)


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal build warning."""
    message: str
    name: Optional[str] = None
    span: Optional[Span] = None

    def __str__(self) -> str:
        if self.span is not None:
            return f"{self.span}: warning: {self.message}"
        return f"warning: {self.message}"


@dataclass(frozen=True)
class BuildResult:
    """Output of the system builder."""
    system: System
    diagnostics: Tuple[Diagnostic, ...] = ()

    def warnings_for(self, name: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.name == name]


def make_system(variables: Iterable[Variable],
                init: Term = TRUE,
                trans: Term = TRUE,
                properties: Optional[Dict[str, Term]] = None,
                name: str = "system") -> System:
    """Convenience constructor for systems built directly from terms."""
    return System(tuple(variables), init, trans, dict(properties or {}), name)
