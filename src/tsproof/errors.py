"""
Exception hierarchy for tsproof.

Build errors reject a script as a whole. Protocol errors flag misuse of a
solver session and are programming errors. Oracle inconclusiveness is never
an exception: it surfaces as an ``Unknown`` proof result.
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .system.ast import Span


class TsProofError(Exception):
    """Base class for all tsproof errors."""


class BuildError(TsProofError):
    """Error raised while turning a script into a system.

    Attributes:
        message: Human-readable description
        name: Offending identifier, if any
        span: Source location from the script AST, if any
    """

    def __init__(self, message: str, name: Optional[str] = None,
                 span: Optional["Span"] = None):
        self.message = message
        self.name = name
        self.span = span
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.span is not None:
            return f"{self.span}: {self.message}"
        return self.message


class DuplicateDeclaration(BuildError):
    """A name is declared twice in the same scope."""


class UnboundVariable(BuildError):
    """A name is used with no declaration reaching it."""


class UnknownNextReference(BuildError):
    """Next-state form used on a name that is not a state variable."""


class IllegalNextReference(BuildError):
    """Next-state reference in a step-0-only context (init, properties)."""


class UnknownOperator(BuildError):
    """Operator string not in the closed operator set."""


class UnknownTypeName(BuildError):
    """Type name that does not denote bool, int or rat."""


class TermTypeError(BuildError, TypeError):
    """Operand types incompatible with an operator's signature."""


class InvalidSystem(TsProofError, ValueError):
    """A system violates its structural invariants."""


class ProtocolError(TsProofError, RuntimeError):
    """A solver session was used out of protocol."""


class SolverError(TsProofError):
    """The oracle reported an error or died unexpectedly."""


class EvaluationError(TsProofError):
    """A term could not be evaluated to a constant."""
