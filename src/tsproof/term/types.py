"""
Types and variables of the term model.
"""
from dataclasses import dataclass
from enum import Enum


class Type(Enum):
    """Type of a term.

    Mapping to SMT-LIB sorts:
        BOOL -> Bool
        INT -> Int
        RAT -> Real
    """
    BOOL = "bool"
    INT = "int"
    RAT = "rat"

    @classmethod
    def of_str(cls, name: str) -> "Type":
        """Resolve a type name as written in scripts.

        Raises:
            ValueError: If the name is not a known type
        """
        key = name.strip().lower()
        if key == "real":
            key = "rat"
        for t in cls:
            if t.value == key:
                return t
        raise ValueError(f"unknown type '{name}'")

    @property
    def is_arith(self) -> bool:
        return self is not Type.BOOL

    @property
    def smt_sort(self) -> str:
        return _SMT_SORTS[self]

    def __str__(self) -> str:
        return self.value


_SMT_SORTS = {
    Type.BOOL: "Bool",
    Type.INT: "Int",
    Type.RAT: "Real",
}


class Role(Enum):
    """What a variable stands for."""
    STATE = "state"
    LET = "let"


@dataclass(frozen=True)
class Variable:
    """A typed variable.

    State variables have global, step-independent identity once a system is
    finalized. Let-bound variables only exist while a script is being built
    and never survive into a system.
    """
    name: str
    type: Type
    role: Role = Role.STATE

    @property
    def is_state(self) -> bool:
        return self.role is Role.STATE

    def __str__(self) -> str:
        return self.name
