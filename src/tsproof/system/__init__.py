"""
Transition systems and the scoped builder that produces them from scripts.
"""

from . import ast
from .scope import Binding, Scope, ScopeStack
from .system import System, Diagnostic, BuildResult, make_system
from .builder import SystemBuilder, build_system

__all__ = [
    "ast",
    "Binding",
    "Scope",
    "ScopeStack",
    "System",
    "Diagnostic",
    "BuildResult",
    "make_system",
    "SystemBuilder",
    "build_system",
]
