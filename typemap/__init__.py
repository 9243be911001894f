"""typemap - type dependency graphs for Rust source files.

Requires tree-sitter with the Rust grammar: ``pip install typemap``

Usage::

    from typemap import build

    tm = build("src/lib.rs")
    tm.graph["A"]   # frozenset({Dependence(kind=FIELD, name='B'), ...})
"""

try:
    import tree_sitter  # noqa: F401
except ImportError:
    raise ImportError(
        "typemap requires tree-sitter. "
        "Install with: pip install tree-sitter tree-sitter-rust"
    ) from None

from .builder import TypeMap, DependencyGraph, build, assemble, declaration_dependencies
from .errors import (
    BuildError, SourceReadError, ParseError,
    UnsupportedDeclaration, UnsupportedGenericParameter, RenderError,
)
from .extract import base_types, bound_dependencies, parameter_names
from .parsers.models import DeclarationKind, Dependence, DependenceKind

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "build", "TypeMap", "DependencyGraph", "assemble", "declaration_dependencies",
    "base_types", "bound_dependencies", "parameter_names",
    "Dependence", "DependenceKind", "DeclarationKind",
    "BuildError", "SourceReadError", "ParseError",
    "UnsupportedDeclaration", "UnsupportedGenericParameter", "RenderError",
]
