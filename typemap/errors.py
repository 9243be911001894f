"""Errors raised while building or exporting a type map."""

from __future__ import annotations


class BuildError(Exception):
    """Base class for every failure that aborts a build."""


class SourceReadError(BuildError):
    """The source file could not be opened or decoded."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        super().__init__(f"Cannot read {self.path}: {reason}")


class ParseError(BuildError):
    """The source text is not syntactically valid Rust."""

    def __init__(self, line: int, column: int, snippet: str,
                 path: str | None = None):
        self.line = line
        self.column = column
        self.snippet = snippet
        self.path = path
        where = f"{path}:" if path else "line "
        super().__init__(
            f"Syntax error at {where}{line}:{column} near {snippet!r}"
        )


class UnsupportedDeclaration(BuildError):
    """A top-level item is not a struct, enum, union, type alias or trait."""

    def __init__(self, kind: str, line: int, name: str | None = None):
        self.kind = kind
        self.line = line
        self.name = name
        label = f"{kind} `{name}`" if name else kind
        super().__init__(f"Unsupported declaration {label} at line {line}")


class UnsupportedGenericParameter(BuildError):
    """A const generic parameter was found in strict mode."""

    def __init__(self, name: str, owner: str | None = None):
        self.name = name
        self.owner = owner
        suffix = f" on `{owner}`" if owner else ""
        super().__init__(f"Const generic parameter `{name}`{suffix} is not supported")


class RenderError(Exception):
    """The dependency graph could not be rendered to a diagram file."""


__all__ = [
    "BuildError", "SourceReadError", "ParseError",
    "UnsupportedDeclaration", "UnsupportedGenericParameter", "RenderError",
]
