"""
Build the type dependency graph of a single Rust source file.

Parses the file with tree-sitter, collects every struct, enum, union, type
alias and trait, and records for each one the types it embeds (``Field``
edges) and the traits it requires (``Trait`` edges). Generic parameter names
are placeholders and never become edges; their bounds do.
"""

from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .extract import bound_dependencies, parameter_names, type_references
from .parsers.models import (
    ConstParam, Declaration, DeclarationKind, Dependence, ParseResult,
)
from .parsers.rust import RustParser

OPAQUE_BOUND_MODES = ("field", "trait")

DependencyGraph = Mapping[str, frozenset[Dependence]]


# ── Assembly ───────────────────────────────────────────────────────────


def declaration_dependencies(
    decl: Declaration,
    *,
    strict: bool = False,
    opaque_bounds: str = "field",
    supertraits: bool = False,
    extended_types: bool = False,
) -> set[Dependence]:
    """Dependencies of one declaration.

    deps = (field_deps - generic_names) | generic_deps

    A field typed ``T`` (or ``T::Assoc``) where ``T`` is a parameter of the
    declaration is not an edge. Bounds on ``T`` and ``where`` predicates are
    ``Trait`` edges, and so are supertraits when ``supertraits`` is set.
    Names inside ``impl`` bounds travel with the fields unless
    ``opaque_bounds="trait"``. ``dyn`` types and raw pointers are only
    walked with ``extended_types``.
    """
    generic_names = parameter_names(decl.generics, strict=strict, owner=decl.name)
    generic_deps = bound_dependencies(decl.generics, strict=strict, owner=decl.name)

    field_names: set[str] = set()
    opaque_names: set[str] = set()
    for group in decl.field_groups:
        for ty in group.types:
            for name, from_opaque in type_references(ty, extended=extended_types):
                if from_opaque and opaque_bounds == "trait":
                    opaque_names.add(name)
                else:
                    field_names.add(name)

    deps = {
        Dependence.field(name)
        for name in field_names
        if name.split("::", 1)[0] not in generic_names
    }
    deps.update(Dependence.trait(name) for name in generic_deps)
    deps.update(Dependence.trait(bound.name) for bound in decl.extra_bounds)
    if supertraits:
        deps.update(Dependence.trait(bound.name) for bound in decl.supertraits)
    deps.update(Dependence.trait(name) for name in opaque_names)
    return deps


def assemble(
    declarations: Iterable[Declaration],
    *,
    strict: bool = False,
    opaque_bounds: str = "field",
    supertraits: bool = False,
    extended_types: bool = False,
    warnings: list[dict[str, str]] | None = None,
) -> tuple[dict[str, frozenset[Dependence]], dict[str, DeclarationKind]]:
    """Combine per-declaration dependencies into one graph keyed by name."""
    if opaque_bounds not in OPAQUE_BOUND_MODES:
        raise ValueError(
            f"opaque_bounds must be one of {OPAQUE_BOUND_MODES}, got {opaque_bounds!r}"
        )
    if warnings is None:
        warnings = []

    graph: dict[str, set[Dependence]] = {}
    kinds: dict[str, DeclarationKind] = {}
    for decl in declarations:
        deps = declaration_dependencies(
            decl, strict=strict, opaque_bounds=opaque_bounds,
            supertraits=supertraits, extended_types=extended_types,
        )
        for param in decl.generics:
            if isinstance(param, ConstParam):
                warnings.append({
                    "context": decl.name,
                    "message": f"dropped const generic parameter `{param.name}`",
                })
        if decl.name in graph:
            warnings.append({
                "context": decl.name,
                "message": f"duplicate declaration at line {decl.line_number}, "
                           f"dependencies merged into the first {kinds[decl.name].value}",
            })
            graph[decl.name] |= deps
        else:
            graph[decl.name] = deps
            kinds[decl.name] = decl.kind
    return {name: frozenset(deps) for name, deps in graph.items()}, kinds


# ── Public API ─────────────────────────────────────────────────────────


class TypeMap:
    """A dependency graph of the user-defined types in one source file.

    The graph maps each declared type name to the frozenset of
    ``Dependence`` edges leaving it. Targets that are never declared in the
    file (``i32``, ``std::collections::HashMap``) have no entry of their own.
    """

    def __init__(
        self,
        graph: dict[str, frozenset[Dependence]],
        kinds: dict[str, DeclarationKind],
        declarations: Iterable[Declaration] = (),
        warnings: list[dict[str, str]] | None = None,
        source_path: str | None = None,
    ):
        self._graph = graph
        self._kinds = kinds
        self.declarations = tuple(declarations)
        self.warnings = warnings if warnings is not None else []
        self.source_path = source_path

    @classmethod
    def from_source(
        cls,
        source: str | bytes,
        *,
        strict: bool = False,
        opaque_bounds: str = "field",
        alias_targets: bool = False,
        supertraits: bool = False,
        extended_types: bool = False,
        verbose: bool = False,
    ) -> TypeMap:
        """Build a TypeMap from Rust source text held in memory."""
        result = RustParser().parse_source(
            source, strict=strict, alias_targets=alias_targets,
        )
        return cls._from_result(result, None, strict=strict,
                                opaque_bounds=opaque_bounds, supertraits=supertraits,
                                extended_types=extended_types, verbose=verbose)

    @classmethod
    def build(
        cls,
        source_path: str | Path,
        *,
        strict: bool = False,
        opaque_bounds: str = "field",
        alias_targets: bool = False,
        supertraits: bool = False,
        extended_types: bool = False,
        verbose: bool = False,
    ) -> TypeMap:
        """Build a TypeMap from a single ``.rs`` file.

        Args:
            source_path: Path to the Rust source file.
            strict: If True, items that are not types and const generic
                parameters abort the build instead of being skipped.
            opaque_bounds: ``"field"`` records ``impl``/``dyn`` bounds as
                Field edges, ``"trait"`` records them as Trait edges.
            alias_targets: If True, the right-hand side of ``type X = ...;``
                is walked like a field.
            supertraits: If True, ``trait A: B`` and ``where Self: B``
                record a Trait edge to ``B``.
            extended_types: If True, ``dyn Trait`` bounds, bare ``Fn(..)``
                and raw pointer targets are walked too.
            verbose: If True, print progress information to stderr.

        Returns:
            The assembled TypeMap.

        Raises:
            SourceReadError: If the file cannot be read.
            ParseError: If the file is not valid Rust.
            UnsupportedDeclaration: In strict mode, for a non-type item.
            UnsupportedGenericParameter: In strict mode, for a const parameter.

        Example::

            from typemap import build

            tm = build("src/model.rs")
            for name, deps in tm.graph.items():
                print(name, sorted(str(d) for d in deps))
        """
        path = Path(source_path)
        if verbose:
            print(f"Parsing {path} ...", file=sys.stderr)
        result = RustParser().parse_file(path, strict=strict,
                                         alias_targets=alias_targets)
        return cls._from_result(result, str(path), strict=strict,
                                opaque_bounds=opaque_bounds, supertraits=supertraits,
                                extended_types=extended_types, verbose=verbose)

    @classmethod
    def _from_result(cls, result: ParseResult, source_path: str | None, *,
                     strict: bool, opaque_bounds: str, supertraits: bool,
                     extended_types: bool, verbose: bool) -> TypeMap:
        warnings = list(result.warnings)
        graph, kinds = assemble(result.declarations, strict=strict,
                                opaque_bounds=opaque_bounds, supertraits=supertraits,
                                extended_types=extended_types, warnings=warnings)
        type_map = cls(graph, kinds, result.declarations, warnings, source_path)

        if verbose:
            counts = Counter(d.kind.value for d in result.declarations)
            summary = ", ".join(f"{n} {kind}" for kind, n in sorted(counts.items()))
            print(f"Parsed: {result.loc} lines, "
                  f"{len(result.declarations)} declarations ({summary or 'none'}), "
                  f"{type_map.edge_count()} edges", file=sys.stderr)

        # Always print warnings (regardless of verbose)
        if warnings:
            print(f"  {len(warnings)} warning(s):", file=sys.stderr)
            for w in warnings:
                print(f"    [{w['context']}] {w['message']}", file=sys.stderr)
        return type_map

    # ── Read-only views ────────────────────────────────────────────────

    @property
    def graph(self) -> DependencyGraph:
        """Read-only mapping of type name to its dependencies."""
        return MappingProxyType(self._graph)

    @property
    def kinds(self) -> Mapping[str, DeclarationKind]:
        return MappingProxyType(self._kinds)

    def __getitem__(self, name: str) -> frozenset[Dependence]:
        return self._graph[name]

    def __contains__(self, name: object) -> bool:
        return name in self._graph

    def __iter__(self) -> Iterator[str]:
        return iter(self._graph)

    def __len__(self) -> int:
        return len(self._graph)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeMap):
            return NotImplemented
        return self._graph == other._graph and self._kinds == other._kinds

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (f"TypeMap({len(self._graph)} types, {self.edge_count()} edges"
                f"{', ' + self.source_path if self.source_path else ''})")

    def edges(self) -> list[tuple[str, Dependence]]:
        """All (source, dependence) pairs, sorted."""
        return sorted(
            (name, dep) for name, deps in self._graph.items() for dep in deps
        )

    def edge_count(self) -> int:
        return sum(len(deps) for deps in self._graph.values())

    def external_types(self) -> set[str]:
        """Dependency targets with no declaration in the file."""
        return {
            dep.name
            for deps in self._graph.values()
            for dep in deps
            if dep.name not in self._graph
        }


def build(
    source_path: str | Path,
    *,
    strict: bool = False,
    opaque_bounds: str = "field",
    alias_targets: bool = False,
    supertraits: bool = False,
    extended_types: bool = False,
    verbose: bool = False,
) -> TypeMap:
    """Parse one Rust file and return its TypeMap. See ``TypeMap.build``."""
    return TypeMap.build(source_path, strict=strict, opaque_bounds=opaque_bounds,
                         alias_targets=alias_targets, supertraits=supertraits,
                         extended_types=extended_types, verbose=verbose)
