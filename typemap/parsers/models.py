"""Data models for declarations, generics and type expressions."""

from dataclasses import dataclass, field
from enum import Enum


class DeclarationKind(str, Enum):
    STRUCT = "struct"
    ENUM = "enum"
    UNION = "union"
    TYPE_ALIAS = "type_alias"
    TRAIT = "trait"


class DependenceKind(str, Enum):
    FIELD = "field"      # structural: embedded or referenced as data
    TRAIT = "trait"      # behavioral: must be implemented


@dataclass(frozen=True, order=True)
class Dependence:
    """One edge of the dependency graph, identified by (kind, name)."""
    kind: DependenceKind
    name: str

    @classmethod
    def field(cls, name: str) -> "Dependence":
        return cls(DependenceKind.FIELD, name)

    @classmethod
    def trait(cls, name: str) -> "Dependence":
        return cls(DependenceKind.TRAIT, name)

    def __str__(self) -> str:
        label = "Field" if self.kind is DependenceKind.FIELD else "Trait"
        return f"{label}({self.name})"


# ── Type expressions ───────────────────────────────────────────────────
#
# A closed set of variants. Anything the converter does not recognise
# becomes UnknownType, which contributes no references.


@dataclass(frozen=True)
class PathType:
    """`a::b::C<Args>`; also primitives such as `i32`."""
    segments: tuple[str, ...]
    arguments: tuple["TypeExpr", ...] = ()

    @property
    def name(self) -> str:
        return "::".join(self.segments)


@dataclass(frozen=True)
class ArrayType:
    element: "TypeExpr"


@dataclass(frozen=True)
class SliceType:
    element: "TypeExpr"


@dataclass(frozen=True)
class TupleType:
    elements: tuple["TypeExpr", ...] = ()


@dataclass(frozen=True)
class ReferenceType:
    referent: "TypeExpr"
    mutable: bool = False


@dataclass(frozen=True)
class PointerType:
    pointee: "TypeExpr"
    mutable: bool = False


@dataclass(frozen=True)
class FunctionType:
    """Bare function pointer: `fn(A, B) -> C`."""
    parameters: tuple["TypeExpr", ...] = ()
    returns: "TypeExpr | None" = None


@dataclass(frozen=True)
class OpaqueType:
    """`impl A + B` (dynamic=False) or `dyn A + B` (dynamic=True)."""
    bounds: tuple[PathType, ...] = ()
    dynamic: bool = False


@dataclass(frozen=True)
class UnknownType:
    node_kind: str
    text: str


TypeExpr = (PathType | ArrayType | SliceType | TupleType | ReferenceType
            | PointerType | FunctionType | OpaqueType | UnknownType)


# ── Generic parameters ─────────────────────────────────────────────────


@dataclass(frozen=True)
class TypeParam:
    name: str
    bounds: tuple[PathType, ...] = ()


@dataclass(frozen=True)
class LifetimeParam:
    name: str


@dataclass(frozen=True)
class ConstParam:
    name: str
    type: TypeExpr | None = None


GenericParam = TypeParam | LifetimeParam | ConstParam


# ── Declarations ───────────────────────────────────────────────────────


class FieldGroupKind(str, Enum):
    UNIT = "unit"
    NAMED = "named"
    UNNAMED = "unnamed"


@dataclass(frozen=True)
class FieldInfo:
    name: str | None           # None for positional fields
    type: TypeExpr


@dataclass(frozen=True)
class FieldGroup:
    kind: FieldGroupKind
    fields: tuple[FieldInfo, ...] = ()

    @property
    def types(self) -> tuple[TypeExpr, ...]:
        return tuple(f.type for f in self.fields)


@dataclass
class Declaration:
    """A user-defined type found at the top level of a source file."""
    name: str
    kind: DeclarationKind
    field_groups: list[FieldGroup] = field(default_factory=list)
    generics: list[GenericParam] = field(default_factory=list)
    # Trait bounds from `where` predicates.
    extra_bounds: list[PathType] = field(default_factory=list)
    # `trait A: B + C` and `where Self: D`, only walked on request.
    supertraits: list[PathType] = field(default_factory=list)
    line_number: int = 0
    # Right-hand side of a type alias, kept even when not walked.
    aliased: TypeExpr | None = None


@dataclass
class ParseResult:
    """Declarations collected from one file plus non-fatal warnings."""
    declarations: list[Declaration] = field(default_factory=list)
    warnings: list[dict[str, str]] = field(default_factory=list)
    loc: int = 0

