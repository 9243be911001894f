"""Declaration parsers and the data models they produce."""

from .models import (
    DeclarationKind, DependenceKind, Dependence,
    PathType, ArrayType, SliceType, TupleType, ReferenceType, PointerType,
    FunctionType, OpaqueType, UnknownType, TypeExpr,
    TypeParam, LifetimeParam, ConstParam, GenericParam,
    FieldGroupKind, FieldInfo, FieldGroup, Declaration, ParseResult,
)
from .base import LanguageParser
from .rust import RustParser

__all__ = [
    "DeclarationKind", "DependenceKind", "Dependence",
    "PathType", "ArrayType", "SliceType", "TupleType", "ReferenceType",
    "PointerType", "FunctionType", "OpaqueType", "UnknownType", "TypeExpr",
    "TypeParam", "LifetimeParam", "ConstParam", "GenericParam",
    "FieldGroupKind", "FieldInfo", "FieldGroup", "Declaration", "ParseResult",
    "LanguageParser", "RustParser",
]
