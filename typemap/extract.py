"""Type reference extraction and generic bound resolution.

``base_types`` walks one type expression and returns every named type it
mentions. ``bound_dependencies`` and ``parameter_names`` split a generic
parameter list into the traits it requires and the placeholder names it
introduces.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from .errors import UnsupportedGenericParameter
from .parsers.models import (
    TypeExpr, PathType, ArrayType, SliceType, TupleType, ReferenceType,
    PointerType, FunctionType, OpaqueType, GenericParam, TypeParam,
    ConstParam,
)


def type_references(ty: TypeExpr, *,
                    extended: bool = False) -> Iterator[tuple[str, bool]]:
    """Yield ``(name, from_opaque_bound)`` for every name inside ``ty``.

    The flag is True for traits named by ``impl Trait``. ``dyn Trait``
    (including bare ``Fn(..)``) and raw pointers yield nothing unless
    ``extended`` is set. Unknown forms yield nothing.
    """
    if isinstance(ty, PathType):
        yield ty.name, False
        for arg in ty.arguments:
            yield from type_references(arg, extended=extended)
    elif isinstance(ty, (ArrayType, SliceType)):
        yield from type_references(ty.element, extended=extended)
    elif isinstance(ty, ReferenceType):
        yield from type_references(ty.referent, extended=extended)
    elif isinstance(ty, PointerType):
        if extended:
            yield from type_references(ty.pointee, extended=extended)
    elif isinstance(ty, TupleType):
        for element in ty.elements:
            yield from type_references(element, extended=extended)
    elif isinstance(ty, FunctionType):
        for param in ty.parameters:
            yield from type_references(param, extended=extended)
        if ty.returns is not None:
            yield from type_references(ty.returns, extended=extended)
    elif isinstance(ty, OpaqueType):
        if extended or not ty.dynamic:
            for bound in ty.bounds:
                yield bound.name, True


def base_types(ty: TypeExpr, *, extended: bool = False) -> set[str]:
    """Every base type name referenced by ``ty``.

    ``Vec<Box<A>>`` gives ``{"Vec", "Box", "A"}``; arrays, slices, tuples,
    references and function pointers contribute only their contents.
    """
    return {name for name, _ in type_references(ty, extended=extended)}


def _type_params(generics: Iterable[GenericParam], *, strict: bool,
                 owner: str | None) -> Iterator[TypeParam]:
    for param in generics:
        if isinstance(param, TypeParam):
            yield param
        elif isinstance(param, ConstParam) and strict:
            raise UnsupportedGenericParameter(param.name, owner)
        # lifetimes (and const parameters when permissive) carry no types


def bound_dependencies(generics: Iterable[GenericParam], *, strict: bool = False,
                       owner: str | None = None) -> set[str]:
    """Trait names bounding the type parameters of a declaration."""
    return {
        bound.name
        for param in _type_params(generics, strict=strict, owner=owner)
        for bound in param.bounds
    }


def parameter_names(generics: Iterable[GenericParam], *, strict: bool = False,
                    owner: str | None = None) -> set[str]:
    """Bare names of the type parameters (not lifetimes, not consts)."""
    return {param.name for param in _type_params(generics, strict=strict, owner=owner)}


__all__ = [
    "type_references", "base_types", "bound_dependencies", "parameter_names",
]
