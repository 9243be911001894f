"""Tests for base_types and the generic bound resolver on model values."""

import pytest

from typemap.errors import UnsupportedGenericParameter
from typemap.extract import (
    base_types, bound_dependencies, parameter_names, type_references,
)
from typemap.parsers.models import (
    PathType, ArrayType, SliceType, TupleType, ReferenceType, PointerType,
    FunctionType, OpaqueType, UnknownType, TypeParam, LifetimeParam,
    ConstParam,
)


def _p(name: str, *args) -> PathType:
    return PathType(tuple(name.split("::")), tuple(args))


class TestBaseTypes:

    def test_path_is_colon_joined(self):
        assert base_types(_p("std::collections::HashMap")) == {"std::collections::HashMap"}

    def test_generic_arguments_recursed(self):
        assert base_types(_p("Vec", _p("Box", _p("A")))) == {"Vec", "Box", "A"}

    def test_containers_contribute_no_name(self):
        assert base_types(ArrayType(_p("A"))) == {"A"}
        assert base_types(SliceType(_p("A"))) == {"A"}
        assert base_types(ReferenceType(_p("A"), mutable=True)) == {"A"}

    def test_raw_pointer_needs_extended(self):
        assert base_types(PointerType(_p("A"))) == set()
        assert base_types(PointerType(_p("A")), extended=True) == {"A"}

    def test_tuple(self):
        assert base_types(TupleType((_p("A"), _p("B")))) == {"A", "B"}
        assert base_types(TupleType()) == set()

    def test_function_pointer(self):
        ty = FunctionType((_p("A"), ReferenceType(_p("B"))), _p("Option", _p("C")))
        assert base_types(ty) == {"A", "B", "Option", "C"}
        assert base_types(FunctionType()) == set()

    def test_opaque_bounds(self):
        ty = OpaqueType((_p("Display"), _p("std::marker::Send")))
        assert base_types(ty) == {"Display", "std::marker::Send"}

    def test_unknown_is_empty(self):
        assert base_types(UnknownType("macro_invocation", "m!()")) == set()

    def test_duplicates_collapse(self):
        assert base_types(TupleType((_p("A"), _p("Vec", _p("A"))))) == {"A", "Vec"}

    def test_opaque_flag(self):
        ty = _p("Box", OpaqueType((_p("Iterator"),)))
        assert sorted(type_references(ty)) == [("Box", False), ("Iterator", True)]

    def test_dyn_needs_extended(self):
        ty = _p("Box", OpaqueType((_p("Fn"),), dynamic=True))
        assert sorted(type_references(ty)) == [("Box", False)]
        assert sorted(type_references(ty, extended=True)) == [("Box", False), ("Fn", True)]


class TestGenericResolver:

    GENERICS = [
        LifetimeParam("'a"),
        TypeParam("T"),
        TypeParam("U", (_p("Clone"), _p("std::fmt::Debug"))),
    ]

    def test_bound_dependencies(self):
        assert bound_dependencies(self.GENERICS) == {"Clone", "std::fmt::Debug"}

    def test_parameter_names(self):
        assert parameter_names(self.GENERICS) == {"T", "U"}

    def test_lifetimes_contribute_nothing(self):
        assert bound_dependencies([LifetimeParam("'a")]) == set()
        assert parameter_names([LifetimeParam("'a")]) == set()

    def test_const_dropped_when_permissive(self):
        generics = [ConstParam("N", _p("usize")), TypeParam("T", (_p("Copy"),))]
        assert parameter_names(generics) == {"T"}
        assert bound_dependencies(generics) == {"Copy"}

    def test_const_rejected_when_strict(self):
        with pytest.raises(UnsupportedGenericParameter) as exc_info:
            parameter_names([ConstParam("N")], strict=True, owner="Arr")
        assert exc_info.value.name == "N"
        assert exc_info.value.owner == "Arr"
        with pytest.raises(UnsupportedGenericParameter):
            bound_dependencies([ConstParam("N")], strict=True)
