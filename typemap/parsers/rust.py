"""Rust declaration collector using tree-sitter-rust."""

from tree_sitter import Language, Parser
import tree_sitter_rust as ts_rust

from ..errors import UnsupportedDeclaration
from .base import (
    LanguageParser, node_text, count_lines, raise_for_syntax_error,
)
from .models import (
    ParseResult, Declaration, DeclarationKind, FieldGroup, FieldGroupKind,
    FieldInfo, GenericParam, TypeParam, LifetimeParam, ConstParam,
    TypeExpr, PathType, ArrayType, SliceType, TupleType, ReferenceType,
    PointerType, FunctionType, OpaqueType, UnknownType,
)

RUST_LANGUAGE = Language(ts_rust.language())

TYPE_DECLARATIONS: dict[str, DeclarationKind] = {
    "struct_item": DeclarationKind.STRUCT,
    "enum_item": DeclarationKind.ENUM,
    "union_item": DeclarationKind.UNION,
    "type_item": DeclarationKind.TYPE_ALIAS,
    "trait_item": DeclarationKind.TRAIT,
}

# Top-level nodes that are not items at all.
IGNORED_NODES: frozenset[str] = frozenset({
    "line_comment", "block_comment", "attribute_item",
    "inner_attribute_item", "empty_statement", "shebang",
})

# Types that name nothing: `()` and `!`.
EMPTY_TYPES: frozenset[str] = frozenset({"unit_type", "never_type"})

# Generic arguments that are not types (`'a`, `3`, `{ N + 1 }`).
NON_TYPE_ARGUMENTS: frozenset[str] = frozenset({
    "lifetime", "block", "trait_bounds", "negative_literal",
})


def _named(node) -> list:
    """Named children of a node, without comments and attributes."""
    if node is None:
        return []
    return [c for c in node.named_children if c.type not in IGNORED_NODES]


class _TypeConverter:
    """Turns tree-sitter type nodes into TypeExpr values.

    Unrecognised forms become UnknownType and add a warning instead of
    failing the build.
    """

    def __init__(self, source: bytes, warnings: list[dict[str, str]]):
        self.source = source
        self.warnings = warnings

    def text(self, node) -> str:
        return node_text(node, self.source)

    def _unknown(self, node) -> UnknownType:
        text = " ".join(self.text(node).split())
        self.warnings.append({
            "context": f"line {node.start_point[0] + 1}",
            "message": f"unrecognized type form {node.type} `{text}`, "
                       f"no dependencies recorded",
        })
        return UnknownType(node.type, text)

    def segments(self, node) -> tuple[str, ...]:
        """Path segments of a (possibly scoped) name, generic arguments dropped."""
        if node is None:
            return ()
        if node.type in ("scoped_type_identifier", "scoped_identifier"):
            head = self.segments(node.child_by_field_name("path"))
            name = node.child_by_field_name("name")
            return head + ((self.text(name),) if name is not None else ())
        if node.type == "generic_type":
            return self.segments(node.child_by_field_name("type"))
        return (self.text(node).strip(),)

    def type_expr(self, node) -> TypeExpr:
        kind = node.type
        if kind in ("type_identifier", "primitive_type", "scoped_type_identifier"):
            return PathType(self.segments(node))
        if kind == "generic_type":
            return PathType(
                self.segments(node.child_by_field_name("type")),
                self._type_arguments(node.child_by_field_name("type_arguments")),
            )
        if kind == "array_type":
            element = self.type_expr(node.child_by_field_name("element"))
            if node.child_by_field_name("length") is None:
                return SliceType(element)
            return ArrayType(element)
        if kind == "tuple_type":
            return TupleType(tuple(self.type_expr(c) for c in _named(node)))
        if kind in EMPTY_TYPES:
            return TupleType()
        if kind in ("reference_type", "pointer_type"):
            inner = self.type_expr(node.child_by_field_name("type"))
            mutable = any(c.type == "mutable_specifier" for c in node.children)
            if kind == "reference_type":
                return ReferenceType(inner, mutable)
            return PointerType(inner, mutable)
        if kind == "function_type":
            if node.child_by_field_name("trait") is not None:
                # `Fn(A) -> B` written without `dyn`
                return OpaqueType(tuple(self.bound_paths(node)), dynamic=True)
            return self._function_type(node)
        if kind in ("abstract_type", "dynamic_type"):
            return OpaqueType(
                tuple(self.bound_paths(node.child_by_field_name("trait"))),
                dynamic=kind == "dynamic_type",
            )
        if kind == "bounded_type":
            return self._bounded_type(node)
        return self._unknown(node)

    def _type_arguments(self, node) -> tuple[TypeExpr, ...]:
        args = []
        for child in _named(node):
            if child.type == "type_binding":
                # Iterator<Item = T>
                bound = child.child_by_field_name("type")
                if bound is not None:
                    args.append(self.type_expr(bound))
            elif child.type in NON_TYPE_ARGUMENTS or child.type.endswith("_literal"):
                continue
            else:
                args.append(self.type_expr(child))
        return tuple(args)

    def _function_type(self, node) -> FunctionType:
        params = []
        for p in _named(node.child_by_field_name("parameters")):
            if p.type == "parameter":
                ty = p.child_by_field_name("type")
                if ty is not None:
                    params.append(self.type_expr(ty))
            elif p.type in ("self_parameter", "variadic_parameter"):
                continue
            else:
                params.append(self.type_expr(p))
        ret = node.child_by_field_name("return_type")
        return FunctionType(tuple(params), self.type_expr(ret) if ret is not None else None)

    def _bounded_type(self, node) -> TypeExpr:
        parts = [c for c in _named(node) if c.type not in ("lifetime", "use_bounds")]
        if not parts:
            return TupleType()
        left = self.type_expr(parts[0])
        if len(parts) == 1:
            # `T + 'a`
            return left
        if isinstance(left, OpaqueType):
            extra = tuple(p for c in parts[1:] for p in self.bound_paths(c))
            return OpaqueType(left.bounds + extra, left.dynamic)
        return self._unknown(node)

    def bound_paths(self, node) -> list[PathType]:
        """Trait paths named by a bound list or a single bound."""
        if node is None:
            return []
        kind = node.type
        if kind in ("type_identifier", "scoped_type_identifier", "generic_type"):
            return [PathType(self.segments(node))]
        if kind == "function_type":
            trait = node.child_by_field_name("trait")
            return [PathType(self.segments(trait))] if trait is not None else []
        if kind == "higher_ranked_trait_bound":
            return self.bound_paths(node.child_by_field_name("type"))
        if kind in ("abstract_type", "dynamic_type"):
            return self.bound_paths(node.child_by_field_name("trait"))
        if kind in ("trait_bounds", "bounded_type", "removed_trait_bound", "tuple_type"):
            return [p for c in _named(node) for p in self.bound_paths(c)]
        if kind in ("lifetime", "use_bounds"):
            return []
        self._unknown(node)
        return []

    # ── Declaration parts ──────────────────────────────────────────────

    def field_group(self, body) -> FieldGroup:
        if body is None:
            return FieldGroup(FieldGroupKind.UNIT)
        if body.type == "field_declaration_list":
            fields = []
            for f in _named(body):
                if f.type != "field_declaration":
                    continue
                fields.append(FieldInfo(
                    name=self.text(f.child_by_field_name("name")),
                    type=self.type_expr(f.child_by_field_name("type")),
                ))
            return FieldGroup(FieldGroupKind.NAMED, tuple(fields))
        if body.type == "ordered_field_declaration_list":
            return FieldGroup(FieldGroupKind.UNNAMED, tuple(
                FieldInfo(None, self.type_expr(t))
                for t in body.children_by_field_name("type")
            ))
        return FieldGroup(FieldGroupKind.UNIT)

    def generics(self, node) -> list[GenericParam]:
        params = []
        for child in _named(node):
            param = self._generic_param(child)
            if param is not None:
                params.append(param)
        return params

    def _generic_param(self, node) -> GenericParam | None:
        kind = node.type
        if kind == "lifetime":
            return LifetimeParam(self.text(node))
        if kind == "lifetime_parameter":
            return LifetimeParam(self.text(node.child_by_field_name("name")))
        if kind == "type_identifier":
            return TypeParam(self.text(node))
        if kind == "type_parameter":
            return TypeParam(
                self.text(node.child_by_field_name("name")),
                tuple(self.bound_paths(node.child_by_field_name("bounds"))),
            )
        if kind == "constrained_type_parameter":
            left = node.child_by_field_name("left")
            if left.type == "lifetime":
                return LifetimeParam(self.text(left))
            return TypeParam(
                self.text(left),
                tuple(self.bound_paths(node.child_by_field_name("bounds"))),
            )
        if kind == "optional_type_parameter":
            # `T = Default`; the default is not a dependency
            return self._generic_param(node.child_by_field_name("name"))
        if kind == "const_parameter":
            ty = node.child_by_field_name("type")
            return ConstParam(
                self.text(node.child_by_field_name("name")),
                self.type_expr(ty) if ty is not None else None,
            )
        return None

    def where_bounds(self, node) -> tuple[list[PathType], list[PathType]]:
        """Trait paths from the `where` predicates of a declaration.

        Returns ``(bounds, self_bounds)``; predicates on ``Self`` are kept
        apart because they are supertraits in disguise.
        """
        bounds, self_bounds = [], []
        for child in node.children:
            if child.type != "where_clause":
                continue
            for predicate in _named(child):
                if predicate.type != "where_predicate":
                    continue
                paths = self.bound_paths(predicate.child_by_field_name("bounds"))
                left = predicate.child_by_field_name("left")
                if left is not None and self.text(left).strip() == "Self":
                    self_bounds.extend(paths)
                else:
                    bounds.extend(paths)
        return bounds, self_bounds


class RustParser(LanguageParser):

    @property
    def language_name(self) -> str:
        return "rust"

    @property
    def file_extensions(self) -> list[str]:
        return [".rs"]

    def __init__(self):
        self._parser = Parser(RUST_LANGUAGE)

    def parse_source(self, source: bytes, *, strict: bool = False,
                     alias_targets: bool = False) -> ParseResult:
        """Collect every top-level type declaration in source order.

        Items that are not types (functions, impls, modules, ...) raise
        UnsupportedDeclaration when strict, and are skipped with a warning
        otherwise.
        """
        if isinstance(source, str):
            source = source.encode("utf8")
        tree = self._parser.parse(source)
        root = tree.root_node
        raise_for_syntax_error(root, source)

        result = ParseResult(loc=count_lines(source))
        converter = _TypeConverter(source, result.warnings)
        for child in root.named_children:
            if child.type in IGNORED_NODES:
                continue
            kind = TYPE_DECLARATIONS.get(child.type)
            if kind is None:
                self._skip_unsupported(child, source, strict, result)
                continue
            result.declarations.append(
                self._collect(child, kind, converter, alias_targets)
            )
        return result

    def _collect(self, node, kind: DeclarationKind, converter: _TypeConverter,
                 alias_targets: bool) -> Declaration:
        bounds, self_bounds = converter.where_bounds(node)
        decl = Declaration(
            name=converter.text(node.child_by_field_name("name")),
            kind=kind,
            generics=converter.generics(node.child_by_field_name("type_parameters")),
            extra_bounds=bounds,
            supertraits=self_bounds,
            line_number=node.start_point[0] + 1,
        )
        body = node.child_by_field_name("body")
        if kind in (DeclarationKind.STRUCT, DeclarationKind.UNION):
            decl.field_groups = [converter.field_group(body)]
        elif kind is DeclarationKind.ENUM:
            decl.field_groups = [
                converter.field_group(variant.child_by_field_name("body"))
                for variant in _named(body)
                if variant.type == "enum_variant"
            ]
        elif kind is DeclarationKind.TYPE_ALIAS:
            decl.aliased = converter.type_expr(node.child_by_field_name("type"))
            if alias_targets:
                decl.field_groups = [FieldGroup(
                    FieldGroupKind.UNNAMED, (FieldInfo(None, decl.aliased),),
                )]
        elif kind is DeclarationKind.TRAIT:
            # `trait A: B + C`
            decl.supertraits = (
                converter.bound_paths(node.child_by_field_name("bounds"))
                + decl.supertraits
            )
        return decl

    def _skip_unsupported(self, node, source: bytes, strict: bool,
                          result: ParseResult) -> None:
        target = node
        if node.type == "expression_statement" and node.named_children:
            target = node.named_children[0]
        name_node = target.child_by_field_name("name")
        name = node_text(name_node, source) if name_node is not None else None
        line = node.start_point[0] + 1
        if strict:
            raise UnsupportedDeclaration(target.type, line, name)
        label = f"{target.type} `{name}`" if name else target.type
        result.warnings.append({
            "context": f"line {line}",
            "message": f"skipped unsupported declaration {label}",
        })
