"""Command-line entry point: ``typemap --infile src/lib.rs``."""

from __future__ import annotations

import argparse
import sys

from .builder import OPAQUE_BOUND_MODES, build
from .errors import BuildError, RenderError
from .export import render, to_dot, to_knowledge_graph


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="typemap",
        description="Visualize type dependence in a Rust source file",
    )
    parser.add_argument(
        "--infile",
        required=True,
        help="Rust source file to analyze",
    )
    parser.add_argument(
        "--outfile",
        default=None,
        help="Write a rendered diagram here (format from suffix, e.g. .pdf, .png, .svg). "
             "Without it the DOT description is printed to stdout.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on items that are not types and on const generic parameters",
    )
    parser.add_argument(
        "--opaque-bounds",
        choices=OPAQUE_BOUND_MODES,
        default="field",
        help="Edge kind for traits named in impl/dyn types (default: field)",
    )
    parser.add_argument(
        "--alias-targets",
        action="store_true",
        help="Record dependencies of type alias right-hand sides",
    )
    parser.add_argument(
        "--supertraits",
        action="store_true",
        help="Record Trait edges for supertraits (trait A: B)",
    )
    parser.add_argument(
        "--extended-types",
        action="store_true",
        help="Also walk dyn Trait bounds, bare Fn(..) and raw pointers",
    )
    parser.add_argument(
        "--save-graph",
        default=None,
        help="Also save the graph as a KGLite .kgl file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information to stderr",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        type_map = build(
            args.infile,
            strict=args.strict,
            opaque_bounds=args.opaque_bounds,
            alias_targets=args.alias_targets,
            supertraits=args.supertraits,
            extended_types=args.extended_types,
            verbose=args.verbose,
        )
    except BuildError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        if args.outfile:
            written = render(type_map, args.outfile)
            if args.verbose:
                print(f"Diagram written to {written}", file=sys.stderr)
        else:
            print(to_dot(type_map))
    except RenderError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.save_graph:
        to_knowledge_graph(type_map, save_to=args.save_graph, verbose=args.verbose)
    return 0


if __name__ == "__main__":
    sys.exit(main())
