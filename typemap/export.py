"""Export a TypeMap as DOT text, a rendered diagram, tables or a KGLite graph."""

from __future__ import annotations

import sys
import warnings
from pathlib import Path

import graphviz
import kglite
import pandas as pd

from .builder import TypeMap
from .errors import RenderError
from .parsers.models import DeclarationKind, DependenceKind

NODE_SHAPES = {
    DeclarationKind.STRUCT: "box",
    DeclarationKind.ENUM: "hexagon",
    DeclarationKind.UNION: "octagon",
    DeclarationKind.TYPE_ALIAS: "note",
    DeclarationKind.TRAIT: "ellipse",
}

EDGE_STYLES = {
    DependenceKind.FIELD: "solid",
    DependenceKind.TRAIT: "dashed",
}

# DeclarationKind -> graph node type
NODE_TYPE_MAP = {
    DeclarationKind.STRUCT: "Struct",
    DeclarationKind.ENUM: "Enum",
    DeclarationKind.UNION: "Union",
    DeclarationKind.TYPE_ALIAS: "TypeAlias",
    DeclarationKind.TRAIT: "Trait",
}
EXTERNAL_NODE_TYPE = "External"

CONNECTION_TYPES = {
    DependenceKind.FIELD: "FIELD",
    DependenceKind.TRAIT: "TRAIT",
}


# ── Graphviz ───────────────────────────────────────────────────────────


def to_digraph(type_map: TypeMap, name: str = "typemap") -> graphviz.Digraph:
    """Build a Digraph with one node per type and one edge per dependence.

    Node ids are synthetic (``n0``, ``n1``, ...) and the type name is the
    label, because ``:`` in an edge endpoint is read as a port separator.
    """
    dot = graphviz.Digraph(name=name)
    ids: dict[str, str] = {}
    for type_name in sorted(type_map):
        ids[type_name] = f"n{len(ids)}"
        dot.node(ids[type_name], label=type_name,
                 shape=NODE_SHAPES[type_map.kinds[type_name]])
    for type_name in sorted(type_map.external_types()):
        ids[type_name] = f"n{len(ids)}"
        dot.node(ids[type_name], label=type_name, shape="plaintext")
    for source, dep in type_map.edges():
        dot.edge(ids[source], ids[dep.name], style=EDGE_STYLES[dep.kind])
    return dot


def to_dot(type_map: TypeMap, name: str = "typemap") -> str:
    """Return the DOT description of the graph."""
    return to_digraph(type_map, name).source


def render(type_map: TypeMap, outfile: str | Path,
           format: str | None = None) -> Path:
    """Render the graph to a diagram file with the Graphviz ``dot`` binary.

    The format defaults to the file suffix (``.pdf``, ``.png``, ``.svg``);
    a path without suffix is written as PDF.

    Raises:
        RenderError: If Graphviz is not installed or rejects the format.
    """
    outfile = Path(outfile)
    if not outfile.suffix:
        outfile = outfile.with_suffix(f".{format or 'pdf'}")
    fmt = format or outfile.suffix.lstrip(".")
    dot = to_digraph(type_map)
    try:
        rendered = dot.render(outfile=outfile, format=fmt, cleanup=True)
    except graphviz.ExecutableNotFound as exc:
        raise RenderError(
            "Graphviz `dot` executable not found; install Graphviz to render diagrams"
        ) from exc
    except (graphviz.CalledProcessError, ValueError) as exc:
        raise RenderError(f"Cannot render {outfile}: {exc}") from exc
    return Path(rendered)


# ── Tables / KGLite ────────────────────────────────────────────────────


def to_dataframes(type_map: TypeMap) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return ``(nodes, edges)`` DataFrames.

    nodes: qualified_name, name, kind (None for external types), declared
    edges: source, target, dependence ("field" | "trait")
    """
    rows = [{
        "qualified_name": n,
        "name": n.rsplit("::", 1)[-1],
        "kind": type_map.kinds[n].value,
        "declared": True,
    } for n in sorted(type_map)]
    rows.extend({
        "qualified_name": n,
        "name": n.rsplit("::", 1)[-1],
        "kind": None,
        "declared": False,
    } for n in sorted(type_map.external_types()))
    nodes_df = pd.DataFrame(rows, columns=["qualified_name", "name", "kind", "declared"])

    edges = [{
        "source": source,
        "target": dep.name,
        "dependence": dep.kind.value,
    } for source, dep in type_map.edges()]
    edges_df = pd.DataFrame(edges, columns=["source", "target", "dependence"])
    return nodes_df, edges_df


def _node_type(type_map: TypeMap, name: str) -> str:
    kind = type_map.kinds.get(name)
    return NODE_TYPE_MAP[kind] if kind is not None else EXTERNAL_NODE_TYPE


def to_knowledge_graph(type_map: TypeMap, *,
                       save_to: str | Path | None = None,
                       verbose: bool = False) -> kglite.KnowledgeGraph:
    """Load the dependency graph into a KGLite KnowledgeGraph.

    Each DeclarationKind becomes a node type (Struct, Enum, Union,
    TypeAlias, Trait) and undeclared targets become External nodes.
    Edges are FIELD or TRAIT connections.
    """
    nodes_df, edges_df = to_dataframes(type_map)
    graph = kglite.KnowledgeGraph()

    # Suppress UserWarning from add_connections, skips are not expected here
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=UserWarning)

        node_types = nodes_df["qualified_name"].map(lambda n: _node_type(type_map, n))
        for node_type, df in nodes_df.groupby(node_types, sort=True):
            graph.add_nodes(data=df.drop(columns=["kind", "declared"]).reset_index(drop=True),
                            node_type=node_type,
                            unique_id_field="qualified_name",
                            node_title_field="name")

        if not edges_df.empty:
            groups = edges_df.assign(
                source_type=edges_df["source"].map(lambda n: _node_type(type_map, n)),
                target_type=edges_df["target"].map(lambda n: _node_type(type_map, n)),
            ).groupby(["dependence", "source_type", "target_type"], sort=True)
            for (dependence, src_nt, tgt_nt), df in groups:
                graph.add_connections(
                    data=df[["source", "target"]].reset_index(drop=True),
                    connection_type=CONNECTION_TYPES[DependenceKind(dependence)],
                    source_type=src_nt, source_id_field="source",
                    target_type=tgt_nt, target_id_field="target",
                )

    if verbose:
        print(f"Loaded {len(nodes_df)} nodes, {len(edges_df)} edges into KGLite",
              file=sys.stderr)

    if save_to is not None:
        graph.save(str(save_to))
        if verbose:
            print(f"Graph saved to {save_to}", file=sys.stderr)
    return graph
