"""Tests for DOT, table and KGLite export."""

import shutil

import pytest

ts = pytest.importorskip("tree_sitter", reason="requires tree-sitter")

from typemap import RenderError  # noqa: E402
from typemap.export import (  # noqa: E402
    to_dot, to_digraph, render, to_dataframes, to_knowledge_graph,
)


class TestDot:

    def test_nodes_and_edges(self, example):
        dot = to_dot(example("ex5"))
        assert dot.startswith("digraph typemap {")
        assert "label=A shape=box" in dot
        assert "label=i32 shape=plaintext" in dot
        assert dot.count("->") == 5
        assert "style=dashed" not in dot

    def test_kind_shapes_and_trait_edges(self, example):
        dot = to_dot(example("ex6"))
        assert "label=Shape shape=ellipse" in dot
        assert "label=Figure shape=hexagon" in dot
        assert "label=Bits shape=octagon" in dot
        assert "label=Lookup shape=note" in dot
        assert 'label="std::hash::Hash" shape=plaintext' in dot
        assert "style=dashed" in dot

    def test_deterministic(self, fixtures_dir):
        from typemap import build
        first = to_dot(build(fixtures_dir / "ex6.rs"))
        second = to_dot(build(fixtures_dir / "ex6.rs"))
        assert first == second

    def test_custom_name(self, example):
        assert to_digraph(example("ex1"), name="model").name == "model"

    def test_empty_graph(self):
        from typemap import TypeMap
        assert to_dot(TypeMap.from_source("")).strip() == "digraph typemap {\n}"


class TestRender:

    @pytest.mark.skipif(shutil.which("dot") is None, reason="requires Graphviz")
    def test_render_svg(self, example, tmp_path):
        written = render(example("ex1"), tmp_path / "graph.svg")
        assert written.exists()
        assert "<svg" in written.read_text()
        assert not (tmp_path / "graph.gv").exists()

    def test_missing_executable(self, example, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", "")
        with pytest.raises(RenderError):
            render(example("ex1"), tmp_path / "graph.pdf")


class TestDataFrames:

    def test_ex5_tables(self, example):
        nodes, edges = to_dataframes(example("ex5"))
        assert list(nodes.columns) == ["qualified_name", "name", "kind", "declared"]
        assert len(nodes) == 6
        assert set(nodes[~nodes["declared"]]["qualified_name"]) == {"i32", "usize"}
        assert set(nodes[nodes["declared"]]["kind"]) == {"struct"}
        assert len(edges) == 5
        assert set(edges["dependence"]) == {"field"}
        assert edges.iloc[0].to_dict() == {"source": "A", "target": "B", "dependence": "field"}

    def test_short_names(self, example):
        nodes, _ = to_dataframes(example("ex6"))
        row = nodes[nodes["qualified_name"] == "std::hash::Hash"].iloc[0]
        assert row["name"] == "Hash"

    def test_trait_edges(self, example):
        _, edges = to_dataframes(example("ex6"))
        traits = edges[edges["dependence"] == "trait"]
        assert set(zip(traits["source"], traits["target"])) == {
            ("Registry", "Shape"),
            ("Registry", "std::hash::Hash"),
            ("Registry", "Eq"),
        }


class TestKnowledgeGraph:

    def test_load_ex5(self, example):
        pytest.importorskip("kglite")
        graph = to_knowledge_graph(example("ex5"))
        schema = graph.schema()
        assert schema["node_count"] == 6
        assert schema["edge_count"] == 5
        assert set(schema["node_types"]) == {"Struct", "External"}
        assert set(schema["connection_types"]) == {"FIELD"}

    def test_load_ex6_kinds(self, example):
        pytest.importorskip("kglite")
        schema = to_knowledge_graph(example("ex6")).schema()
        assert {"Struct", "Enum", "Union", "TypeAlias", "Trait", "External"} <= set(
            schema["node_types"])
        assert set(schema["connection_types"]) == {"FIELD", "TRAIT"}

    def test_save(self, example, tmp_path):
        kglite = pytest.importorskip("kglite")
        path = tmp_path / "types.kgl"
        to_knowledge_graph(example("ex3"), save_to=path)
        assert path.exists()
        assert kglite.load(str(path)).schema()["edge_count"] == 2
