"""Tests for the typemap command-line entry point."""

import shutil

import pytest

ts = pytest.importorskip("tree_sitter", reason="requires tree-sitter")

from typemap.cli import main  # noqa: E402


class TestCli:

    def test_prints_dot(self, fixtures_dir, capsys):
        assert main(["--infile", str(fixtures_dir / "ex1.rs")]) == 0
        captured = capsys.readouterr()
        assert captured.out.startswith("digraph typemap {")
        assert captured.out.count("->") == 2
        assert captured.err == ""

    def test_infile_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
        assert "--infile" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["--infile", str(tmp_path / "nope.rs")]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("ERROR: Cannot read")

    def test_strict_rejects_functions(self, fixtures_dir, capsys):
        assert main(["--infile", str(fixtures_dir / "ex6.rs"), "--strict"]) == 1
        assert "Unsupported declaration use_declaration" in capsys.readouterr().err

    def test_permissive_warns(self, fixtures_dir, capsys):
        assert main(["--infile", str(fixtures_dir / "ex6.rs")]) == 0
        captured = capsys.readouterr()
        assert "4 warning(s)" in captured.err
        assert captured.out.startswith("digraph")

    def test_opaque_bounds_flag(self, tmp_path, capsys):
        path = tmp_path / "dyn.rs"
        path.write_text("struct S { d: Box<dyn Display> }\n")
        assert main(["--infile", str(path), "--extended-types",
                     "--opaque-bounds", "trait"]) == 0
        assert "style=dashed" in capsys.readouterr().out

    def test_dyn_skipped_without_extended_types(self, tmp_path, capsys):
        path = tmp_path / "dyn.rs"
        path.write_text("struct S { d: Box<dyn Display> }\n")
        assert main(["--infile", str(path)]) == 0
        assert capsys.readouterr().out.count("->") == 1

    def test_supertraits_flag(self, tmp_path, capsys):
        path = tmp_path / "sub.rs"
        path.write_text("trait Sub: Display {}\n")
        assert main(["--infile", str(path)]) == 0
        assert "->" not in capsys.readouterr().out
        assert main(["--infile", str(path), "--supertraits"]) == 0
        assert "style=dashed" in capsys.readouterr().out

    def test_alias_targets_flag(self, tmp_path, capsys):
        path = tmp_path / "alias.rs"
        path.write_text("type X = Vec<A>;\n")
        assert main(["--infile", str(path), "--alias-targets"]) == 0
        assert capsys.readouterr().out.count("->") == 2

    def test_parse_error(self, tmp_path, capsys):
        path = tmp_path / "bad.rs"
        path.write_text("struct A { b: B\n")
        assert main(["--infile", str(path)]) == 1
        assert "Syntax error" in capsys.readouterr().err

    @pytest.mark.skipif(shutil.which("dot") is None, reason="requires Graphviz")
    def test_outfile(self, fixtures_dir, tmp_path, capsys):
        out = tmp_path / "deps.png"
        assert main(["--infile", str(fixtures_dir / "ex3.rs"), "--outfile", str(out)]) == 0
        assert out.exists()
        assert capsys.readouterr().out == ""

    def test_outfile_without_graphviz(self, fixtures_dir, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("PATH", "")
        out = tmp_path / "deps.pdf"
        assert main(["--infile", str(fixtures_dir / "ex3.rs"), "--outfile", str(out)]) == 1
        assert "Graphviz" in capsys.readouterr().err

    def test_save_graph(self, fixtures_dir, tmp_path, capsys):
        pytest.importorskip("kglite")
        path = tmp_path / "types.kgl"
        assert main(["--infile", str(fixtures_dir / "ex5.rs"), "--save-graph", str(path)]) == 0
        assert path.exists()
