"""Abstract base class for declaration parsers and shared helpers."""

from abc import ABC, abstractmethod
from pathlib import Path

from ..errors import ParseError, SourceReadError
from .models import ParseResult


class LanguageParser(ABC):
    """Base class that all language parsers must extend."""

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the language identifier (e.g. 'rust')."""
        ...

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """Return list of file extensions this parser handles (e.g. ['.rs'])."""
        ...

    @abstractmethod
    def parse_source(self, source: bytes, *, strict: bool = False,
                     alias_targets: bool = False) -> ParseResult:
        """Collect the type declarations of one source text."""
        ...

    def parse_file(self, filepath: Path, *, strict: bool = False,
                   alias_targets: bool = False) -> ParseResult:
        """Read and parse a single source file.

        A file whose suffix is not one of ``file_extensions`` is still
        parsed, with a warning.
        """
        filepath = Path(filepath)
        try:
            source = filepath.read_bytes()
            source.decode("utf8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(filepath, str(exc)) from exc
        try:
            result = self.parse_source(source, strict=strict,
                                       alias_targets=alias_targets)
        except ParseError as exc:
            raise ParseError(exc.line, exc.column, exc.snippet,
                             path=str(filepath)) from None
        if filepath.suffix not in self.file_extensions:
            result.warnings.insert(0, {
                "context": filepath.name,
                "message": f"unexpected suffix {filepath.suffix or '(none)'!r}, "
                           f"parsed as {self.language_name}",
            })
        return result


# ── Shared helpers ─────────────────────────────────────────────────────


def node_text(node, source: bytes) -> str:
    """Extract the text of a tree-sitter node."""
    return source[node.start_byte:node.end_byte].decode("utf8")


def count_lines(source: bytes) -> int:
    """Count lines of code in source bytes."""
    return source.count(b"\n") + (1 if source and not source.endswith(b"\n") else 0)


def first_syntax_error(node):
    """Return the first ERROR or MISSING node in document order, or None."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = first_syntax_error(child)
        if found is not None:
            return found
    return node


def raise_for_syntax_error(root, source: bytes) -> None:
    """Raise ParseError when the tree contains any syntax error."""
    if not root.has_error:
        return
    bad = first_syntax_error(root)
    line, column = bad.start_point
    snippet = node_text(bad, source).split("\n", 1)[0][:40]
    if bad.is_missing:
        snippet = f"missing {bad.type}"
    raise ParseError(line + 1, column + 1, snippet)
