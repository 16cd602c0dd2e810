"""Shared fixtures for the bookpress test suite.

``sample_book`` writes a small book (cover, toc, two chapters and an appendix)
into a temporary directory. ``fake_converter`` stands in for PrinceXML: it
records each call and writes a placeholder PDF so the assembler can move it
into place without the real binary.
"""

from __future__ import annotations

import io
import typing as typ
from pathlib import Path

import pytest

from bookpress.console import StdConsole
from bookpress.converter import Diagnostic
from bookpress.errors import ConversionFailed

SAMPLE_CONFIG = """
book:
  title: Sample Book
  author: Jane Doe
  edition: print
  contents:
    - { element: cover }
    - { element: toc }
    - { element: chapter, content: chapter1.md }
    - { element: chapter, content: chapter2.md }
    - { element: appendix, content: appendix.md }
  editions:
    print:
      output: sample.pdf
    screen:
      include_styles: false
      labels: [chapter]
converter:
  default_paths: []
"""

CHAPTER_ONE = "# Getting Started\n\nIntro text.\n\n## Summary\n\nDone.\n"
CHAPTER_TWO = (
    "# Going Further\n\n"
    "```python\nprint('hello')\n```\n\n"
    "## Summary\n\nMore.\n"
)
APPENDIX = "# Reference\n\n| Key | Value |\n| --- | ----- |\n| a | 1 |\n"


class FakeConverter:
    """Converter double that writes a placeholder artifact."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []
        self.write_output = True
        self.fail = False
        self.calls: list[dict[str, typ.Any]] = []

    def convert(
        self,
        input_path: Path,
        stylesheet_paths: typ.Sequence[Path],
        output_path: Path,
        *,
        base_url: str | None = None,
    ) -> list[Diagnostic]:
        self.calls.append(
            {
                "input": input_path,
                "html": input_path.read_text(encoding="utf-8"),
                "stylesheets": [path.name for path in stylesheet_paths],
                "output": output_path,
                "base_url": base_url,
            }
        )
        if self.fail:
            msg = "converter reported failure"
            raise ConversionFailed(msg, self.diagnostics)
        if self.write_output:
            output_path.write_bytes(b"%PDF-1.7\n%fake\n")
        return list(self.diagnostics)


@pytest.fixture
def fake_converter() -> FakeConverter:
    """Return a converter double that succeeds by default."""
    return FakeConverter()


@pytest.fixture
def console_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def quiet_console(console_output: io.StringIO) -> StdConsole:
    """Return a non-interactive console writing into ``console_output``."""
    return StdConsole(stdin=io.StringIO(), stdout=console_output, interactive=False)


@pytest.fixture
def sample_book(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a sample book directory and return its path."""
    monkeypatch.delenv("BOOKPRESS_PRINCE_PATH", raising=False)
    book_dir = tmp_path / "sample-book"
    contents = book_dir / "Contents"
    contents.mkdir(parents=True)
    (book_dir / "config.yml").write_text(SAMPLE_CONFIG.lstrip(), encoding="utf-8")
    (contents / "chapter1.md").write_text(CHAPTER_ONE, encoding="utf-8")
    (contents / "chapter2.md").write_text(CHAPTER_TWO, encoding="utf-8")
    (contents / "appendix.md").write_text(APPENDIX, encoding="utf-8")
    return book_dir
