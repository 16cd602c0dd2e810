"""Markdown parsing adapter producing HTML and a table of contents.

The pipeline only depends on the :class:`ContentParser` protocol. The default
:class:`MarkdownContentParser` renders Python-Markdown with Pygments syntax
highlighting and collects headings through the ``toc`` extension.
"""

from __future__ import annotations

import dataclasses as dc
import html as html_lib
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from .anchors import HeadingAnchorExtension, slugify
from .errors import ParseError
from .items import TocEntry

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


@dc.dataclass(frozen=True, slots=True)
class ParseResult:
    """Structured output of a parse call."""

    content: str
    toc: tuple[TocEntry, ...]


class ContentParser(typ.Protocol):
    """Turn raw markup into HTML plus its headings."""

    def parse(self, raw: str) -> ParseResult:
        """Parse ``raw``; raise :class:`~bookpress.errors.ParseError` on failure."""
        ...


class MarkdownContentParser:
    """Render Markdown with highlighted code blocks and book-wide anchors."""

    def __init__(self, pygments_style: str = "default") -> None:
        """Initialize a parser with the Pygments style used for code blocks.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style. Defaults to ``"default"``, which
            prints legibly on white paper.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        self._used_anchors: set[str] = set()

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def reset(self) -> None:
        """Forget anchors handed out so far; call once per publishing run."""
        self._used_anchors.clear()

    def parse(self, raw: str) -> ParseResult:
        """Convert ``raw`` Markdown into HTML and a flat table of contents.

        Raises
        ------
        ParseError
            If ``raw`` is not text or Python-Markdown fails to convert it.
        """
        if not isinstance(raw, str):
            msg = f"Expected markdown text, got {type(raw).__name__}."
            raise ParseError(msg)
        normalized = self._normalize_fenced_blocks(raw)
        if not normalized.strip():
            return ParseResult(content="", toc=())
        md = self._build_markdown()
        try:
            html = md.convert(normalized)
        except Exception as exc:
            msg = f"Unable to parse markdown: {exc}"
            raise ParseError(msg) from exc
        toc = tuple(_flatten_toc(getattr(md, "toc_tokens", [])))
        return ParseResult(content=self._annotate_codehilite(html, normalized), toc=toc)

    def _build_markdown(self) -> Markdown:
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            HeadingAnchorExtension(self._used_anchors),
            "toc",
        ]
        return Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                },
                "toc": {"slugify": slugify, "permalink": False},
            },
        )

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            return f"{fence}{language or ''}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


def _flatten_toc(tokens: typ.Iterable[dict[str, typ.Any]]) -> typ.Iterator[TocEntry]:
    """Yield ToC entries depth-first from Python-Markdown's nested tokens."""
    for token in tokens:
        yield TocEntry(
            level=int(token["level"]),
            title=html_lib.unescape(str(token["name"])),
            slug=str(token["id"]),
        )
        yield from _flatten_toc(token.get("children", ()))


__all__ = [
    "CODE_BLOCK_PATTERN",
    "ContentParser",
    "MarkdownContentParser",
    "ParseResult",
]
