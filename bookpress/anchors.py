"""Markdown extension assigning book-wide unique heading anchors.

Chapters are parsed one at a time but end up in a single HTML document, so two
chapters that both contain ``## Summary`` would otherwise produce duplicate
``id`` attributes. :class:`HeadingAnchorExtension` gives every heading an id
before Python-Markdown's ``toc`` extension runs; ``toc`` keeps existing ids,
so the table of contents and the HTML agree.
"""

from __future__ import annotations

import re
import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


def slugify(value: str, separator: str = "-") -> str:
    """Return a lowercase ASCII slug for ``value``."""
    slug = re.sub(r"[^a-z0-9]+", separator, value.lower()).strip(separator)
    return slug or "section"


def unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


class HeadingAnchorExtension(Extension):
    """Register :class:`HeadingAnchorTreeprocessor` sharing one slug registry."""

    def __init__(self, used: set[str]) -> None:
        super().__init__()
        self.used = used

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the anchor treeprocessor ahead of the ``toc`` extension."""
        processor = HeadingAnchorTreeprocessor(md, self.used)
        md.treeprocessors.register(processor, "bookpress_heading_anchors", 6)


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Set an ``id`` on every heading that lacks one."""

    def __init__(self, md: Markdown, used: set[str]) -> None:
        super().__init__(md)
        self.used = used

    def run(self, root: Element) -> Element:
        for element in root.iter():
            if element.tag not in HEADING_TAGS:
                continue
            existing = element.get("id")
            if existing:
                self.used.add(existing)
                continue
            text = "".join(element.itertext()).strip()
            element.set("id", unique_slug(slugify(text), self.used))
        return root


__all__ = [
    "HeadingAnchorExtension",
    "HeadingAnchorTreeprocessor",
    "slugify",
    "unique_slug",
]
