"""Typed dataclasses describing a book's ``config.yml``."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from bookpress.converter import DEFAULT_CONVERTER_PATHS


class BookConfigError(ValueError):
    """Raised when the book configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ContentEntry:
    """One entry of ``book.contents``.

    ``options`` keeps every key of the YAML entry (including ``element``) so
    templates can read custom settings without the loader knowing about them.
    """

    element: str
    content: str | None = None
    title: str | None = None
    options: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class TocSettings:
    """Which elements and heading depth the table of contents shows."""

    deep: int = 2
    elements: list[str] = dc.field(
        default_factory=lambda: ["appendix", "chapter", "part"]
    )


@dc.dataclass(slots=True)
class EditionConfig:
    """Settings for one edition under ``book.editions``."""

    name: str
    format: str = "pdf"
    include_styles: bool = True
    labels: list[str] = dc.field(default_factory=lambda: ["appendix", "chapter"])
    toc: TocSettings = dc.field(default_factory=TocSettings)
    output: str = "book.pdf"
    pygments_style: str = "default"
    options: dict[str, typ.Any] = dc.field(default_factory=dict)

    def option(self, key: str, default: typ.Any = None) -> typ.Any:
        """Return an edition setting by its YAML key."""
        return self.options.get(key, default)


@dc.dataclass(slots=True)
class ConverterConfig:
    """Where to look for the PrinceXML executable."""

    path: str | None = None
    default_paths: list[str] = dc.field(
        default_factory=lambda: list(DEFAULT_CONVERTER_PATHS)
    )


@dc.dataclass(slots=True)
class BookInfo:
    """Book-level metadata exposed to every template as ``book``."""

    title: str
    author: str = ""
    language: str = "en"
    publication_date: str | None = None
    extra: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class BookConfig:
    """A fully resolved book definition."""

    root: Path
    book: BookInfo
    contents: list[ContentEntry]
    editions: dict[str, EditionConfig]
    converter: ConverterConfig
    default_edition: str | None = None

    @property
    def contents_dir(self) -> Path:
        return self.root / "Contents"

    @property
    def templates_dir(self) -> Path:
        return self.root / "Resources" / "Templates"

    @property
    def output_dir(self) -> Path:
        return self.root / "Output"

    def get_edition(self, name: str | None) -> EditionConfig:
        """Return the requested edition or fall back to the default one."""
        if name is None:
            return self._get_default_edition()
        try:
            return self.editions[name]
        except KeyError as exc:
            available = ", ".join(sorted(self.editions)) or "none"
            msg = f"Unknown edition '{name}'. Known editions: {available}"
            raise BookConfigError(msg) from exc

    def _get_default_edition(self) -> EditionConfig:
        if self.default_edition and self.default_edition in self.editions:
            return self.editions[self.default_edition]
        if not self.editions:
            msg = "No editions configured for this book."
            raise BookConfigError(msg)
        return self.editions[next(iter(self.editions))]


__all__ = [
    "BookConfig",
    "BookConfigError",
    "BookInfo",
    "ContentEntry",
    "ConverterConfig",
    "EditionConfig",
    "TocSettings",
]
