"""Content items and the per-run store that owns them.

An :class:`Item` is one section of the book (cover, chapter, appendix...).
Items are frozen: every phase derives a new value with :meth:`Item.with_parsed`,
:meth:`Item.with_decorated` or :meth:`Item.with_config` instead of editing the
one it received, so a half-processed item never leaks into another phase.

Example
-------
>>> item = Item(original="# Hello", config={"element": "chapter"})
>>> parsed = item.with_parsed("<h1>Hello</h1>", ())
>>> item.content is None, parsed.content
(True, '<h1>Hello</h1>')
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from types import MappingProxyType


@dc.dataclass(frozen=True, slots=True)
class TocEntry:
    """Heading captured while parsing an item.

    Attributes
    ----------
    level : int
        Heading level (``1`` for ``#``).
    title : str
        Heading text with markup stripped.
    slug : str
        Anchor identifier assigned to the heading in the parsed HTML.
    label : str
        Optional numbering label such as ``"Chapter 1"``.
    """

    level: int
    title: str
    slug: str
    label: str = ""


def _freeze(config: typ.Mapping[str, typ.Any] | None) -> typ.Mapping[str, typ.Any]:
    return MappingProxyType(dict(config or {}))


@dc.dataclass(frozen=True, slots=True)
class Item:
    """Immutable snapshot of one book section as it moves through the phases.

    Attributes
    ----------
    original : str
        Raw markup read from the content file.
    content : str or None
        HTML produced by the parse phase; ``None`` until the item is parsed.
    toc : tuple[TocEntry, ...]
        Headings found while parsing.
    decorated : str or None
        Markup produced by the decorate phase.
    config : Mapping[str, Any]
        Per-item settings; ``element`` names the decoration template.
        Compared for equality but left out of the hash.
    """

    original: str = ""
    content: str | None = None
    toc: tuple[TocEntry, ...] = ()
    decorated: str | None = None
    config: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "config", _freeze(self.config))
        object.__setattr__(self, "toc", tuple(self.toc))

    @property
    def element(self) -> str:
        """Return the element type that selects the decoration template."""
        return str(self.config.get("element", ""))

    @property
    def is_parsed(self) -> bool:
        return self.content is not None

    def with_parsed(self, content: str, toc: typ.Iterable[TocEntry]) -> Item:
        """Return a copy carrying parse results."""
        return dc.replace(self, content=content, toc=tuple(toc))

    def with_decorated(self, decorated: str) -> Item:
        """Return a copy carrying the decorated markup."""
        return dc.replace(self, decorated=decorated)

    def with_config(self, **updates: typ.Any) -> Item:
        """Return a copy whose config is merged with ``updates``."""
        merged = dict(self.config)
        merged.update(updates)
        return dc.replace(self, config=merged)

    def with_toc(self, toc: typ.Iterable[TocEntry]) -> Item:
        return dc.replace(self, toc=tuple(toc))


class ItemStore:
    """Ordered item collection plus the single active-item slot for one run.

    The collection only changes through :meth:`commit`, which swaps in a
    complete phase output at once. A failed phase therefore leaves the
    previously committed items in place.
    """

    def __init__(self, items: typ.Iterable[Item] = ()) -> None:
        self._items: tuple[Item, ...] = tuple(items)
        self._active: Item | None = None

    @property
    def items(self) -> tuple[Item, ...]:
        return self._items

    @property
    def active(self) -> Item | None:
        """Return the item currently being processed, if any."""
        return self._active

    def set_active(self, item: Item) -> None:
        self._active = item

    def clear_active(self) -> None:
        self._active = None

    def commit(self, items: typ.Iterable[Item]) -> tuple[Item, ...]:
        """Replace the collection with ``items`` and return the new tuple."""
        self._items = tuple(items)
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> typ.Iterator[Item]:
        return iter(self._items)


__all__ = ["Item", "ItemStore", "TocEntry"]
