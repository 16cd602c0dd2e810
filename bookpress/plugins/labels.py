"""Number labelled elements and attach their labels to the table of contents.

Counters are kept per element type for one publishing run and reset when
``PRE_PUBLISH`` fires. Chapters count ``1, 2, 3``, appendices ``A, B, C`` and
parts ``I, II, III``. An item whose config already carries a ``number`` keeps
it and the counter continues from there.

Example
-------
>>> to_roman(14), to_letter(28)
('XIV', 'AB')
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from bookpress.events import BookEvents, HookContext

if typ.TYPE_CHECKING:
    from bookpress.events import EventBus
    from bookpress.items import Item

_ROMAN = (
    (1000, "M"),
    (900, "CM"),
    (500, "D"),
    (400, "CD"),
    (100, "C"),
    (90, "XC"),
    (50, "L"),
    (40, "XL"),
    (10, "X"),
    (9, "IX"),
    (5, "V"),
    (4, "IV"),
    (1, "I"),
)


def to_roman(value: int) -> str:
    result = []
    for number, symbol in _ROMAN:
        count, value = divmod(value, number)
        result.append(symbol * count)
    return "".join(result)


def to_letter(value: int) -> str:
    """Return the spreadsheet-style letter for a 1-based ``value``."""
    letters = ""
    while value > 0:
        value, remainder = divmod(value - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


NUMBER_FORMATS: dict[str, typ.Callable[[int], str]] = {
    "appendix": to_letter,
    "part": to_roman,
}


class LabelPlugin:
    """Assign ``number`` and ``label`` to items whose element is labelled."""

    def __init__(self, labelled_elements: typ.Iterable[str]) -> None:
        self.labelled_elements = frozenset(labelled_elements)
        self._counters: dict[str, int] = {}

    def register(self, bus: EventBus) -> None:
        bus.subscribe(BookEvents.PRE_PUBLISH, self.on_pre_publish)
        bus.subscribe(BookEvents.POST_PARSE, self.on_post_parse)

    def on_pre_publish(self, _context: HookContext) -> None:
        self._counters.clear()

    def on_post_parse(self, context: HookContext) -> Item | None:
        item = context.item
        if item is None or item.element not in self.labelled_elements:
            return None
        ordinal = self._next_ordinal(item)
        number = NUMBER_FORMATS.get(item.element, str)(ordinal)
        label = f"{item.element.title()} {number}"
        toc = [
            dc.replace(entry, label=label) if entry.level == 1 else entry
            for entry in item.toc
        ]
        return item.with_config(number=number, label=label).with_toc(toc)

    def _next_ordinal(self, item: Item) -> int:
        explicit = item.config.get("number")
        if isinstance(explicit, int) and not isinstance(explicit, bool):
            ordinal = explicit
        elif isinstance(explicit, str) and explicit.strip().isdigit():
            ordinal = int(explicit)
        else:
            ordinal = self._counters.get(item.element, 0) + 1
        self._counters[item.element] = ordinal
        return ordinal


__all__ = ["LabelPlugin", "to_letter", "to_roman"]
