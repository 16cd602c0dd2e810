"""Derive missing item titles from the first heading of the parsed content."""

from __future__ import annotations

import typing as typ

from bookpress.events import BookEvents, HookContext

if typ.TYPE_CHECKING:
    from bookpress.events import EventBus
    from bookpress.items import Item


class TitlePlugin:
    """Fill ``config['title']`` after parsing when the config left it empty."""

    def register(self, bus: EventBus) -> None:
        bus.subscribe(BookEvents.POST_PARSE, self.on_post_parse)

    def on_post_parse(self, context: HookContext) -> Item | None:
        item = context.item
        if item is None or item.config.get("title") or not item.toc:
            return None
        top = next((entry for entry in item.toc if entry.level == 1), item.toc[0])
        return item.with_config(title=top.title)


__all__ = ["TitlePlugin"]
