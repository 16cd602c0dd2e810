"""Phase controller driving every item through parse and decorate.

Each phase walks the committed item collection in order. For every item the
controller places it in the store's active slot, dispatches the ``pre`` event,
runs the adapter on whatever item the consumers handed back, dispatches the
``post`` event and collects the final value. Only when every item has been
processed does the new collection replace the old one, so a failure on any
item leaves the previous collection untouched and propagates to the caller.

Example
-------
>>> from bookpress.events import EventBus
>>> from bookpress.items import Item, ItemStore
>>> from bookpress.parser import MarkdownContentParser
>>> store = ItemStore([Item(original="# One", config={"element": "chapter"})])
>>> pipeline = PublishingPipeline(store, EventBus(), MarkdownContentParser(), decorator=None)
>>> pipeline.run_parse_phase()[0].toc[0].title
'One'
"""

from __future__ import annotations

import logging
import typing as typ

from .errors import PipelineStateError
from .events import BookEvents, EventBus, HookContext

if typ.TYPE_CHECKING:
    from .decorator import Decorator
    from .items import Item, ItemStore
    from .parser import ContentParser

logger = logging.getLogger(__name__)

PhaseStep = typ.Callable[["Item", int], "Item"]


class PublishingPipeline:
    """Run the parse and decorate phases over one run's item store."""

    def __init__(
        self,
        store: ItemStore,
        bus: EventBus,
        parser: ContentParser,
        decorator: Decorator | None,
        *,
        render_context: typ.Mapping[str, typ.Any] | None = None,
    ) -> None:
        """Wire the controller to its collaborators.

        Parameters
        ----------
        store : ItemStore
            Store owning the item collection and active slot for this run.
        bus : EventBus
            Consumers notified before and after each phase step.
        parser : ContentParser
            Adapter used by the parse phase.
        decorator : Decorator or None
            Adapter used by the decorate phase; may be ``None`` when only the
            parse phase is run.
        render_context : Mapping[str, Any], optional
            Extra values passed to every decoration template (``book``,
            ``edition``...).
        """
        self.store = store
        self.bus = bus
        self.parser = parser
        self.decorator = decorator
        self.render_context = dict(render_context or {})

    def run(self) -> tuple[Item, ...]:
        """Run parse then decorate and return the decorated collection."""
        self.run_parse_phase()
        return self.run_decorate_phase()

    def run_parse_phase(self) -> tuple[Item, ...]:
        """Parse every item's original markup and commit the results."""
        return self._run_phase(
            BookEvents.PRE_PARSE, BookEvents.POST_PARSE, self._parse_item
        )

    def run_decorate_phase(self) -> tuple[Item, ...]:
        """Render every parsed item through its element template and commit."""
        return self._run_phase(
            BookEvents.PRE_DECORATE, BookEvents.POST_DECORATE, self._decorate_item
        )

    def _run_phase(
        self, pre: BookEvents, post: BookEvents, step: PhaseStep
    ) -> tuple[Item, ...]:
        source = self.store.items
        total = len(source)
        logger.debug("%s: %d item(s)", pre.value, total)
        processed: list[Item] = []
        try:
            for index, item in enumerate(source):
                self.store.set_active(item)
                context = self.bus.dispatch(pre, HookContext(pre, item, index, total))
                current = self._capture(context)
                result = step(current, index)
                self.store.set_active(result)
                context = self.bus.dispatch(post, HookContext(post, result, index, total))
                processed.append(self._capture(context))
        finally:
            self.store.clear_active()
        logger.debug("%s: committed %d item(s)", post.value, len(processed))
        return self.store.commit(processed)

    def _capture(self, context: HookContext) -> Item:
        """Read the item left by the consumers back into the active slot."""
        item = context.item
        if item is None:
            msg = f"A {context.event.value!r} consumer removed the active item."
            raise PipelineStateError(msg)
        self.store.set_active(item)
        return item

    def _parse_item(self, item: Item, index: int) -> Item:
        logger.debug("parsing item #%d (%s)", index + 1, item.element or "?")
        result = self.parser.parse(item.original)
        return item.with_parsed(result.content, result.toc)

    def _decorate_item(self, item: Item, index: int) -> Item:
        if self.decorator is None:
            msg = "No decorator configured for the decorate phase."
            raise PipelineStateError(msg)
        if not item.is_parsed:
            msg = f"Item #{index + 1} reached the decorate phase without being parsed."
            raise PipelineStateError(msg)
        template_id = item.element
        if not template_id:
            msg = f"Item #{index + 1} has no 'element' to select its template."
            raise PipelineStateError(msg)
        logger.debug("decorating item #%d with %s", index + 1, template_id)
        context = {**self.render_context, "item": item, "items": self.store.items}
        return item.with_decorated(self.decorator.render(template_id, context))


__all__ = ["PublishingPipeline"]
