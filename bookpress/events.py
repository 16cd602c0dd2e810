"""Synchronous, ordered hook dispatch around the publishing phases.

Consumers are plain callables registered per event name. ``dispatch`` folds
them over a :class:`HookContext` in registration order: each consumer sees the
context left by the previous one and may return a replacement
:class:`~bookpress.items.Item` (or a whole new context). Returning ``None``
keeps the context unchanged. Exceptions raised by a consumer stop the fold and
propagate to the caller.

Example
-------
>>> from bookpress.items import Item
>>> bus = EventBus()
>>> bus.subscribe(BookEvents.PRE_PARSE, lambda ctx: ctx.item.with_config(seen=True))
>>> ctx = bus.dispatch(BookEvents.PRE_PARSE, HookContext(BookEvents.PRE_PARSE, Item()))
>>> ctx.item.config["seen"]
True
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from .items import Item


class BookEvents(enum.StrEnum):
    """Event names dispatched by the publisher and the pipeline."""

    PRE_PUBLISH = "publish.pre"
    PRE_PARSE = "parse.pre"
    POST_PARSE = "parse.post"
    PRE_DECORATE = "decorate.pre"
    POST_DECORATE = "decorate.post"
    POST_PUBLISH = "publish.post"


@dc.dataclass(frozen=True, slots=True)
class HookContext:
    """Value handed to every consumer of an event.

    Attributes
    ----------
    event : BookEvents
        Event being dispatched.
    item : Item or None
        The active item; ``None`` for publish-level events.
    index : int
        Zero-based position of the item within the running phase.
    total : int
        Number of items in the running phase.
    """

    event: BookEvents
    item: Item | None
    index: int = 0
    total: int = 0

    def with_item(self, item: Item) -> HookContext:
        return dc.replace(self, item=item)


HookResult = Item | HookContext | None
Consumer = typ.Callable[[HookContext], HookResult]


class Plugin(typ.Protocol):
    """Object that wires one or more consumers onto a bus."""

    def register(self, bus: EventBus) -> None:
        """Subscribe this plugin's consumers on ``bus``."""
        ...


class EventBus:
    """Register consumers per event and dispatch to them in order."""

    def __init__(self) -> None:
        self._consumers: dict[BookEvents, list[Consumer]] = {}

    def subscribe(self, event: BookEvents, consumer: Consumer) -> None:
        """Append ``consumer`` to the ordered consumer list for ``event``."""
        self._consumers.setdefault(event, []).append(consumer)

    def add_plugin(self, plugin: Plugin) -> None:
        plugin.register(self)

    def consumers(self, event: BookEvents) -> tuple[Consumer, ...]:
        """Return the consumers registered for ``event`` in dispatch order."""
        return tuple(self._consumers.get(event, ()))

    def dispatch(self, event: BookEvents, context: HookContext) -> HookContext:
        """Run every consumer of ``event`` and return the resulting context.

        Parameters
        ----------
        event : BookEvents
            Event to dispatch.
        context : HookContext
            Initial context; its ``item`` is the value the first consumer sees.

        Returns
        -------
        HookContext
            The context after the last consumer ran. With no consumers this is
            ``context`` itself.

        Raises
        ------
        TypeError
            If a consumer returns something other than an ``Item``,
            a ``HookContext`` or ``None``.
        """
        current = context
        for consumer in self._consumers.get(event, ()):
            result = consumer(current)
            match result:
                case None:
                    continue
                case HookContext():
                    current = result
                case Item():
                    current = current.with_item(result)
                case _:
                    msg = (
                        f"Consumer {consumer!r} for {event.value!r} returned "
                        f"{type(result).__name__}; expected Item, HookContext or None."
                    )
                    raise TypeError(msg)
        return current


__all__ = ["BookEvents", "Consumer", "EventBus", "HookContext", "Plugin"]
