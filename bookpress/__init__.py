"""Publish Markdown books as PDF files through a staged pipeline.

This package exposes the ``bookpress`` CLI together with the building blocks
it wires up: the item store, the event bus, the parse and decorate adapters
and the PDF publisher that drives PrinceXML.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``PdfPublisher``: Publish one edition of a loaded book.

Examples
--------
>>> from bookpress import main
>>> main(["publish", "my-book"])  # doctest: +SKIP
>>> from bookpress import app
>>> app(["editions", "my-book"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main
from .events import BookEvents, EventBus, HookContext
from .items import Item, ItemStore, TocEntry
from .publisher import PdfPublisher, PublishResult

__all__ = [
    "BookEvents",
    "EventBus",
    "HookContext",
    "Item",
    "ItemStore",
    "PdfPublisher",
    "PublishResult",
    "TocEntry",
    "app",
    "main",
]
