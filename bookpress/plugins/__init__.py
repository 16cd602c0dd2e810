"""Built-in event consumers registered for every publishing run."""

from __future__ import annotations

import typing as typ

from .labels import LabelPlugin
from .title import TitlePlugin

if typ.TYPE_CHECKING:
    from bookpress.config import EditionConfig
    from bookpress.events import Plugin


def default_plugins(edition: EditionConfig) -> list[Plugin]:
    """Return the built-in plugins in registration order."""
    return [TitlePlugin(), LabelPlugin(edition.labels)]


__all__ = ["LabelPlugin", "TitlePlugin", "default_plugins"]
