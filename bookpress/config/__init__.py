"""Load and validate book configuration YAML.

This subpackage parses a book's ``config.yml``, applies edition defaults and
produces slotted dataclasses (:class:`BookConfig`, :class:`EditionConfig`,
...) that the publisher consumes. The entry point is :func:`load_book_config`.

Examples
--------
>>> from pathlib import Path
>>> from bookpress.config import load_book_config
>>> config = load_book_config(Path("my-book"))  # doctest: +SKIP
>>> config.get_edition(None).output  # doctest: +SKIP
'book.pdf'
"""

from .loader import CONFIG_FILENAME, CONVERTER_PATH_ENV, load_book_config
from .models import (
    BookConfig,
    BookConfigError,
    BookInfo,
    ContentEntry,
    ConverterConfig,
    EditionConfig,
    TocSettings,
)

__all__ = [
    "CONFIG_FILENAME",
    "CONVERTER_PATH_ENV",
    "BookConfig",
    "BookConfigError",
    "BookInfo",
    "ContentEntry",
    "ConverterConfig",
    "EditionConfig",
    "TocSettings",
    "load_book_config",
]
