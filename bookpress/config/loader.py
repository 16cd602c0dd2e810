"""Load a book's ``config.yml`` into typed dataclasses."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _build_content_entry,
    _build_edition_config,
    _optional_str,
    _string_list,
)
from .models import BookConfig, BookConfigError, BookInfo, ConverterConfig

CONFIG_FILENAME = "config.yml"
CONVERTER_PATH_ENV = "BOOKPRESS_PRINCE_PATH"
_BOOK_KEYS = frozenset(
    {"title", "author", "language", "publication_date", "edition", "contents", "editions"}
)


def load_book_config(book_dir: Path) -> BookConfig:
    """Load the YAML configuration that describes a book and its editions.

    Parameters
    ----------
    book_dir : Path
        Directory holding ``config.yml`` and the ``Contents`` folder.

    Returns
    -------
    BookConfig
        Parsed configuration with content entries in document order.

    Raises
    ------
    FileNotFoundError
        If ``book_dir`` or its ``config.yml`` does not exist.
    BookConfigError
        If required keys are missing or have the wrong shape.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_book_config(Path("my-book"))  # doctest: +SKIP
    >>> config.book.title  # doctest: +SKIP
    'My Book'
    """
    path = book_dir / CONFIG_FILENAME
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise BookConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    book_raw = raw.get("book")
    if not isinstance(book_raw, dict):
        msg = "Missing 'book' section in configuration."
        raise BookConfigError(msg)

    title = _optional_str(book_raw.get("title"))
    if not title:
        msg = "The book has no 'title'."
        raise BookConfigError(msg)

    contents_raw = book_raw.get("contents") or []
    if not isinstance(contents_raw, list) or not contents_raw:
        msg = "No contents defined for the book."
        raise BookConfigError(msg)
    contents = [
        _build_content_entry(index, entry) for index, entry in enumerate(contents_raw)
    ]

    editions_raw = book_raw.get("editions") or {}
    if not isinstance(editions_raw, dict):
        msg = "'book.editions' must be a mapping."
        raise BookConfigError(msg)
    editions = {
        str(name): _build_edition_config(str(name), payload)
        for name, payload in editions_raw.items()
    }

    info = BookInfo(
        title=title,
        author=_optional_str(book_raw.get("author")) or "",
        language=_optional_str(book_raw.get("language")) or "en",
        publication_date=_optional_str(book_raw.get("publication_date")),
        extra={k: v for k, v in book_raw.items() if k not in _BOOK_KEYS},
    )

    return BookConfig(
        root=book_dir,
        book=info,
        contents=contents,
        editions=editions,
        converter=_build_converter_config(raw.get("converter")),
        default_edition=_optional_str(book_raw.get("edition")),
    )


def _build_converter_config(payload: object | None) -> ConverterConfig:
    """Build the converter lookup settings, honouring the env override."""
    base = ConverterConfig()
    data = payload if isinstance(payload, dict) else {}
    path = os.getenv(CONVERTER_PATH_ENV) or _optional_str(data.get("path"))
    return ConverterConfig(
        path=path,
        default_paths=_string_list(data.get("default_paths"), base.default_paths),
    )


__all__ = ["CONFIG_FILENAME", "CONVERTER_PATH_ENV", "load_book_config"]
