"""Utility helpers shared by the book configuration loader."""

from __future__ import annotations

import typing as typ

from .models import BookConfigError, ContentEntry, EditionConfig, TocSettings

EDITION_DEFAULTS = EditionConfig(name="default")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_list(value: object | None, default: list[str]) -> list[str]:
    """Normalize a YAML string or sequence into a list of non-empty strings."""
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [segment for segment in value.replace(",", " ").split() if segment]
    if isinstance(value, list):
        return [str(segment).strip() for segment in value if str(segment).strip()]
    return list(default)


def _as_bool(value: object | None, default: bool) -> bool:
    match value:
        case None:
            return default
        case bool():
            return value
        case str() as text:
            return text.strip().lower() in {"1", "true", "yes", "on"}
        case _:
            return bool(value)


def _build_content_entry(index: int, payload: object) -> ContentEntry:
    """Build a ContentEntry from one ``book.contents`` item."""
    if not isinstance(payload, dict):
        msg = f"Content entry #{index + 1} must be a mapping."
        raise BookConfigError(msg)
    element = _optional_str(payload.get("element"))
    if not element:
        msg = f"Content entry #{index + 1} is missing 'element'."
        raise BookConfigError(msg)
    return ContentEntry(
        element=element,
        content=_optional_str(payload.get("content")),
        title=_optional_str(payload.get("title")),
        options=dict(payload),
    )


def _toc_depth(name: str, value: object, default: int) -> int:
    """Return a non-negative heading depth for the edition's table of contents."""
    if value is None:
        return default
    try:
        depth = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        msg = f"Edition '{name}' has an invalid toc depth {value!r}; expected an integer."
        raise BookConfigError(msg) from exc
    if isinstance(value, bool) or depth < 0:
        msg = f"Edition '{name}' has an invalid toc depth {value!r}; expected 0 or more."
        raise BookConfigError(msg)
    return depth


def _build_toc_settings(
    name: str, payload: typ.Mapping[str, typ.Any] | None
) -> TocSettings:
    base = TocSettings()
    if not payload:
        return base
    return TocSettings(
        deep=_toc_depth(name, payload.get("deep"), base.deep),
        elements=_string_list(payload.get("elements"), base.elements),
    )


def _build_edition_config(name: str, payload: object) -> EditionConfig:
    """Build an EditionConfig, applying defaults for missing keys."""
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        msg = f"Edition '{name}' must be a mapping."
        raise BookConfigError(msg)
    base = EDITION_DEFAULTS
    edition_format = str(payload.get("format", base.format)).lower()
    if edition_format != "pdf":
        msg = f"Edition '{name}' uses unsupported format '{edition_format}'."
        raise BookConfigError(msg)
    toc_payload = payload.get("toc")
    return EditionConfig(
        name=name,
        format=edition_format,
        include_styles=_as_bool(payload.get("include_styles"), base.include_styles),
        labels=_string_list(payload.get("labels"), base.labels),
        toc=_build_toc_settings(name, toc_payload if isinstance(toc_payload, dict) else None),
        output=_optional_str(payload.get("output")) or base.output,
        pygments_style=_optional_str(payload.get("pygments_style"))
        or base.pygments_style,
        options=dict(payload),
    )


__all__ = [
    "_as_bool",
    "_build_content_entry",
    "_build_edition_config",
    "_optional_str",
    "_string_list",
]
