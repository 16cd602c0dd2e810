"""Jinja2 decoration adapter that wraps parsed items in their templates.

Templates are looked up in the book's own ``Resources/Templates`` directory
first and then in the templates shipped with the package, so a book can
override any element template (``chapter.jinja``) or the stylesheet
(``style.css.jinja``) by dropping a file with the same name next to its
content.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import jinja2
from jinja2 import ChoiceLoader, Environment, FileSystemLoader

from .errors import RenderError, TemplateNotFound

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
TEMPLATE_SUFFIX = ".jinja"


def _autoescape(template_name: str | None) -> bool:
    """Escape markup templates but leave stylesheet templates untouched."""
    if template_name is None:
        return True
    return not template_name.endswith(".css" + TEMPLATE_SUFFIX)


class Decorator(typ.Protocol):
    """Render a named template with an item context."""

    def render(self, template_id: str, context: typ.Mapping[str, typ.Any]) -> str:
        """Return rendered markup or raise a :class:`RenderError`."""
        ...


class TemplateDecorator:
    """Render element templates through a layered Jinja environment."""

    def __init__(
        self,
        *,
        custom_templates_dir: Path | None = None,
        templates_dir: Path | None = None,
        globals_: typ.Mapping[str, typ.Any] | None = None,
    ) -> None:
        """Initialize the decorator and its Jinja environment.

        Parameters
        ----------
        custom_templates_dir : Path, optional
            Book-specific template directory searched before the defaults.
        templates_dir : Path, optional
            Base template directory; defaults to ``bookpress/templates``.
        globals_ : Mapping[str, Any], optional
            Values exposed to every template (for example the book metadata).
        """
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.custom_templates_dir = custom_templates_dir
        loaders: list[jinja2.BaseLoader] = []
        if custom_templates_dir is not None and custom_templates_dir.is_dir():
            loaders.append(FileSystemLoader(str(custom_templates_dir)))
        loaders.append(FileSystemLoader(str(self.templates_dir)))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=_autoescape,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(globals_ or {})

    def render(self, template_id: str, context: typ.Mapping[str, typ.Any]) -> str:
        """Render ``<template_id>.jinja`` with ``context``.

        Raises
        ------
        TemplateNotFound
            If neither template directory provides the template.
        RenderError
            If the template exists but fails to render.
        """
        name = self._template_name(template_id)
        try:
            template = self.env.get_template(name)
        except jinja2.TemplateNotFound as exc:
            raise TemplateNotFound(template_id) from exc
        except jinja2.TemplateError as exc:
            msg = f"Template '{name}' is invalid: {exc}"
            raise RenderError(msg) from exc
        try:
            return template.render(**context)
        except jinja2.TemplateError as exc:
            msg = f"Unable to render '{name}': {exc}"
            raise RenderError(msg) from exc

    def render_to_file(
        self, template_id: str, context: typ.Mapping[str, typ.Any], target: Path
    ) -> Path:
        """Render a template and write the UTF-8 result to ``target``."""
        output = self.render(template_id, context)
        if not output.endswith("\n"):
            output += "\n"
        target.write_text(output, encoding="utf-8")
        return target

    def has_template(self, template_id: str) -> bool:
        try:
            self.env.get_template(self._template_name(template_id))
        except jinja2.TemplateNotFound:
            return False
        return True

    @staticmethod
    def _template_name(template_id: str) -> str:
        if template_id.endswith(TEMPLATE_SUFFIX):
            return template_id
        return f"{template_id}{TEMPLATE_SUFFIX}"


__all__ = ["DEFAULT_TEMPLATES_DIR", "Decorator", "TemplateDecorator"]
