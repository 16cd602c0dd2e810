"""Compose decorated items into one HTML book and convert it to PDF.

The assembler works inside a scratch directory unique to the run. The
converter writes the artifact there first; it is moved onto the requested
output path only after the conversion succeeded, so an interrupted or failed
run never leaves a half-written PDF behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import typing as typ
from pathlib import Path

from ._constants import SCRATCH_PREFIX
from .errors import ConversionFailed

if typ.TYPE_CHECKING:
    from .converter import Converter, Diagnostic
    from .decorator import TemplateDecorator
    from .items import Item

logger = logging.getLogger(__name__)

BOOK_TEMPLATE = "book"
STYLESHEET_TEMPLATE = "style.css"


class BookAssembler:
    """Build the composite document and hand it to the converter."""

    def __init__(
        self,
        decorator: TemplateDecorator,
        converter: Converter,
        *,
        include_styles: bool = True,
        custom_stylesheet: Path | None = None,
        extra_css: typ.Sequence[str] = (),
        base_url: str | None = None,
        render_context: typ.Mapping[str, typ.Any] | None = None,
        scratch_root: Path | None = None,
        keep_scratch: bool = False,
    ) -> None:
        """Configure the assembler.

        Parameters
        ----------
        decorator : TemplateDecorator
            Renders ``book.jinja`` and ``style.css.jinja``.
        converter : Converter
            Adapter that turns the composite HTML into the final artifact.
        include_styles : bool, optional
            Whether the default theme stylesheet and ``extra_css`` are added.
        custom_stylesheet : Path, optional
            Book stylesheet appended after the defaults when the file exists.
        extra_css : Sequence[str], optional
            Generated CSS snippets (for example the Pygments highlight rules)
            written next to the default stylesheet.
        base_url : str, optional
            Base URL the converter resolves relative resources against.
        render_context : Mapping[str, Any], optional
            Extra values for ``book.jinja`` and the stylesheet template.
        scratch_root : Path, optional
            Parent directory for scratch folders; defaults to the system temp dir.
        keep_scratch : bool, optional
            Leave the scratch folder in place for debugging.
        """
        self.decorator = decorator
        self.converter = converter
        self.include_styles = include_styles
        self.custom_stylesheet = custom_stylesheet
        self.extra_css = list(extra_css)
        self.base_url = base_url
        self.render_context = dict(render_context or {})
        self.scratch_root = scratch_root
        self.keep_scratch = keep_scratch
        self.last_scratch_dir: Path | None = None

    def assemble_and_convert(
        self, items: typ.Sequence[Item], output_path: Path
    ) -> list[Diagnostic]:
        """Compose ``items`` in order, convert and move the result to ``output_path``.

        Returns
        -------
        list[Diagnostic]
            Converter diagnostics in emission order; possibly empty.

        Raises
        ------
        ConversionUnavailable
            If the converter cannot be run.
        ConversionFailed
            If the converter produced no output.
        """
        if self.scratch_root is not None:
            self.scratch_root.mkdir(parents=True, exist_ok=True)
        scratch = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=self.scratch_root))
        self.last_scratch_dir = scratch
        logger.debug("assembling %d item(s) in %s", len(items), scratch)
        try:
            book_path = self.decorator.render_to_file(
                BOOK_TEMPLATE,
                {**self.render_context, "items": list(items)},
                scratch / "book.html",
            )
            stylesheets = self._prepare_stylesheets(scratch)
            scratch_output = scratch / output_path.name
            diagnostics = self.converter.convert(
                book_path, stylesheets, scratch_output, base_url=self.base_url
            )
            if not scratch_output.exists():
                msg = f"The converter did not produce '{scratch_output.name}'."
                raise ConversionFailed(msg, diagnostics)
            _move_into_place(scratch_output, output_path)
        finally:
            if not self.keep_scratch:
                shutil.rmtree(scratch, ignore_errors=True)
        logger.info("wrote %s (%d diagnostic(s))", output_path, len(diagnostics))
        return diagnostics

    def _prepare_stylesheets(self, scratch: Path) -> list[Path]:
        """Write generated stylesheets and return every stylesheet in order."""
        stylesheets: list[Path] = []
        if self.include_styles:
            stylesheets.append(
                self.decorator.render_to_file(
                    STYLESHEET_TEMPLATE,
                    self.render_context,
                    scratch / "default_styles.css",
                )
            )
            for index, css in enumerate(self.extra_css, start=1):
                extra = scratch / f"generated_{index}.css"
                extra.write_text(css, encoding="utf-8")
                stylesheets.append(extra)
        if self.custom_stylesheet is not None and self.custom_stylesheet.is_file():
            stylesheets.append(self.custom_stylesheet)
        return stylesheets


def _move_into_place(source: Path, target: Path) -> None:
    """Move the finished artifact onto ``target`` in a single step."""
    target.parent.mkdir(parents=True, exist_ok=True)
    staged = target.with_name(f".{target.name}.partial")
    try:
        shutil.copy2(source, staged)
        os.replace(staged, target)
    finally:
        staged.unlink(missing_ok=True)


__all__ = ["BookAssembler"]
