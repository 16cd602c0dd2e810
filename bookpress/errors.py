"""Exception hierarchy shared by the publishing pipeline and its adapters.

Phases never catch these; they propagate unchanged to the caller of the run,
which decides how to present them. The CLI maps them onto exit codes.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .converter import Diagnostic


class BookpressError(RuntimeError):
    """Base class for every error raised while publishing a book."""


class ParseError(BookpressError):
    """Raised when an item's source markup cannot be parsed."""


class RenderError(BookpressError):
    """Raised when a decoration template fails to render."""


class TemplateNotFound(RenderError):  # noqa: N818 - mirrors jinja2 naming
    """Raised when no template exists for the requested identifier."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template '{template_id}' could not be found.")
        self.template_id = template_id


class PipelineStateError(BookpressError):
    """Raised when an item reaches a phase without its prerequisites."""


class ConversionError(BookpressError):
    """Base class for failures reported by the document converter.

    ``diagnostics`` carries whatever messages the converter emitted before it
    failed so callers can still show them.
    """

    def __init__(self, message: str, diagnostics: typ.Sequence[Diagnostic] = ()) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics)


class ConversionUnavailable(ConversionError):  # noqa: N818 - public name
    """Raised when the converter executable cannot be located or invoked."""


class ConversionFailed(ConversionError):  # noqa: N818 - public name
    """Raised when the converter ran but produced no usable output."""


__all__ = [
    "BookpressError",
    "ConversionError",
    "ConversionFailed",
    "ConversionUnavailable",
    "ParseError",
    "PipelineStateError",
    "RenderError",
    "TemplateNotFound",
]
