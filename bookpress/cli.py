"""Cyclopts CLI entrypoint for publishing books as PDF files.

The ``bookpress`` console script loads a book directory, runs the publishing
pipeline for one edition and writes the resulting PDF. Failures are reported
on stderr and mapped onto BSD ``sysexits``-style exit codes so scripts can
tell configuration problems apart from content errors.

Examples
--------
Publish the default edition of a book:

>>> from bookpress.cli import main
>>> main(["publish", "my-book"])  # doctest: +SKIP

Publish a named edition into a custom directory:

>>> from bookpress.cli import app
>>> app(["publish", "my-book", "--edition", "print", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import enum
import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from ruamel.yaml.error import YAMLError

from .config import BookConfigError, load_book_config
from .console import StdConsole
from .errors import (
    BookpressError,
    ConversionUnavailable,
    ParseError,
    PipelineStateError,
    RenderError,
)
from .publisher import PdfPublisher

if typ.TYPE_CHECKING:
    from .console import Console
    from .converter import Converter

logger = logging.getLogger(__name__)

app = App(name="bookpress", config=cyclopts.config.Env("BOOKPRESS_", command=False))  # type: ignore[unknown-argument]


class ExitCode(enum.IntEnum):
    """Process exit codes, following ``sysexits`` where one applies."""

    SUCCESS = 0
    FAILURE = 1
    NO_INPUT = 66
    CONFIG_ERROR = 78


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _error(message: str) -> None:
    print(message, file=sys.stderr)


def run_publish(
    book_dir: Path,
    *,
    edition: str | None = None,
    output_dir: Path | None = None,
    converter_path: Path | None = None,
    keep_scratch: bool = False,
    console: Console | None = None,
    converter: Converter | None = None,
) -> ExitCode:
    """Publish ``book_dir`` and return the exit code for the outcome.

    Parameters
    ----------
    book_dir : Path
        Directory containing ``config.yml``.
    edition : str, optional
        Edition name; defaults to the book's default edition.
    output_dir : Path, optional
        Directory that receives the PDF.
    converter_path : Path, optional
        Explicit PrinceXML executable, overriding the book configuration.
    keep_scratch : bool, optional
        Keep the intermediate HTML and CSS files.
    console : Console, optional
        Console used for prompts and diagnostics.
    converter : Converter, optional
        Converter override, mainly for tests.

    Returns
    -------
    ExitCode
        ``SUCCESS`` when the PDF was written, ``CONFIG_ERROR`` for invalid
        configuration or an unavailable converter, ``NO_INPUT`` when the book
        directory is missing and ``FAILURE`` for content or conversion errors.
    """
    if not book_dir.is_dir():
        _error(f"Book directory '{book_dir}' not found.")
        return ExitCode.NO_INPUT
    try:
        config = load_book_config(book_dir)
        if converter_path is not None:
            config.converter.path = str(converter_path)
        publisher = PdfPublisher(
            config,
            edition,
            converter=converter,
            console=console or StdConsole(),
            output_dir=output_dir,
            keep_scratch=keep_scratch,
        )
        result = publisher.publish()
    except (BookConfigError, FileNotFoundError, YAMLError) as exc:
        _error(f"Invalid book configuration: {exc}")
        return ExitCode.CONFIG_ERROR
    except ConversionUnavailable as exc:
        _error(str(exc))
        return ExitCode.CONFIG_ERROR
    except (ParseError, RenderError, PipelineStateError) as exc:
        _error(f"Publishing failed: {exc}")
        return ExitCode.FAILURE
    except BookpressError as exc:
        _error(f"Conversion failed: {exc}")
        return ExitCode.FAILURE
    except Exception as exc:  # noqa: BLE001 - plugin hooks may raise anything
        logger.debug("publishing aborted by an unexpected error", exc_info=True)
        _error(f"Publishing failed: {type(exc).__name__}: {exc}")
        return ExitCode.FAILURE
    print(f"wrote {_format_path(result.output_path)}")
    return ExitCode.SUCCESS


@app.command(help="Publish a book edition as a PDF file.")
def publish(
    book_dir: typ.Annotated[Path, Parameter(help="Book directory")],
    *,
    edition: typ.Annotated[
        str | None, Parameter(help="Edition to publish", env_var="BOOKPRESS_EDITION")
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="BOOKPRESS_OUTPUT_DIR"),
    ] = None,
    converter_path: typ.Annotated[
        Path | None,
        Parameter(help="Path to the PrinceXML executable", env_var="BOOKPRESS_PRINCE_PATH"),
    ] = None,
    keep_scratch: typ.Annotated[
        bool, Parameter(help="Keep intermediate HTML and CSS files")
    ] = False,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Publish ``book_dir`` and exit with the resulting status code."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    code = run_publish(
        book_dir,
        edition=edition,
        output_dir=output_dir,
        converter_path=converter_path,
        keep_scratch=keep_scratch,
    )
    if code is not ExitCode.SUCCESS:
        raise SystemExit(int(code))


@app.command(help="List the editions defined for a book.")
def editions(book_dir: typ.Annotated[Path, Parameter(help="Book directory")]) -> None:
    """Print one line per edition, marking the default one."""
    try:
        config = load_book_config(book_dir)
        default = config.get_edition(None).name
    except (BookConfigError, FileNotFoundError, YAMLError) as exc:
        _error(f"Invalid book configuration: {exc}")
        raise SystemExit(int(ExitCode.CONFIG_ERROR)) from exc
    for name, edition in config.editions.items():
        marker = " (default)" if name == default else ""
        print(f"{name}: {edition.format} -> {edition.output}{marker}")


def main(tokens: typ.Sequence[str] | None = None) -> None:
    """Invoke the Cyclopts application that powers the ``bookpress`` command.

    Examples
    --------
    >>> main(["editions", "my-book"])  # doctest: +SKIP
    print: pdf -> book.pdf (default)
    """
    app(tokens)


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
