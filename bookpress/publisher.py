"""High-level orchestration for publishing a book edition as a PDF.

:class:`PdfPublisher` consumes a :class:`~bookpress.config.BookConfig`, builds
the items listed in ``book.contents``, runs them through
:class:`~bookpress.pipeline.PublishingPipeline` and hands the decorated items
to :class:`~bookpress.assembler.BookAssembler`. Converter diagnostics are
written to the console once the conversion finishes.

Example
-------
>>> from pathlib import Path
>>> from bookpress.config import load_book_config
>>> config = load_book_config(Path("my-book"))  # doctest: +SKIP
>>> result = PdfPublisher(config, "print").publish()  # doctest: +SKIP
>>> result.output_path  # doctest: +SKIP
PosixPath('my-book/Output/print/book.pdf')
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import json
import logging
import typing as typ
from pathlib import Path

from ._constants import CUSTOM_STYLESHEET, PUBLISH_META_TEMPLATE
from .assembler import BookAssembler
from .config import BookConfig, BookConfigError, EditionConfig
from .console import StdConsole, format_diagnostics
from .converter import PrinceConverter, locate_converter
from .decorator import TemplateDecorator
from .errors import ConversionError
from .events import BookEvents, EventBus, HookContext
from .items import Item, ItemStore
from .parser import MarkdownContentParser
from .pipeline import PublishingPipeline
from .plugins import default_plugins

if typ.TYPE_CHECKING:
    from .console import Console
    from .converter import Converter, Diagnostic
    from .events import Plugin
    from .parser import ContentParser

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class PublishResult:
    """Outcome of a successful publishing run."""

    output_path: Path
    diagnostics: list[Diagnostic]
    items: tuple[Item, ...]


class PdfPublisher:
    """Publish one edition of a book as a PDF through PrinceXML."""

    def __init__(
        self,
        config: BookConfig,
        edition: str | EditionConfig | None = None,
        *,
        bus: EventBus | None = None,
        plugins: typ.Iterable[Plugin] = (),
        use_default_plugins: bool = True,
        parser: ContentParser | None = None,
        decorator: TemplateDecorator | None = None,
        converter: Converter | None = None,
        console: Console | None = None,
        output_dir: Path | None = None,
        scratch_root: Path | None = None,
        keep_scratch: bool = False,
    ) -> None:
        """Prepare a publisher for ``edition``.

        Parameters
        ----------
        config : BookConfig
            Loaded book configuration.
        edition : str or EditionConfig, optional
            Edition to publish; defaults to ``book.edition`` or the first one.
        bus : EventBus, optional
            Bus to register consumers on; a fresh one is created by default.
        plugins : Iterable[Plugin], optional
            Extra plugins registered after the built-in ones.
        use_default_plugins : bool, optional
            Register :func:`bookpress.plugins.default_plugins` first.
        parser, decorator, converter : optional
            Adapter overrides. The converter is located lazily when omitted.
        console : Console, optional
            Receives diagnostics and converter prompts; defaults to stdio.
        output_dir : Path, optional
            Directory for the PDF; defaults to ``<book>/Output/<edition>``.
        scratch_root : Path, optional
            Parent directory for the assembler's scratch folders.
        keep_scratch : bool, optional
            Keep the scratch folder after the run.
        """
        self.config = config
        self.edition = (
            edition if isinstance(edition, EditionConfig) else config.get_edition(edition)
        )
        self.bus = bus or EventBus()
        if use_default_plugins:
            for plugin in default_plugins(self.edition):
                self.bus.add_plugin(plugin)
        for plugin in plugins:
            self.bus.add_plugin(plugin)
        self.parser = parser or MarkdownContentParser(self.edition.pygments_style)
        self.render_context: dict[str, typ.Any] = {
            "book": config.book,
            "edition": self.edition,
        }
        self.decorator = decorator or TemplateDecorator(
            custom_templates_dir=config.templates_dir, globals_=self.render_context
        )
        self.converter = converter
        self.console = console or StdConsole()
        self.output_dir = output_dir or config.output_dir / self.edition.name
        self.scratch_root = scratch_root
        self.keep_scratch = keep_scratch

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.edition.output

    def check_if_supported(self) -> bool:
        """Return ``True`` once a converter is available.

        Raises
        ------
        ConversionUnavailable
            If PrinceXML cannot be located and the console is not interactive.
        """
        self._resolve_converter()
        return True

    def load_items(self) -> list[Item]:
        """Build one item per ``book.contents`` entry, in document order.

        Raises
        ------
        BookConfigError
            If an entry references a content file that does not exist.
        """
        items: list[Item] = []
        for entry in self.config.contents:
            original = ""
            if entry.content:
                path = self.config.contents_dir / entry.content
                if not path.is_file():
                    msg = f"Content file '{path}' for '{entry.element}' not found."
                    raise BookConfigError(msg)
                original = path.read_text(encoding="utf-8")
            settings = dict(entry.options)
            settings["element"] = entry.element
            if entry.title:
                settings["title"] = entry.title
            items.append(Item(original=original, config=settings))
        return items

    def publish(self) -> PublishResult:
        """Run every phase and write the PDF to :attr:`output_path`.

        Returns
        -------
        PublishResult
            Output path, converter diagnostics and the decorated items.

        Raises
        ------
        BookConfigError
            If content files are missing.
        ParseError, RenderError, PipelineStateError
            If a phase fails; nothing is written.
        ConversionUnavailable, ConversionFailed
            If the converter cannot run or produces no output.

        Consumers of ``POST_PUBLISH`` run once the PDF and its metadata file
        are in place; an exception they raise propagates but leaves both.
        """
        converter = self._resolve_converter()
        store = ItemStore(self.load_items())
        reset = getattr(self.parser, "reset", None)
        if callable(reset):
            reset()

        self.bus.dispatch(
            BookEvents.PRE_PUBLISH, HookContext(BookEvents.PRE_PUBLISH, None)
        )
        pipeline = PublishingPipeline(
            store,
            self.bus,
            self.parser,
            self.decorator,
            render_context=self.render_context,
        )
        items = pipeline.run()

        assembler = BookAssembler(
            self.decorator,
            converter,
            include_styles=self.edition.include_styles,
            custom_stylesheet=self.config.templates_dir / CUSTOM_STYLESHEET,
            extra_css=self._generated_css(),
            base_url=self._base_url(),
            render_context=self.render_context,
            scratch_root=self.scratch_root,
            keep_scratch=self.keep_scratch,
        )
        output_path = self.output_path
        try:
            diagnostics = assembler.assemble_and_convert(items, output_path)
        except ConversionError as exc:
            self.report_diagnostics(exc.diagnostics)
            raise
        self.report_diagnostics(diagnostics)
        self._write_metadata(output_path, diagnostics)
        self.bus.dispatch(
            BookEvents.POST_PUBLISH, HookContext(BookEvents.POST_PUBLISH, None)
        )
        return PublishResult(output_path=output_path, diagnostics=diagnostics, items=items)

    def report_diagnostics(self, diagnostics: typ.Sequence[Diagnostic]) -> None:
        """Write the converter's messages to the console verbatim and in order."""
        lines = format_diagnostics(diagnostics)
        if not lines:
            return
        self.console.write_line()
        for line in lines:
            self.console.write_line(line)
        self.console.write_line()

    def _resolve_converter(self) -> Converter:
        if self.converter is None:
            executable = locate_converter(
                self.config.converter.path,
                default_paths=self.config.converter.default_paths,
                console=self.console,
            )
            logger.info("using PrinceXML at %s", executable)
            self.converter = PrinceConverter(executable)
        return self.converter

    def _generated_css(self) -> list[str]:
        stylesheet = getattr(self.parser, "stylesheet", None)
        return [stylesheet] if isinstance(stylesheet, str) and stylesheet else []

    def _base_url(self) -> str | None:
        contents = self.config.contents_dir
        if not contents.is_dir():
            return None
        return contents.resolve().as_uri() + "/"

    def _metadata_path(self) -> Path:
        filename = PUBLISH_META_TEMPLATE.format(edition=self.edition.name)
        return self.output_dir / filename

    def _write_metadata(self, output_path: Path, diagnostics: list[Diagnostic]) -> None:
        """Persist a small JSON record describing the finished run."""
        metadata = {
            "output_file": output_path.name,
            "edition": self.edition.name,
            "generated_at": dt.datetime.now(dt.UTC).isoformat(),
            "diagnostics": len(diagnostics),
        }
        self._metadata_path().write_text(json.dumps(metadata), encoding="utf-8")


__all__ = ["PdfPublisher", "PublishResult"]
