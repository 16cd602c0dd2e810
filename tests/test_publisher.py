"""End-to-end tests for :class:`bookpress.publisher.PdfPublisher`.

The ``sample_book`` fixture provides a cover, a table of contents, two
chapters and an appendix; ``fake_converter`` replaces PrinceXML and captures
the composite HTML so the assertions can inspect it with BeautifulSoup.
"""

from __future__ import annotations

import io
from pathlib import Path

import msgspec
import pytest
from bs4 import BeautifulSoup

from bookpress._constants import PUBLISH_META_TEMPLATE
from bookpress.config import BookConfigError, load_book_config
from bookpress.converter import Diagnostic, PrinceConverter
from bookpress.errors import ConversionFailed, ConversionUnavailable
from bookpress.events import BookEvents, EventBus
from bookpress.publisher import PdfPublisher


class PublishMeta(msgspec.Struct):
    output_file: str
    edition: str
    generated_at: str
    diagnostics: int


@pytest.fixture
def publisher(sample_book: Path, fake_converter, quiet_console) -> PdfPublisher:
    return PdfPublisher(
        load_book_config(sample_book), converter=fake_converter, console=quiet_console
    )


def _soup(fake_converter) -> BeautifulSoup:
    return BeautifulSoup(fake_converter.calls[-1]["html"], "html.parser")


def test_publish_writes_pdf_and_metadata(
    publisher: PdfPublisher, sample_book: Path
) -> None:
    result = publisher.publish()

    output_dir = sample_book / "Output" / "print"
    assert result.output_path == output_dir / "sample.pdf"
    assert result.output_path.read_bytes().startswith(b"%PDF")
    assert result.diagnostics == []
    assert all(item.decorated for item in result.items)

    meta_path = output_dir / PUBLISH_META_TEMPLATE.format(edition="print")
    meta = msgspec.json.decode(meta_path.read_bytes(), type=PublishMeta)
    assert meta.output_file == "sample.pdf"
    assert meta.edition == "print"
    assert meta.diagnostics == 0
    assert meta.generated_at


def test_composite_html_follows_contents_order(
    publisher: PdfPublisher, fake_converter
) -> None:
    publisher.publish()

    soup = _soup(fake_converter)
    classes = [div["class"][1] for div in soup.select("body > div.item")]
    assert classes == ["cover", "toc", "chapter", "chapter", "appendix"]
    assert soup.select_one(".cover-title").get_text() == "Sample Book"
    assert [p.get_text() for p in soup.select("p.item-label")] == [
        "Chapter 1",
        "Chapter 2",
        "Appendix A",
    ]


def test_toc_links_match_heading_ids(publisher: PdfPublisher, fake_converter) -> None:
    publisher.publish()

    soup = _soup(fake_converter)
    links = [a["href"] for a in soup.select(".toc-list a")]
    assert links == [
        "#getting-started",
        "#summary",
        "#going-further",
        "#summary-2",
        "#reference",
    ]
    for href in links:
        assert soup.find(id=href[1:]) is not None


def test_code_and_stylesheets_reach_the_converter(
    publisher: PdfPublisher, fake_converter, sample_book: Path
) -> None:
    publisher.publish()

    call = fake_converter.calls[-1]
    assert call["stylesheets"] == ["default_styles.css", "generated_1.css"]
    assert call["base_url"] == (sample_book / "Contents").resolve().as_uri() + "/"
    block = _soup(fake_converter).select_one("div.codehilite")
    assert block["data-language"] == "python"


def test_book_templates_and_stylesheet_override_defaults(
    sample_book: Path, fake_converter, quiet_console
) -> None:
    templates = sample_book / "Resources" / "Templates"
    templates.mkdir(parents=True)
    (templates / "chapter.jinja").write_text(
        '<article class="item custom">{{ item.config.label }}</article>', encoding="utf-8"
    )
    (templates / "style.css").write_text("body { color: black; }", encoding="utf-8")
    publisher = PdfPublisher(
        load_book_config(sample_book), converter=fake_converter, console=quiet_console
    )

    publisher.publish()

    soup = _soup(fake_converter)
    assert [a.get_text() for a in soup.select("article.custom")] == [
        "Chapter 1",
        "Chapter 2",
    ]
    assert fake_converter.calls[-1]["stylesheets"][-1] == "style.css"


def test_edition_settings_apply(
    sample_book: Path, fake_converter, quiet_console, tmp_path: Path
) -> None:
    publisher = PdfPublisher(
        load_book_config(sample_book),
        "screen",
        converter=fake_converter,
        console=quiet_console,
        output_dir=tmp_path / "dist",
    )

    result = publisher.publish()

    assert result.output_path == tmp_path / "dist" / "book.pdf"
    assert fake_converter.calls[-1]["stylesheets"] == []
    assert [p.get_text() for p in _soup(fake_converter).select("p.item-label")] == [
        "Chapter 1",
        "Chapter 2",
    ]


def test_diagnostics_are_reported_in_order(
    publisher: PdfPublisher, fake_converter, console_output: io.StringIO
) -> None:
    fake_converter.diagnostics = [
        Diagnostic("warning", "book.html:3", "unknown property"),
        Diagnostic("error", "", "missing image"),
    ]

    result = publisher.publish()

    assert result.output_path.exists()
    lines = console_output.getvalue().splitlines()
    assert " PrinceXML errors and warnings" in lines
    assert lines.index("   [WARNING] unknown property (book.html:3)") < lines.index(
        "   [ERROR] missing image"
    )


def test_failed_conversion_reports_diagnostics_and_writes_nothing(
    publisher: PdfPublisher, fake_converter, console_output: io.StringIO
) -> None:
    fake_converter.fail = True
    fake_converter.diagnostics = [Diagnostic("error", "book.html:1", "bad markup")]

    with pytest.raises(ConversionFailed):
        publisher.publish()

    assert "[ERROR] bad markup (book.html:1)" in console_output.getvalue()
    assert not publisher.output_path.exists()
    assert not list(publisher.output_dir.glob(".bookpress-*-meta.json"))


def test_publish_events_wrap_the_run(
    sample_book: Path, fake_converter, quiet_console, mocker
) -> None:
    bus = EventBus()
    seen: list[str] = []
    bus.subscribe(BookEvents.PRE_PUBLISH, lambda ctx: seen.append(ctx.event.value))
    bus.subscribe(BookEvents.PRE_PARSE, lambda ctx: seen.append(ctx.event.value))
    bus.subscribe(BookEvents.POST_PUBLISH, lambda ctx: seen.append(ctx.event.value))
    extra = mocker.Mock()

    PdfPublisher(
        load_book_config(sample_book),
        bus=bus,
        plugins=[extra],
        converter=fake_converter,
        console=quiet_console,
    ).publish()

    extra.register.assert_called_once_with(bus)
    assert seen[0] == "publish.pre"
    assert seen[-1] == "publish.post"
    assert seen.count("parse.pre") == 5


def test_missing_content_file_is_a_config_error(
    publisher: PdfPublisher, sample_book: Path
) -> None:
    (sample_book / "Contents" / "chapter2.md").unlink()

    with pytest.raises(BookConfigError, match="chapter2.md"):
        publisher.publish()


def test_load_items_builds_item_config(publisher: PdfPublisher) -> None:
    items = publisher.load_items()

    assert [item.element for item in items] == [
        "cover",
        "toc",
        "chapter",
        "chapter",
        "appendix",
    ]
    assert items[0].original == ""
    assert items[2].original.startswith("# Getting Started")
    assert items[2].config["content"] == "chapter1.md"


def test_check_if_supported_locates_converter(
    sample_book: Path, quiet_console, mocker
) -> None:
    locate = mocker.patch(
        "bookpress.publisher.locate_converter", return_value=Path("/opt/prince")
    )
    publisher = PdfPublisher(load_book_config(sample_book), console=quiet_console)

    assert publisher.check_if_supported() is True
    assert isinstance(publisher.converter, PrinceConverter)
    assert locate.call_args.kwargs["console"] is quiet_console


def test_unavailable_converter_stops_before_parsing(
    sample_book: Path, quiet_console, mocker
) -> None:
    mocker.patch("bookpress.converter.shutil.which", return_value=None)
    parse = mocker.patch("bookpress.publisher.PublishingPipeline.run")
    publisher = PdfPublisher(load_book_config(sample_book), console=quiet_console)

    with pytest.raises(ConversionUnavailable):
        publisher.publish()

    parse.assert_not_called()
    assert not publisher.output_path.exists()


def test_post_publish_runs_after_artifact_and_metadata(
    sample_book: Path, fake_converter, quiet_console
) -> None:
    bus = EventBus()
    publisher = PdfPublisher(
        load_book_config(sample_book),
        bus=bus,
        converter=fake_converter,
        console=quiet_console,
    )
    meta_path = publisher.output_dir / PUBLISH_META_TEMPLATE.format(edition="print")
    observed: list[tuple[bool, bool]] = []

    def failing_consumer(ctx) -> None:
        observed.append((publisher.output_path.exists(), meta_path.exists()))
        msg = "notification failed"
        raise RuntimeError(msg)

    bus.subscribe(BookEvents.POST_PUBLISH, failing_consumer)

    with pytest.raises(RuntimeError, match="notification failed"):
        publisher.publish()

    assert observed == [(True, True)]
    assert publisher.output_path.exists()
    assert meta_path.exists()
